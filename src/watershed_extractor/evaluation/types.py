"""Type definitions for accuracy evaluation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResultModel(BaseModel):
    """Base for result models: camelCase on the wire, immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ComparisonType(str, Enum):
    """Classification of a single comparison event."""

    PERFECT_MATCH = "perfect_match"  # Extracted item matches a ground truth item
    MISSING_EXPECTED = "missing_expected"  # Ground truth item nothing matched
    SURPLUS_ACTUAL = "surplus_actual"  # Extracted item not in ground truth
    DIAGNOSTIC = "diagnostic"  # Comparison could not be performed (AI fallback)


class ComparisonEvent(ResultModel):
    """One auditable step of comparing extracted data with ground truth."""

    type: ComparisonType = Field(description="Classification of this event")
    category: str = Field(description="Record category, e.g. 'goals'")
    expected: str | None = Field(default=None, description="Ground truth identity text")
    actual: str | None = Field(default=None, description="Extracted identity text")
    message: str = Field(default="", description="Human-readable explanation")


class AccuracyMetric(ResultModel):
    """Precision, recall and F1 for one category.

    precision = correct_count / total_extracted, recall = correct_count /
    total_expected, each 0.0 when its denominator is 0. Recall is not capped:
    first-match pairing lets several extracted items count against the same
    ground truth item.
    """

    precision: float = Field(default=0.0, ge=0.0, le=1.0)
    recall: float = Field(default=0.0, ge=0.0)
    f1_score: float = Field(default=0.0, ge=0.0)
    correct_count: int = Field(default=0, ge=0, description="Extracted items that matched")
    total_extracted: int = Field(default=0, ge=0, description="Number of extracted items")
    total_expected: int = Field(default=0, ge=0, description="Number of ground truth items")


class OverallMetrics(ResultModel):
    """Macro-averaged precision and recall, with F1 of those averages."""

    precision: float = Field(default=0.0, ge=0.0, le=1.0)
    recall: float = Field(default=0.0, ge=0.0)
    f1_score: float = Field(default=0.0, ge=0.0)


class CategoryComparison(ResultModel):
    """Metric and event trail for a single category."""

    metric: AccuracyMetric
    events: list[ComparisonEvent] = Field(default_factory=list)


class DocumentPair(ResultModel):
    """The two documents a result was computed from."""

    expected: dict[str, Any] = Field(description="Ground truth document")
    actual: dict[str, Any] = Field(description="Extracted document")


class AccuracyTestResult(ResultModel):
    """Full accuracy result of one extraction against its ground truth.

    Example:
        ```python
        result = build_report(extracted, ground_truth, test_case="preset1")
        print(f"F1: {result.metrics.f1_score:.2%}")
        for event in result.detailed_comparisons["bmps"]:
            print(event.message)
        ```
    """

    test_case: str = Field(default="test", description="Label of the test case")
    metrics: OverallMetrics = Field(default_factory=OverallMetrics)
    details: dict[str, AccuracyMetric] = Field(
        default_factory=dict,
        description="Per-category metrics keyed by category name",
    )
    detailed_comparisons: dict[str, list[ComparisonEvent]] = Field(
        default_factory=dict,
        description="Per-category comparison events keyed by category name",
    )
    comparison: DocumentPair | None = Field(
        default=None,
        description="The compared documents, for traceability",
    )
    compare_mode: str = Field(default="default", description="'default' or 'ai'")
    compare_model: str | None = Field(default=None, description="Model used for AI comparison")
    extract_model: str | None = Field(default=None, description="Model used for extraction")

    def events(self, event_type: ComparisonType) -> list[ComparisonEvent]:
        """Return all events of one type across categories."""
        return [
            event
            for events in self.detailed_comparisons.values()
            for event in events
            if event.type == event_type
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class ScoringOutcome(BaseModel):
    """A scoring result plus how it was obtained.

    `fallback_used` is True when the AI comparator's response could not be
    used and `result` holds zero-valued metrics instead.
    """

    model_config = ConfigDict(frozen=True)

    result: AccuracyTestResult
    fallback_used: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Whether the result reflects an actual comparison."""
        return not self.fallback_used
