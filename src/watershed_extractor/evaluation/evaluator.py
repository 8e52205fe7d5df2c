"""Accuracy evaluator comparing an extracted plan against its ground truth."""

import logging
from collections.abc import Mapping
from typing import Any

from watershed_extractor.core.config import ScoringConfig
from watershed_extractor.evaluation.comparators import (
    CategoryRule,
    MatchStrategy,
    compare_category,
    first_match,
    resolve_rules,
)
from watershed_extractor.evaluation.metrics import aggregate
from watershed_extractor.evaluation.types import (
    AccuracyMetric,
    AccuracyTestResult,
    ComparisonEvent,
    DocumentPair,
)
from watershed_extractor.schemas.plan import CATEGORIES, Category, StructuredDocument

DocumentInput = StructuredDocument | Mapping[str, Any]

logger = logging.getLogger(__name__)


def as_document(document: DocumentInput) -> StructuredDocument:
    """Coerce a mapping (e.g. parsed ground truth JSON) into a StructuredDocument."""
    if isinstance(document, StructuredDocument):
        return document
    return StructuredDocument.model_validate(dict(document))


def document_pair(candidate: StructuredDocument, reference: StructuredDocument) -> DocumentPair:
    """Snapshot both documents in their camelCase JSON shape."""
    return DocumentPair(
        expected=reference.model_dump(mode="json", by_alias=True, exclude_none=True),
        actual=candidate.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


class AccuracyEvaluator:
    """Scores an extracted document against ground truth, category by category.

    Provides per-category precision, recall and F1, overall macro-averaged
    metrics, and the full trail of comparison events for auditing.

    Example:
        ```python
        from watershed_extractor.evaluation import AccuracyEvaluator

        evaluator = AccuracyEvaluator()
        result = evaluator.build_report(extracted, ground_truth, test_case="preset1")

        print(f"Precision: {result.metrics.precision:.2%}")
        print(f"Recall: {result.metrics.recall:.2%}")
        print(f"F1: {result.metrics.f1_score:.2%}")
        ```
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        rules: Mapping[Category, CategoryRule] | None = None,
        strategy: MatchStrategy = first_match,
    ) -> None:
        """Initialize the evaluator.

        Args:
            config: Scoring configuration; only threshold overrides are used here.
            rules: Replacement rule table. Defaults to CATEGORY_RULES.
            strategy: Pairs extracted records with ground truth records.
        """
        self.config = config or ScoringConfig()
        self.rules = resolve_rules(self.config.category_thresholds, rules)
        self.strategy = strategy

    def build_report(
        self,
        candidate: DocumentInput,
        reference: DocumentInput,
        test_case: str = "test",
    ) -> AccuracyTestResult:
        """Compare all six categories and assemble the accuracy result.

        Args:
            candidate: The extracted document.
            reference: The ground truth document.
            test_case: Label of the test case.

        Returns:
            AccuracyTestResult with overall metrics, per-category details
            and every comparison event.
        """
        candidate_doc = as_document(candidate)
        reference_doc = as_document(reference)

        details: dict[str, AccuracyMetric] = {}
        comparisons: dict[str, list[ComparisonEvent]] = {}

        for category in CATEGORIES:
            outcome = compare_category(
                candidate_doc.records(category),
                reference_doc.records(category),
                self.rules[category],
                strategy=self.strategy,
            )
            details[category.value] = outcome.metric
            comparisons[category.value] = outcome.events
            logger.debug(
                "%s: %d/%d extracted matched, %d expected",
                category.value,
                outcome.metric.correct_count,
                outcome.metric.total_extracted,
                outcome.metric.total_expected,
            )

        metrics = aggregate(list(details.values()))
        logger.info(
            "Scored %s: P=%.3f R=%.3f F1=%.3f",
            test_case,
            metrics.precision,
            metrics.recall,
            metrics.f1_score,
        )

        return AccuracyTestResult(
            test_case=test_case,
            metrics=metrics,
            details=details,
            detailed_comparisons=comparisons,
            comparison=document_pair(candidate_doc, reference_doc),
            compare_mode="default",
            extract_model=candidate_doc.model,
        )


def build_report(
    candidate: DocumentInput,
    reference: DocumentInput,
    test_case: str = "test",
) -> AccuracyTestResult:
    """Score with the default rules and first-match pairing."""
    return AccuracyEvaluator().build_report(candidate, reference, test_case=test_case)
