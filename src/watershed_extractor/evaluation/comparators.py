"""Category comparators for accuracy evaluation.

Each category of a watershed plan is compared with the same algorithm:

- every extracted record is paired with a ground truth record by a
  `MatchStrategy` (first fuzzy match in ground truth order by default),
  yielding a `perfect_match` or `surplus_actual` event;
- every ground truth record that no extracted record matches yields a
  `missing_expected` event.

What differs per category is captured by a `CategoryRule`: which fields
identify a record, the word-overlap threshold, when an exact match is
required, and an optional code field (HUC) that matches on equality alone.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol, runtime_checkable

from watershed_extractor.evaluation.matching import (
    DEFAULT_THRESHOLD,
    fuzzy_match,
    normalize_text,
)
from watershed_extractor.evaluation.metrics import calculate_metric
from watershed_extractor.evaluation.types import (
    CategoryComparison,
    ComparisonEvent,
    ComparisonType,
)
from watershed_extractor.schemas.plan import Category

Record = Mapping[str, Any]
IdentitySelector = Callable[[Record], str | None]
MatchPredicate = Callable[[Record, Record], bool]


def first_present(*fields: str) -> IdentitySelector:
    """Select the first non-empty field among `fields` as identity text.

    Example:
        ```python
        select = first_present("name", "description")
        select({"description": "Fencing"})  # "Fencing"
        ```
    """

    def select(record: Record) -> str | None:
        for field in fields:
            value = record.get(field)
            if value is not None and str(value).strip():
                return str(value)
        return None

    select.__name__ = f"first_present({', '.join(fields)})"
    return select


def both_have(field: str) -> MatchPredicate:
    """Exact-match trigger: both records carry a non-empty `field`."""

    def check(candidate: Record, reference: Record) -> bool:
        return bool(candidate.get(field)) and bool(reference.get(field))

    return check


@dataclass(frozen=True)
class CategoryRule:
    """How records of one category are identified and matched.

    Attributes:
        category: The category this rule applies to.
        label: Singular noun used in event messages.
        identity: Selects the identity text of a record.
        threshold: Word-overlap threshold for fuzzy matching.
        exact_when: Pairwise trigger for requiring an exact normalized match.
        code_field: Field whose exact equality matches two records outright.
    """

    category: Category
    label: str
    identity: IdentitySelector
    threshold: float = DEFAULT_THRESHOLD
    exact_when: MatchPredicate | None = None
    code_field: str | None = None

    def matches(self, candidate: Record, reference: Record) -> bool:
        """Whether an extracted record denotes the same item as a reference."""
        if self.code_field is not None:
            code = normalize_text(candidate.get(self.code_field))
            if code and code == normalize_text(reference.get(self.code_field)):
                return True

        require_exact = self.exact_when(candidate, reference) if self.exact_when else False
        return fuzzy_match(
            self.identity(candidate),
            self.identity(reference),
            threshold=self.threshold,
            require_exact=require_exact,
        )

    def with_threshold(self, threshold: float) -> CategoryRule:
        """Return a copy of this rule using a different threshold."""
        return replace(self, threshold=threshold)


CATEGORY_RULES: dict[Category, CategoryRule] = {
    # 0.5 so a condensed goal ("Reduce sediment by 20%") matches its full ground
    # truth sentence at 4/8 word overlap. ScoringConfig(category_thresholds=
    # {"goals": 0.7}) restores the uniform 0.7 threshold.
    Category.GOALS: CategoryRule(
        category=Category.GOALS,
        label="goal",
        identity=first_present("description", "title", "objective"),
        threshold=0.5,
    ),
    Category.BMPS: CategoryRule(
        category=Category.BMPS,
        label="BMP",
        identity=first_present("name", "description"),
        exact_when=both_have("name"),
    ),
    Category.IMPLEMENTATION: CategoryRule(
        category=Category.IMPLEMENTATION,
        label="implementation",
        identity=first_present("description", "activity", "parameter"),
    ),
    Category.MONITORING: CategoryRule(
        category=Category.MONITORING,
        label="monitoring",
        identity=first_present("description", "parameter"),
    ),
    Category.OUTREACH: CategoryRule(
        category=Category.OUTREACH,
        label="outreach",
        identity=first_present("description", "name"),
    ),
    Category.GEOGRAPHIC_AREAS: CategoryRule(
        category=Category.GEOGRAPHIC_AREAS,
        label="geographic area",
        identity=first_present("name", "description"),
        threshold=0.8,
        code_field="huc",
    ),
}


# ============================================================================
# Match strategies
# ============================================================================


@runtime_checkable
class MatchStrategy(Protocol):
    """Assigns each extracted record to at most one reference record.

    Returns one entry per candidate: the index of the matched reference,
    or None when the candidate is unmatched.
    """

    def __call__(
        self,
        candidates: Sequence[Record],
        references: Sequence[Record],
        matches: MatchPredicate,
    ) -> list[int | None]: ...


def first_match(
    candidates: Sequence[Record],
    references: Sequence[Record],
    matches: MatchPredicate,
) -> list[int | None]:
    """Pair each candidate with the first matching reference in scan order.

    A reference may be claimed by any number of candidates.
    """
    assignment: list[int | None] = []
    for candidate in candidates:
        found = next(
            (i for i, reference in enumerate(references) if matches(candidate, reference)),
            None,
        )
        assignment.append(found)
    return assignment


def one_to_one_match(
    candidates: Sequence[Record],
    references: Sequence[Record],
    matches: MatchPredicate,
) -> list[int | None]:
    """Like `first_match`, but each reference is claimed at most once."""
    assignment: list[int | None] = []
    claimed: set[int] = set()
    for candidate in candidates:
        found = next(
            (
                i
                for i, reference in enumerate(references)
                if i not in claimed and matches(candidate, reference)
            ),
            None,
        )
        if found is not None:
            claimed.add(found)
        assignment.append(found)
    return assignment


# ============================================================================
# Category comparison
# ============================================================================


def compare_category(
    candidates: Sequence[Record],
    references: Sequence[Record],
    rule: CategoryRule,
    strategy: MatchStrategy = first_match,
) -> CategoryComparison:
    """Classify every extracted and ground truth record of one category.

    Args:
        candidates: Extracted records, in extraction order.
        references: Ground truth records, in ground truth order.
        rule: Identity and matching rule for the category.
        strategy: Pairs candidates with references.

    Returns:
        CategoryComparison with the category metric and one event per
        extracted record followed by one event per unmatched reference.
    """
    category = rule.category.value
    events: list[ComparisonEvent] = []
    correct_count = 0

    assignment = strategy(candidates, references, rule.matches)
    for candidate, index in zip(candidates, assignment):
        actual = rule.identity(candidate)
        if index is not None:
            correct_count += 1
            events.append(
                ComparisonEvent(
                    type=ComparisonType.PERFECT_MATCH,
                    category=category,
                    expected=rule.identity(references[index]),
                    actual=actual,
                    message=f'✅ Found expected {rule.label}: "{actual}"',
                )
            )
        else:
            events.append(
                ComparisonEvent(
                    type=ComparisonType.SURPLUS_ACTUAL,
                    category=category,
                    expected=None,
                    actual=actual,
                    message=f'❓ Found unexpected {rule.label}: "{actual}" (not in ground truth)',
                )
            )

    # Independent of the assignment above: a reference is missing only if
    # no candidate matches it at all.
    for reference in references:
        if any(rule.matches(candidate, reference) for candidate in candidates):
            continue
        expected = rule.identity(reference)
        events.append(
            ComparisonEvent(
                type=ComparisonType.MISSING_EXPECTED,
                category=category,
                expected=expected,
                actual=None,
                message=f'❌ Missing expected {rule.label}: "{expected}"',
            )
        )

    return CategoryComparison(
        metric=calculate_metric(correct_count, len(candidates), len(references)),
        events=events,
    )


def resolve_rules(
    thresholds: Mapping[str, float] | None = None,
    rules: Mapping[Category, CategoryRule] | None = None,
) -> dict[Category, CategoryRule]:
    """Return the rule table with per-category threshold overrides applied.

    Raises:
        ValueError: If a threshold override names an unknown category.
    """
    resolved = dict(rules or CATEGORY_RULES)
    for name, threshold in (thresholds or {}).items():
        category = Category(name)
        resolved[category] = resolved[category].with_threshold(threshold)
    return resolved
