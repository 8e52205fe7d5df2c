"""Tests for category comparison rules and match strategies."""

import pytest

from watershed_extractor.evaluation.comparators import (
    CATEGORY_RULES,
    CategoryRule,
    MatchStrategy,
    both_have,
    compare_category,
    first_match,
    first_present,
    one_to_one_match,
    resolve_rules,
)
from watershed_extractor.evaluation.types import ComparisonType
from watershed_extractor.schemas.plan import CATEGORIES, Category

# ============================================================================
# Identity selection
# ============================================================================


class TestFirstPresent:
    """Tests for identity selectors."""

    def test_first_field_wins(self) -> None:
        """Test the first non-empty field is selected."""
        select = first_present("name", "description")
        assert select({"name": "Cover Crops", "description": "Plant rye"}) == "Cover Crops"

    def test_falls_back_to_later_field(self) -> None:
        """Test empty or missing fields are skipped."""
        select = first_present("name", "description")
        assert select({"name": "  ", "description": "Plant rye"}) == "Plant rye"
        assert select({"description": "Plant rye"}) == "Plant rye"

    def test_none_when_no_field_present(self) -> None:
        """Test None is returned when no identity field is present."""
        assert first_present("name")({"type": "Sediment"}) is None

    def test_numbers_become_text(self) -> None:
        """Test numeric identity values are converted to text."""
        assert first_present("id")({"id": 7}) == "7"


class TestBothHave:
    """Tests for the exact-match trigger."""

    def test_true_only_when_both_have_field(self) -> None:
        """Test the trigger requires the field on both records."""
        check = both_have("name")
        assert check({"name": "a"}, {"name": "b"}) is True
        assert check({"name": "a"}, {"description": "b"}) is False
        assert check({"name": ""}, {"name": "b"}) is False


# ============================================================================
# Rule table
# ============================================================================


class TestCategoryRules:
    """Tests for the per-category rule table."""

    def test_every_category_has_a_rule(self) -> None:
        """Test all six categories are covered."""
        assert set(CATEGORY_RULES) == set(CATEGORIES)
        for category, rule in CATEGORY_RULES.items():
            assert rule.category is category

    def test_goal_identity_prefers_description(self) -> None:
        """Test goals are identified by description, then title, then objective."""
        rule = CATEGORY_RULES[Category.GOALS]
        assert rule.identity({"title": "T", "description": "D"}) == "D"
        assert rule.identity({"title": "T", "objective": "O"}) == "T"
        assert rule.identity({"objective": "O"}) == "O"

    def test_outreach_identity_prefers_description(self) -> None:
        """Test outreach records are identified by description before name."""
        rule = CATEGORY_RULES[Category.OUTREACH]
        assert rule.identity({"name": "Field Day", "description": "Annual day"}) == "Annual day"

    def test_bmp_requires_exact_name(self) -> None:
        """Test BMPs with names on both sides must match exactly."""
        rule = CATEGORY_RULES[Category.BMPS]
        assert rule.matches({"name": "Cover Crops"}, {"name": "cover crops"}) is True
        assert rule.matches({"name": "Cover Crop"}, {"name": "Cover Crops"}) is False

    def test_bmp_falls_back_to_fuzzy_description(self) -> None:
        """Test BMPs without a name on one side match fuzzily."""
        rule = CATEGORY_RULES[Category.BMPS]
        assert rule.matches(
            {"description": "Cover Crop"},
            {"name": "Cover Crops"},
        ) is True

    def test_geographic_area_matches_on_huc(self) -> None:
        """Test equal HUC codes match regardless of names."""
        rule = CATEGORY_RULES[Category.GEOGRAPHIC_AREAS]
        assert rule.matches(
            {"name": "Upper Bell Creek", "huc": "080302040101"},
            {"name": "Bell Creek Headwaters", "huc": "080302040101"},
        ) is True

    def test_geographic_area_different_huc_falls_back_to_name(self) -> None:
        """Test differing HUC codes do not prevent a name match."""
        rule = CATEGORY_RULES[Category.GEOGRAPHIC_AREAS]
        assert rule.matches(
            {"name": "Bell Creek Watershed", "huc": "1"},
            {"name": "Bell Creek Watershed", "huc": "2"},
        ) is True

    def test_geographic_area_threshold(self) -> None:
        """Test geographic areas use the stricter 0.8 overlap threshold."""
        rule = CATEGORY_RULES[Category.GEOGRAPHIC_AREAS]
        assert rule.threshold == 0.8
        # 3 of 4 words in common: 0.75
        assert rule.matches(
            {"name": "Muddy Creek Upper Watershed"},
            {"name": "Muddy Creek Lower Watershed"},
        ) is False

    def test_with_threshold_returns_copy(self) -> None:
        """Test overriding a threshold leaves the original rule untouched."""
        rule = CATEGORY_RULES[Category.MONITORING]
        relaxed = rule.with_threshold(0.3)
        assert relaxed.threshold == 0.3
        assert rule.threshold == 0.7
        assert relaxed.identity is rule.identity


class TestResolveRules:
    """Tests for threshold overrides."""

    def test_no_overrides(self) -> None:
        """Test the default table is returned unchanged."""
        assert resolve_rules() == CATEGORY_RULES

    def test_override_by_category_name(self) -> None:
        """Test overrides are keyed by the category's JSON name."""
        rules = resolve_rules({"geographicAreas": 0.6})
        assert rules[Category.GEOGRAPHIC_AREAS].threshold == 0.6
        assert CATEGORY_RULES[Category.GEOGRAPHIC_AREAS].threshold == 0.8

    def test_unknown_category(self) -> None:
        """Test an unknown category name is rejected."""
        with pytest.raises(ValueError):
            resolve_rules({"wetlands": 0.5})


# ============================================================================
# Match strategies
# ============================================================================


def _equal(candidate: dict, reference: dict) -> bool:
    return candidate["k"] == reference["k"]


class TestMatchStrategies:
    """Tests for candidate to reference assignment."""

    def test_strategies_satisfy_protocol(self) -> None:
        """Test the provided strategies are MatchStrategy callables."""
        assert isinstance(first_match, MatchStrategy)
        assert isinstance(one_to_one_match, MatchStrategy)

    def test_first_match_reuses_references(self) -> None:
        """Test first_match lets several candidates claim one reference."""
        candidates = [{"k": 1}, {"k": 1}, {"k": 2}]
        references = [{"k": 1}, {"k": 3}]
        assert first_match(candidates, references, _equal) == [0, 0, None]

    def test_first_match_picks_first_in_scan_order(self) -> None:
        """Test the earliest matching reference is chosen."""
        references = [{"k": 1}, {"k": 1}]
        assert first_match([{"k": 1}], references, _equal) == [0]

    def test_one_to_one_consumes_references(self) -> None:
        """Test one_to_one_match claims each reference at most once."""
        candidates = [{"k": 1}, {"k": 1}, {"k": 1}]
        references = [{"k": 1}, {"k": 1}]
        assert one_to_one_match(candidates, references, _equal) == [0, 1, None]


# ============================================================================
# Category comparison
# ============================================================================


class TestCompareCategory:
    """Tests for compare_category."""

    @pytest.fixture
    def bmp_rule(self) -> CategoryRule:
        return CATEGORY_RULES[Category.BMPS]

    def test_all_match(self, bmp_rule: CategoryRule) -> None:
        """Test identical collections score perfectly."""
        records = [{"name": "Cover Crops"}, {"name": "Terraces"}]
        outcome = compare_category(records, records, bmp_rule)

        assert outcome.metric.correct_count == 2
        assert outcome.metric.precision == 1.0
        assert outcome.metric.recall == 1.0
        assert [e.type for e in outcome.events] == [ComparisonType.PERFECT_MATCH] * 2

    def test_exact_name_mismatch(self, bmp_rule: CategoryRule) -> None:
        """Test 'Cover Crop' vs 'Cover Crops' is a surplus plus a missing item."""
        outcome = compare_category(
            [{"name": "Cover Crop"}],
            [{"name": "Cover Crops"}],
            bmp_rule,
        )

        assert [e.type for e in outcome.events] == [
            ComparisonType.SURPLUS_ACTUAL,
            ComparisonType.MISSING_EXPECTED,
        ]
        assert outcome.metric.correct_count == 0
        assert outcome.metric.precision == 0.0
        assert outcome.metric.recall == 0.0
        assert outcome.metric.f1_score == 0.0

    def test_event_fields_and_messages(self, bmp_rule: CategoryRule) -> None:
        """Test events carry identity texts and readable messages."""
        outcome = compare_category(
            [{"name": "Terraces"}, {"name": "Wetland Restoration"}],
            [{"name": "Terraces"}, {"name": "Cover Crops"}],
            bmp_rule,
        )
        match, surplus, missing = outcome.events

        assert match.category == "bmps"
        assert match.expected == "Terraces"
        assert match.actual == "Terraces"
        assert match.message == '✅ Found expected BMP: "Terraces"'

        assert surplus.expected is None
        assert surplus.actual == "Wetland Restoration"
        assert surplus.message == (
            '❓ Found unexpected BMP: "Wetland Restoration" (not in ground truth)'
        )

        assert missing.expected == "Cover Crops"
        assert missing.actual is None
        assert missing.message == '❌ Missing expected BMP: "Cover Crops"'

    def test_candidate_events_precede_missing_events(self) -> None:
        """Test event order: candidates in order, then missing references in order."""
        rule = CATEGORY_RULES[Category.MONITORING]
        outcome = compare_category(
            [{"description": "pH"}, {"description": "bacteria counts"}],
            [{"description": "turbidity"}, {"description": "ph"}, {"description": "flow"}],
            rule,
        )

        assert [(e.type, e.actual or e.expected) for e in outcome.events] == [
            (ComparisonType.PERFECT_MATCH, "pH"),
            (ComparisonType.SURPLUS_ACTUAL, "bacteria counts"),
            (ComparisonType.MISSING_EXPECTED, "turbidity"),
            (ComparisonType.MISSING_EXPECTED, "flow"),
        ]

    def test_first_match_double_counts(self) -> None:
        """Test near-duplicate candidates both count against one reference."""
        rule = CATEGORY_RULES[Category.MONITORING]
        outcome = compare_category(
            [{"description": "turbidity"}, {"description": "Turbidity "}],
            [{"description": "turbidity"}, {"description": "flow"}],
            rule,
        )

        assert outcome.metric.correct_count == 2
        assert outcome.metric.precision == 1.0
        assert outcome.metric.recall == 1.0
        assert outcome.events[-1].type == ComparisonType.MISSING_EXPECTED
        assert outcome.events[-1].expected == "flow"

    def test_one_to_one_strategy_avoids_double_count(self) -> None:
        """Test one_to_one_match leaves the duplicate candidate unmatched."""
        rule = CATEGORY_RULES[Category.MONITORING]
        outcome = compare_category(
            [{"description": "turbidity"}, {"description": "Turbidity "}],
            [{"description": "turbidity"}, {"description": "flow"}],
            rule,
            strategy=one_to_one_match,
        )

        assert outcome.metric.correct_count == 1
        assert outcome.metric.recall == 0.5

    def test_missing_pass_is_independent_of_assignment(self) -> None:
        """Test a reference matched by some candidate is never reported missing."""
        rule = CATEGORY_RULES[Category.MONITORING]
        outcome = compare_category(
            [{"description": "turbidity"}],
            [{"description": "turbidity"}, {"description": "Turbidity"}],
            rule,
        )

        assert outcome.metric.correct_count == 1
        assert outcome.metric.recall == 0.5
        assert not [e for e in outcome.events if e.type == ComparisonType.MISSING_EXPECTED]

    def test_empty_candidates(self, bmp_rule: CategoryRule) -> None:
        """Test nothing extracted yields only missing events and zero metrics."""
        outcome = compare_category([], [{"name": "Terraces"}], bmp_rule)

        assert outcome.metric.total_extracted == 0
        assert outcome.metric.total_expected == 1
        assert outcome.metric.precision == 0.0
        assert [e.type for e in outcome.events] == [ComparisonType.MISSING_EXPECTED]

    def test_both_empty(self, bmp_rule: CategoryRule) -> None:
        """Test empty collections yield zero metrics and no events."""
        outcome = compare_category([], [], bmp_rule)

        assert outcome.events == []
        assert outcome.metric.f1_score == 0.0

    def test_record_without_identity_never_matches(self, bmp_rule: CategoryRule) -> None:
        """Test records with no identity field are surplus and missing."""
        outcome = compare_category([{"type": "Sediment"}], [{"type": "Sediment"}], bmp_rule)

        assert [e.type for e in outcome.events] == [
            ComparisonType.SURPLUS_ACTUAL,
            ComparisonType.MISSING_EXPECTED,
        ]
        assert outcome.events[0].actual is None

    def test_no_silent_drops(self) -> None:
        """Test every candidate and every reference appears in some event."""
        rule = CATEGORY_RULES[Category.IMPLEMENTATION]
        candidates = [
            {"description": "Install fencing"},
            {"activity": "Plant cover crops"},
            {"description": "Hire coordinator"},
        ]
        references = [
            {"description": "install fencing along creek"},
            {"description": "Plant cover crops"},
            {"description": "Monitor streamflow"},
        ]
        outcome = compare_category(candidates, references, rule)

        missing = [e for e in outcome.events if e.type == ComparisonType.MISSING_EXPECTED]
        assert len(outcome.events) >= len(candidates) + len(missing)
        actual_texts = {e.actual for e in outcome.events}
        expected_texts = {e.expected for e in outcome.events}
        for candidate in candidates:
            assert rule.identity(candidate) in actual_texts
        for reference in references:
            assert rule.identity(reference) in expected_texts
