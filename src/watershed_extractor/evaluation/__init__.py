"""Accuracy evaluation of extracted watershed plans.

This module scores an extracted plan against manually authored ground
truth, category by category, with fuzzy text matching (or, optionally,
an LLM judge), and reports precision, recall and F1 together with every
individual comparison.

Example:
    ```python
    from watershed_extractor.evaluation import (
        AccuracyEvaluator,
        AccuracyReporter,
        GroundTruthStore,
    )

    truth = GroundTruthStore("test-data/ground-truth").load("preset_plan")
    result = AccuracyEvaluator().build_report(extracted, truth, test_case="preset1")

    print(f"F1 Score: {result.metrics.f1_score:.2%}")
    AccuracyReporter(result).save("report.md")
    ```
"""

from watershed_extractor.evaluation.ai_comparator import AIComparator, summarize_document
from watershed_extractor.evaluation.comparators import (
    CATEGORY_RULES,
    CategoryRule,
    MatchStrategy,
    compare_category,
    first_match,
    first_present,
    one_to_one_match,
    resolve_rules,
)
from watershed_extractor.evaluation.evaluator import AccuracyEvaluator, build_report
from watershed_extractor.evaluation.matching import fuzzy_match, normalize_text, word_overlap
from watershed_extractor.evaluation.metrics import aggregate, calculate_f1, calculate_metric
from watershed_extractor.evaluation.reporters import AccuracyReporter
from watershed_extractor.evaluation.runner import AccuracyRun, AccuracyTestRunner
from watershed_extractor.evaluation.scorer import AccuracyScorer
from watershed_extractor.evaluation.storage import (
    DEFAULT_PRESETS,
    GroundTruthStore,
    PresetCatalog,
    PresetTestCase,
    SnapshotWriter,
)
from watershed_extractor.evaluation.types import (
    AccuracyMetric,
    AccuracyTestResult,
    CategoryComparison,
    ComparisonEvent,
    ComparisonType,
    DocumentPair,
    OverallMetrics,
    ScoringOutcome,
)

__all__ = [
    # Types
    "ComparisonType",
    "ComparisonEvent",
    "AccuracyMetric",
    "OverallMetrics",
    "CategoryComparison",
    "DocumentPair",
    "AccuracyTestResult",
    "ScoringOutcome",
    # Matching
    "fuzzy_match",
    "normalize_text",
    "word_overlap",
    # Comparators
    "CategoryRule",
    "CATEGORY_RULES",
    "MatchStrategy",
    "first_match",
    "one_to_one_match",
    "first_present",
    "compare_category",
    "resolve_rules",
    # Metrics
    "calculate_f1",
    "calculate_metric",
    "aggregate",
    # Scoring
    "AccuracyEvaluator",
    "build_report",
    "AIComparator",
    "summarize_document",
    "AccuracyScorer",
    # Storage & runs
    "GroundTruthStore",
    "PresetTestCase",
    "PresetCatalog",
    "DEFAULT_PRESETS",
    "SnapshotWriter",
    "AccuracyTestRunner",
    "AccuracyRun",
    # Reporting
    "AccuracyReporter",
]
