"""Precision/recall/F1 computation and aggregation across categories."""

import statistics
from collections.abc import Sequence

from watershed_extractor.evaluation.types import AccuracyMetric, OverallMetrics


def calculate_f1(precision: float, recall: float) -> float:
    """Harmonic mean of precision and recall, 0.0 when both are 0."""
    if precision + recall <= 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


def calculate_metric(
    correct_count: int,
    total_extracted: int,
    total_expected: int,
) -> AccuracyMetric:
    """Build the metric for one category from its counts.

    Example:
        ```python
        metric = calculate_metric(3, total_extracted=4, total_expected=5)
        metric.precision  # 0.75
        metric.recall  # 0.6
        ```
    """
    precision = correct_count / total_extracted if total_extracted > 0 else 0.0
    recall = correct_count / total_expected if total_expected > 0 else 0.0

    return AccuracyMetric(
        precision=precision,
        recall=recall,
        f1_score=calculate_f1(precision, recall),
        correct_count=correct_count,
        total_extracted=total_extracted,
        total_expected=total_expected,
    )


def aggregate(metrics: Sequence[AccuracyMetric]) -> OverallMetrics:
    """Macro-average precision and recall, then take F1 of the averages.

    The F1 is computed from the averaged precision and recall, not averaged
    from the per-category F1 scores.
    """
    if not metrics:
        return OverallMetrics()

    precision = statistics.mean(m.precision for m in metrics)
    recall = statistics.mean(m.recall for m in metrics)

    return OverallMetrics(
        precision=precision,
        recall=recall,
        f1_score=calculate_f1(precision, recall),
    )
