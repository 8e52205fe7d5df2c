"""Accuracy reporters for generating reports in various formats."""

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from watershed_extractor.evaluation.types import AccuracyTestResult, ComparisonType


class AccuracyReporter:
    """Generate accuracy reports in various formats.

    Supports text, JSON, and Markdown output formats.

    Example:
        ```python
        runs = runner.run_all()

        reporter = AccuracyReporter([run.result for run in runs])
        reporter.save("report.md")  # Auto-detects format from extension

        # Or get report as string
        print(reporter.to_text())
        ```
    """

    def __init__(
        self,
        results: AccuracyTestResult | Sequence[AccuracyTestResult],
        title: str = "Watershed Plan Extraction Accuracy Report",
    ) -> None:
        """Initialize the reporter.

        Args:
            results: One accuracy result or several (e.g. one per preset).
            title: Title for the report.
        """
        if isinstance(results, AccuracyTestResult):
            results = [results]
        self.results = list(results)
        self.title = title

    @staticmethod
    def _event_counts(result: AccuracyTestResult) -> dict[ComparisonType, int]:
        return {event_type: len(result.events(event_type)) for event_type in ComparisonType}

    @staticmethod
    def _mode(result: AccuracyTestResult) -> str:
        if result.compare_mode == "ai" and result.compare_model:
            return f"ai ({result.compare_model})"
        return result.compare_mode

    def to_text(self, include_details: bool = True) -> str:
        """Generate a plain text report.

        Args:
            include_details: Whether to include the comparison events.

        Returns:
            Plain text report string.
        """
        lines = [
            "=" * 70,
            f"  {self.title}",
            "=" * 70,
            f"  Generated: {datetime.now().isoformat()}",
        ]

        for result in self.results:
            counts = self._event_counts(result)
            lines.extend([
                "",
                "-" * 70,
                f"  {result.test_case}",
                "-" * 70,
                f"  Compare Mode:         {self._mode(result)}",
                f"  Extract Model:        {result.extract_model or 'unknown'}",
                f"  Precision:            {result.metrics.precision:.2%}",
                f"  Recall:               {result.metrics.recall:.2%}",
                f"  F1 Score:             {result.metrics.f1_score:.2%}",
                f"  Matches:              {counts[ComparisonType.PERFECT_MATCH]}",
                f"  Missing:              {counts[ComparisonType.MISSING_EXPECTED]}",
                f"  Unexpected:           {counts[ComparisonType.SURPLUS_ACTUAL]}",
                "",
                "  Per-category:",
            ])
            for category, metric in result.details.items():
                lines.append(
                    f"    {category:16} P:{metric.precision:.0%} R:{metric.recall:.0%} "
                    f"F1:{metric.f1_score:.0%} "
                    f"({metric.correct_count}/{metric.total_extracted} extracted, "
                    f"{metric.total_expected} expected)"
                )

            if include_details:
                for category, events in result.detailed_comparisons.items():
                    if not events:
                        continue
                    lines.append(f"\n  {category}:")
                    lines.extend(f"    {event.message}" for event in events)

        lines.extend(["", "=" * 70])
        return "\n".join(lines)

    def to_json(self, include_details: bool = True) -> dict[str, Any]:
        """Generate a JSON-serializable report dictionary.

        The compared documents are left out; result snapshots carry them.

        Returns:
            Dictionary suitable for JSON serialization.
        """
        exclude = {"comparison"} if include_details else {"comparison", "detailed_comparisons"}
        return {
            "title": self.title,
            "generated": datetime.now().isoformat(),
            "results": [
                result.model_dump(mode="json", by_alias=True, exclude=exclude)
                for result in self.results
            ],
        }

    def to_markdown(self, include_details: bool = True) -> str:
        """Generate a Markdown report.

        Args:
            include_details: Whether to include the comparison events.

        Returns:
            Markdown formatted report string.
        """
        lines = [
            f"# {self.title}",
            "",
            f"*Generated: {datetime.now().isoformat()}*",
            "",
            "## Summary",
            "",
            "| Test Case | Mode | Precision | Recall | F1 |",
            "|-----------|------|----------:|-------:|---:|",
        ]
        for result in self.results:
            lines.append(
                f"| {result.test_case} | {self._mode(result)} | "
                f"{result.metrics.precision:.2%} | {result.metrics.recall:.2%} | "
                f"{result.metrics.f1_score:.2%} |"
            )

        for result in self.results:
            lines.extend([
                "",
                f"## {result.test_case}",
                "",
                "| Category | Precision | Recall | F1 | Correct | Extracted | Expected |",
                "|----------|----------:|-------:|---:|--------:|----------:|---------:|",
            ])
            for category, metric in result.details.items():
                lines.append(
                    f"| {category} | {metric.precision:.0%} | {metric.recall:.0%} | "
                    f"{metric.f1_score:.0%} | {metric.correct_count} | "
                    f"{metric.total_extracted} | {metric.total_expected} |"
                )

            if include_details:
                for category, events in result.detailed_comparisons.items():
                    if not events:
                        continue
                    lines.extend(["", f"### {category}", ""])
                    lines.extend(f"- {event.message}" for event in events)

        lines.append("")
        return "\n".join(lines)

    def save(
        self,
        path: str | Path,
        format: str = "auto",
        include_details: bool = True,
    ) -> None:
        """Save the report to a file.

        Args:
            path: Output file path.
            format: Output format ("text", "json", "markdown", or "auto").
                   "auto" detects from file extension.
            include_details: Whether to include the comparison events.
        """
        path = Path(path)

        if format == "auto":
            suffix = path.suffix.lower()
            if suffix == ".json":
                format = "json"
            elif suffix in (".md", ".markdown"):
                format = "markdown"
            else:
                format = "text"

        if format == "json":
            content = json.dumps(
                self.to_json(include_details=include_details),
                indent=2,
                ensure_ascii=False,
            )
        elif format == "markdown":
            content = self.to_markdown(include_details=include_details)
        else:
            content = self.to_text(include_details=include_details)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def print_summary(self) -> None:
        """Print a concise summary to stdout."""
        print(f"\n{'=' * 50}")
        print(f"  {self.title}")
        print(f"{'=' * 50}")
        for result in self.results:
            print(f"  {result.test_case} [{self._mode(result)}]")
            print(f"    Precision: {result.metrics.precision:.2%}")
            print(f"    Recall:    {result.metrics.recall:.2%}")
            print(f"    F1 Score:  {result.metrics.f1_score:.2%}")
        print(f"{'=' * 50}\n")
