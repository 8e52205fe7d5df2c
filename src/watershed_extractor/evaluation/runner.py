"""End-to-end accuracy test runs: extract, load ground truth, score, snapshot."""

import logging
from dataclasses import dataclass
from pathlib import Path

from watershed_extractor.core.exceptions import ExtractionError
from watershed_extractor.core.extractor import PlanExtractor
from watershed_extractor.evaluation.scorer import AccuracyScorer
from watershed_extractor.evaluation.storage import (
    GROUND_TRUTH_DIR,
    PDF_DIR,
    RESULTS_DIR,
    GroundTruthStore,
    PresetCatalog,
    SnapshotWriter,
)
from watershed_extractor.evaluation.types import AccuracyTestResult, ScoringOutcome
from watershed_extractor.results.types import ExtractionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccuracyRun:
    """Everything produced by one accuracy test run."""

    case_id: str
    extraction: ExtractionResult
    outcome: ScoringOutcome
    snapshot_path: Path | None = None

    @property
    def result(self) -> AccuracyTestResult:
        return self.outcome.result


class AccuracyTestRunner:
    """Runs accuracy tests for plan PDFs with known ground truth.

    Example:
        ```python
        runner = AccuracyTestRunner(
            extractor=PlanExtractor(model="gpt-4.1"),
            scorer=AccuracyScorer(ScoringConfig.from_env()),
            data_dir="test-data",
        )
        run = runner.run_preset("preset4")
        print(f"F1: {run.result.metrics.f1_score:.2%}")
        ```
    """

    def __init__(
        self,
        extractor: PlanExtractor,
        scorer: AccuracyScorer | None = None,
        data_dir: str | Path = "test-data",
        catalog: PresetCatalog | None = None,
        write_snapshots: bool = True,
    ) -> None:
        self.extractor = extractor
        self.scorer = scorer or AccuracyScorer()
        self.data_dir = Path(data_dir)
        self.catalog = catalog or PresetCatalog()
        self.ground_truth = GroundTruthStore(self.data_dir / GROUND_TRUTH_DIR)
        self.snapshots = SnapshotWriter(self.data_dir / RESULTS_DIR) if write_snapshots else None

    def run_preset(self, preset_id: str) -> AccuracyRun:
        """Run the accuracy test for a catalog preset.

        Raises:
            ConfigurationError: If the preset id is unknown.
            ExtractionError: If the preset PDF is missing or extraction fails.
            GroundTruthNotFoundError: If the preset ground truth is missing.
        """
        preset = self.catalog.get(preset_id)
        logger.info("Testing preset %s (%s)", preset.id, preset.name)
        return self.run(
            pdf_path=self.data_dir / PDF_DIR / preset.pdf_file,
            ground_truth=preset.ground_truth_file,
            case_id=preset.id,
            test_case=f"{preset.id}-{preset.name}",
        )

    def run(
        self,
        pdf_path: str | Path,
        ground_truth: str,
        case_id: str,
        test_case: str | None = None,
    ) -> AccuracyRun:
        """Run the accuracy test for any PDF and ground truth file.

        Args:
            pdf_path: Plan PDF to extract from.
            ground_truth: Ground truth name in the ground-truth directory.
            case_id: Key of the result snapshot.
            test_case: Label stored in the result. Defaults to case_id.
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.is_file():
            raise ExtractionError(f"Test PDF not found: {pdf_path}")

        # Fail on missing ground truth before spending an LLM call
        reference = self.ground_truth.load(ground_truth)

        extraction = self.extractor.extract_from_pdf(pdf_path)

        outcome = self.scorer.evaluate(extraction.data, reference, test_case=test_case or case_id)
        if outcome.fallback_used:
            logger.warning("Scoring of %s fell back to zero metrics: %s", case_id, outcome.error)

        snapshot_path = None
        if self.snapshots is not None:
            snapshot_path = self.snapshots.write(case_id, extraction.data, outcome.result)

        return AccuracyRun(
            case_id=case_id,
            extraction=extraction,
            outcome=outcome,
            snapshot_path=snapshot_path,
        )

    def run_all(self) -> list[AccuracyRun]:
        """Run every preset in catalog order."""
        return [self.run_preset(preset_id) for preset_id in self.catalog.ids]
