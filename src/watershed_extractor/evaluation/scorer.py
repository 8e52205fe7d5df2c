"""Scoring entry point selecting the deterministic or AI comparator."""

import logging

from seeds_clients.core.base_client import BaseClient

from watershed_extractor.core.config import ScoringConfig
from watershed_extractor.evaluation.ai_comparator import AIComparator
from watershed_extractor.evaluation.evaluator import AccuracyEvaluator, DocumentInput
from watershed_extractor.evaluation.types import AccuracyTestResult, ScoringOutcome

logger = logging.getLogger(__name__)


class AccuracyScorer:
    """Scores extractions with the strategy chosen in `ScoringConfig`.

    Example:
        ```python
        scorer = AccuracyScorer(ScoringConfig.from_env())
        result = scorer.score(extracted, ground_truth, test_case="preset3")
        ```
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        evaluator: AccuracyEvaluator | None = None,
        ai_comparator: AIComparator | None = None,
        client: BaseClient | None = None,
    ) -> None:
        """Initialize the scorer.

        Args:
            config: Scoring configuration; `strategy` selects the comparator.
            evaluator: Deterministic comparator. Built from config if omitted.
            ai_comparator: AI comparator. Built lazily from config and client
                the first time the "ai" strategy is used.
            client: LLM client handed to a lazily built AI comparator.
        """
        self.config = config or ScoringConfig()
        self.evaluator = evaluator or AccuracyEvaluator(self.config)
        self._ai_comparator = ai_comparator
        self._client = client

    @property
    def ai_comparator(self) -> AIComparator:
        if self._ai_comparator is None:
            self._ai_comparator = AIComparator(client=self._client, config=self.config)
        return self._ai_comparator

    def evaluate(
        self,
        candidate: DocumentInput,
        reference: DocumentInput,
        test_case: str = "test",
    ) -> ScoringOutcome:
        """Score and report whether the AI fallback was used."""
        logger.debug("Scoring %s with strategy %r", test_case, self.config.strategy)
        if self.config.strategy == "ai":
            return self.ai_comparator.evaluate(candidate, reference, test_case=test_case)
        return ScoringOutcome(
            result=self.evaluator.build_report(candidate, reference, test_case=test_case)
        )

    def score(
        self,
        candidate: DocumentInput,
        reference: DocumentInput,
        test_case: str = "test",
    ) -> AccuracyTestResult:
        """Score an extracted document against ground truth."""
        return self.evaluate(candidate, reference, test_case=test_case).result
