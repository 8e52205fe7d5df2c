"""LLM-based comparison of an extracted plan against its ground truth.

The deterministic comparator only recognises records whose wording
overlaps. This comparator asks an LLM to judge equivalence instead and to
report the same result shape. Its output is never trusted blindly: the
response is parsed and validated, missing categories are zero-filled, and
the overall metrics are recomputed from the per-category details. When
the response cannot be used at all, a zero-valued result with one
diagnostic event per category is returned instead of failing the run.
"""

import json
import logging
import os
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from seeds_clients import Message, OpenAIClient
from seeds_clients.core.base_client import BaseClient

from watershed_extractor.core.config import ScoringConfig
from watershed_extractor.core.exceptions import LLMError
from watershed_extractor.evaluation.evaluator import DocumentInput, as_document, document_pair
from watershed_extractor.evaluation.metrics import aggregate, calculate_metric
from watershed_extractor.evaluation.types import (
    AccuracyMetric,
    AccuracyTestResult,
    ComparisonEvent,
    ComparisonType,
    ScoringOutcome,
)
from watershed_extractor.prompts.builder import PromptBuilder
from watershed_extractor.schemas.plan import CATEGORIES, StructuredDocument

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?\s*```$")


class _ComparisonResponse(BaseModel):
    """The part of the LLM response that is kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    details: dict[str, AccuracyMetric] = Field(default_factory=dict)
    detailed_comparisons: dict[str, list[ComparisonEvent]] = Field(default_factory=dict)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _CODE_FENCE.sub("", text.strip()).strip()


def _truncate(value: Any, max_chars: int) -> Any:
    if isinstance(value, str):
        return value if len(value) <= max_chars else value[:max_chars] + "..."
    if isinstance(value, dict):
        return {key: _truncate(item, max_chars) for key, item in value.items()}
    if isinstance(value, list):
        return [_truncate(item, max_chars) for item in value]
    return value


def summarize_document(
    document: StructuredDocument,
    max_items: int = 25,
    max_chars: int = 300,
) -> dict[str, Any]:
    """Reduce a document to the scored categories, bounded in size.

    Each category keeps its first `max_items` records and every string is
    cut to `max_chars` characters.
    """
    return {
        category.value: _truncate(document.records(category)[:max_items], max_chars)
        for category in CATEGORIES
    }


class AIComparator:
    """Scores an extraction by asking an LLM to compare it with ground truth.

    Example:
        ```python
        comparator = AIComparator(config=ScoringConfig(compare_model="gpt-4.1"))
        outcome = comparator.evaluate(extracted, ground_truth, test_case="preset1")
        if outcome.fallback_used:
            print(f"AI comparison unusable: {outcome.error}")
        ```
    """

    def __init__(
        self,
        client: BaseClient | None = None,
        config: ScoringConfig | None = None,
        api_key: str | None = None,
    ) -> None:
        """Initialize the comparator.

        Args:
            client: Pre-configured LLM client. When given, it is used for every
                comparison and its model is reported as the compare model.
            config: Scoring configuration (model, prompt bounds, retries).
            api_key: OpenAI API key. Only used if client is not provided.
        """
        self.config = config or ScoringConfig()
        self._api_key = api_key
        self._clients: dict[str, BaseClient] = {}
        self._injected = client
        self._prompt_builder = PromptBuilder()

    def _client_for(self, model: str) -> BaseClient:
        if self._injected is not None:
            return self._injected
        if model not in self._clients:
            self._clients[model] = OpenAIClient(
                api_key=self._api_key or os.getenv("OPENAI_API_KEY"),
                model=model,
            )
        return self._clients[model]

    def evaluate(
        self,
        candidate: DocumentInput,
        reference: DocumentInput,
        model: str | None = None,
        test_case: str = "test",
    ) -> ScoringOutcome:
        """Compare two documents with an LLM.

        Args:
            candidate: The extracted document.
            reference: The ground truth document.
            model: Overrides `config.compare_model` when no client was injected.
            test_case: Label of the test case.

        Returns:
            ScoringOutcome; `fallback_used` is True when the response could
            not be parsed or validated.

        Raises:
            LLMError: If the LLM client keeps failing.
        """
        candidate_doc = as_document(candidate)
        reference_doc = as_document(reference)
        if self._injected is not None:
            model = self._injected.model
        else:
            model = model or self.config.compare_model

        content = self._request(candidate_doc, reference_doc, model)

        try:
            parsed = _ComparisonResponse.model_validate(json.loads(strip_code_fences(content)))
        except (json.JSONDecodeError, ValidationError) as e:
            error = f"{type(e).__name__}: {e}"
            logger.warning(
                "AI comparison response unusable for %s, falling back: %s", test_case, e
            )
            return ScoringOutcome(
                result=self.fallback_result(
                    candidate_doc, reference_doc, error, model=model, test_case=test_case
                ),
                fallback_used=True,
                error=error,
            )

        details: dict[str, AccuracyMetric] = {}
        comparisons: dict[str, list[ComparisonEvent]] = {}
        for category in CATEGORIES:
            metric = parsed.details.get(category.value)
            if metric is None:
                logger.debug("AI comparison omitted %s, scoring it as zero", category.value)
                metric = calculate_metric(
                    0,
                    len(candidate_doc.records(category)),
                    len(reference_doc.records(category)),
                )
            details[category.value] = metric
            comparisons[category.value] = parsed.detailed_comparisons.get(category.value, [])

        metrics = aggregate(list(details.values()))
        logger.info(
            "AI-scored %s with %s: P=%.3f R=%.3f F1=%.3f",
            test_case,
            model,
            metrics.precision,
            metrics.recall,
            metrics.f1_score,
        )

        return ScoringOutcome(
            result=AccuracyTestResult(
                test_case=test_case,
                metrics=metrics,
                details=details,
                detailed_comparisons=comparisons,
                comparison=document_pair(candidate_doc, reference_doc),
                compare_mode="ai",
                compare_model=model,
                extract_model=candidate_doc.model,
            )
        )

    def compare(
        self,
        candidate: DocumentInput,
        reference: DocumentInput,
        model: str | None = None,
        test_case: str = "test",
    ) -> AccuracyTestResult:
        """Like `evaluate`, returning only the result."""
        return self.evaluate(candidate, reference, model=model, test_case=test_case).result

    def fallback_result(
        self,
        candidate: StructuredDocument,
        reference: StructuredDocument,
        error: str,
        model: str | None = None,
        test_case: str = "test",
    ) -> AccuracyTestResult:
        """Zero-valued result with one diagnostic event per category."""
        details: dict[str, AccuracyMetric] = {}
        comparisons: dict[str, list[ComparisonEvent]] = {}
        for category in CATEGORIES:
            details[category.value] = calculate_metric(
                0,
                len(candidate.records(category)),
                len(reference.records(category)),
            )
            comparisons[category.value] = [
                ComparisonEvent(
                    type=ComparisonType.DIAGNOSTIC,
                    category=category.value,
                    message=f"⚠️ AI comparison failed, {category.value} not scored: {error}",
                )
            ]

        return AccuracyTestResult(
            test_case=test_case,
            metrics=aggregate(list(details.values())),
            details=details,
            detailed_comparisons=comparisons,
            comparison=document_pair(candidate, reference),
            compare_mode="ai",
            compare_model=model or self.config.compare_model,
            extract_model=candidate.model,
        )

    def _request(
        self,
        candidate: StructuredDocument,
        reference: StructuredDocument,
        model: str,
    ) -> str:
        """Send the comparison prompt, retrying client failures."""
        prompt = self._prompt_builder.build_comparison_prompt(
            extracted=summarize_document(
                candidate, self.config.max_items_per_category, self.config.max_field_chars
            ),
            ground_truth=summarize_document(
                reference, self.config.max_items_per_category, self.config.max_field_chars
            ),
        )
        messages = [
            Message(role="system", content=PromptBuilder.COMPARISON_SYSTEM_PROMPT),
            Message(role="user", content=prompt),
        ]
        llm_kwargs: dict[str, Any] = {"temperature": self.config.temperature}
        if self.config.max_tokens:
            llm_kwargs["max_tokens"] = self.config.max_tokens

        client = self._client_for(model)
        last_error: Exception | None = None
        for attempt in range(self.config.max_retries):
            try:
                logger.debug(
                    "AI comparison attempt %d/%d (model=%s)",
                    attempt + 1,
                    self.config.max_retries,
                    model,
                )
                response = client.generate(
                    messages,
                    use_cache=self.config.use_cache,
                    **llm_kwargs,
                )
                return response.content or ""
            except Exception as e:
                last_error = e
                logger.warning("AI comparison call failed on attempt %d: %s", attempt + 1, e)

        logger.error(
            "AI comparison failed after %d attempts: %s", self.config.max_retries, last_error
        )
        raise LLMError(
            f"AI comparison failed after {self.config.max_retries} attempts: {last_error}",
            last_error=last_error,
        ) from last_error

