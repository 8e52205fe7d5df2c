"""Watershed plan extractor."""

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError
from seeds_clients import Message, OpenAIClient
from seeds_clients.core.base_client import BaseClient
from seeds_clients.core.types import CumulativeTracking

from watershed_extractor.core.config import ExtractionConfig
from watershed_extractor.core.exceptions import (
    ExtractionError,
    ExtractionValidationError,
    LLMError,
)
from watershed_extractor.core.pdf import PdfTextReader
from watershed_extractor.prompts.builder import PromptBuilder
from watershed_extractor.results.types import ExtractionResult
from watershed_extractor.schemas.plan import StructuredDocument

logger = logging.getLogger(__name__)


class PlanExtractor:
    """LLM-driven extractor turning watershed plan text into a StructuredDocument.

    Uses seeds-clients for LLM integration and Pydantic for schema validation.
    Supports any client from seeds-clients (OpenAI, Anthropic, Google, OpenRouter, etc.).

    Example:
        ```python
        from watershed_extractor import PlanExtractor

        extractor = PlanExtractor(model="gpt-4.1")
        result = extractor.extract_from_pdf("pdfs/Bell_Creek_Muddy_Creek_Watershed_Plan_2012.pdf")
        print(len(result.data.bmps))

        # Using Anthropic client
        from seeds_clients import AnthropicClient
        client = AnthropicClient(model="claude-sonnet-4-20250514")
        extractor = PlanExtractor(client=client)
        ```
    """

    _client: BaseClient

    def __init__(
        self,
        client: BaseClient | None = None,
        api_key: str | None = None,
        model: str = "gpt-4.1",
        cache_dir: str = "cache",
        cache_ttl_hours: float | None = 24.0,
        default_config: ExtractionConfig | None = None,
        pdf_reader: PdfTextReader | None = None,
    ) -> None:
        """Initialize the plan extractor.

        Args:
            client: Pre-configured LLM client from seeds-clients. If provided,
                api_key, model, cache_dir, and cache_ttl_hours are ignored.
            api_key: OpenAI API key. Only used if client is not provided.
                If not provided, uses OPENAI_API_KEY env var.
            model: LLM model to use. Only used if client is not provided.
            cache_dir: Directory for caching LLM responses. Only used if client is not provided.
            cache_ttl_hours: Cache TTL in hours. Only used if client is not provided.
            default_config: Default extraction configuration.
            pdf_reader: Reader used by extract_from_pdf.
        """
        self.default_config = default_config or ExtractionConfig()
        self.pdf_reader = pdf_reader or PdfTextReader()

        if client is not None:
            self._client = client
            self.model = client.model
        else:
            self.model = model
            self._client = OpenAIClient(
                api_key=api_key or os.getenv("OPENAI_API_KEY"),
                model=model,
                cache_dir=cache_dir,
                ttl_hours=cache_ttl_hours,
            )

    def extract(
        self,
        document: str,
        config: ExtractionConfig | None = None,
        field_hints: dict[str, str] | None = None,
        use_cache: bool | None = None,
    ) -> ExtractionResult:
        """Extract a structured plan document from cleaned text.

        Args:
            document: The plan text. Only the first `max_document_chars`
                characters are sent to the LLM.
            config: Extraction configuration (overrides default).
            field_hints: Additional hints for specific fields, keyed by JSON name.
            use_cache: Overrides `config.use_cache` for this call.

        Returns:
            ExtractionResult whose data has its report summary filled in.

        Raises:
            ExtractionValidationError: If no attempt produced schema-valid data.
            LLMError: If the LLM client keeps failing.
        """
        resolved_config = config or self.default_config
        prompt_builder = PromptBuilder(
            include_field_descriptions=resolved_config.include_field_descriptions,
            max_document_chars=resolved_config.max_document_chars,
        )

        messages = [
            Message(
                role="system",
                content=prompt_builder.build_system_prompt(resolved_config.system_prompt),
            ),
            Message(
                role="user",
                content=prompt_builder.build_extraction_prompt(
                    document=document,
                    schema=StructuredDocument,
                    field_hints=field_hints,
                ),
            ),
        ]

        llm_kwargs: dict[str, Any] = {
            "temperature": resolved_config.temperature,
        }
        if resolved_config.max_tokens:
            llm_kwargs["max_tokens"] = resolved_config.max_tokens

        response = self._call_llm_with_retry(
            messages=messages,
            schema=StructuredDocument,
            config=resolved_config,
            use_cache=use_cache,
            **llm_kwargs,
        )

        parsed: StructuredDocument = response.parsed
        data = parsed.with_summary().model_copy(update={"model": response.model})
        logger.info(
            "Extracted %d goals, %d BMPs (model=%s, cached=%s)",
            len(data.goals),
            len(data.bmps),
            response.model,
            response.cached,
        )

        return ExtractionResult(
            data=data,
            text_length=len(document),
            model_used=response.model,
            cached=response.cached,
            tokens_used=response.usage.total_tokens,
            cost_usd=response.tracking.cost_usd if response.tracking else None,
            raw_response=response.content,
        )

    def extract_from_pdf(
        self,
        path: str | Path,
        config: ExtractionConfig | None = None,
        use_cache: bool | None = None,
    ) -> ExtractionResult:
        """Read a plan PDF, clean its text and extract from it.

        Raises:
            PdfReadError: If the PDF cannot be read.
        """
        pdf = self.pdf_reader.read(path)
        logger.info("Extracting from %s (%d pages)", pdf.source_path, pdf.pages)
        result = self.extract(pdf.cleaned, config=config, use_cache=use_cache)
        return result.model_copy(
            update={"source_path": str(pdf.source_path), "page_count": pdf.pages}
        )

    def _call_llm_with_retry(
        self,
        messages: list[Message],
        schema: type[BaseModel],
        config: ExtractionConfig,
        use_cache: bool | None = None,
        **llm_kwargs: Any,
    ) -> Any:
        """Call LLM with retry logic and specific error handling.

        Returns:
            The LLM response if successful.

        Raises:
            ExtractionValidationError: If validation fails.
            LLMError: If the LLM call fails.
            ExtractionError: For other extraction failures.
        """
        cache_enabled = config.use_cache if use_cache is None else use_cache
        last_error: Exception | None = None

        for attempt in range(config.max_retries):
            try:
                logger.debug(
                    "Extraction attempt %d/%d (model=%s)",
                    attempt + 1,
                    config.max_retries,
                    self.model,
                )
                response = self._client.generate(
                    messages,
                    use_cache=cache_enabled,
                    response_format=schema,
                    **llm_kwargs,
                )

                if response.parsed is not None:
                    return response

                last_error = ExtractionValidationError(
                    "LLM did not return parsed data matching the schema",
                    raw_response=response.content,
                )
                logger.warning("Validation failed on attempt %d: No parsed data", attempt + 1)
            except ValidationError as e:
                last_error = ExtractionValidationError(
                    f"Validation error on attempt {attempt + 1}: {e}",
                    validation_errors=e.errors(),
                )
                logger.warning("Validation error on attempt %d: %s", attempt + 1, e)
                if not config.retry_on_validation_error:
                    break
            except Exception as e:
                last_error = LLMError(
                    f"LLM call failed on attempt {attempt + 1}: {e}",
                    last_error=e,
                )
                logger.warning("LLM call failed on attempt %d: %s", attempt + 1, e)

        logger.error("Extraction failed after %d attempts: %s", config.max_retries, last_error)
        if isinstance(last_error, ExtractionError):
            raise last_error
        raise ExtractionError(str(last_error)) from last_error

    @property
    def cumulative_tracking(self) -> CumulativeTracking:
        """Cumulative request, cost and cache statistics of the underlying client."""
        return self._client.cumulative_tracking

    def reset_cumulative_tracking(self) -> None:
        """Reset cumulative tracking, e.g. between preset runs."""
        self._client.reset_cumulative_tracking()
