"""Configuration classes for extraction and scoring."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ScoringStrategy = Literal["default", "ai"]


class ExtractionConfig(BaseModel):
    """Configuration for the extraction process."""

    model_config = ConfigDict(frozen=True)

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Maximum number of retry attempts",
    )
    retry_on_validation_error: bool = Field(
        default=True,
        description="Whether to retry on Pydantic validation errors",
    )

    # LLM settings
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="LLM temperature for extraction (lower = more deterministic)",
    )
    max_tokens: int | None = Field(
        default=4000,
        description="Maximum tokens for LLM response",
    )
    use_cache: bool = Field(
        default=True,
        description="Whether to serve repeated requests from the client cache",
    )

    # Prompt settings
    system_prompt: str | None = Field(
        default=None,
        description="Custom system prompt override",
    )
    include_field_descriptions: bool = Field(
        default=True,
        description="Include field descriptions in the prompt",
    )
    max_document_chars: int = Field(
        default=8000,
        ge=1,
        description="Document text beyond this many characters is not sent to the LLM",
    )


class ScoringConfig(BaseModel):
    """Configuration for accuracy scoring.

    Selects between the deterministic fuzzy-matching comparator and the
    LLM-based comparator, and carries the knobs of each.

    Example:
        ```python
        config = ScoringConfig(strategy="ai", compare_model="gpt-4.1-mini")
        scorer = AccuracyScorer(config=config, client=client)
        ```
    """

    model_config = ConfigDict(frozen=True)

    strategy: ScoringStrategy = Field(
        default="default",
        description="'default' for fuzzy matching, 'ai' for LLM-based comparison",
    )
    category_thresholds: dict[str, float] = Field(
        default_factory=dict,
        description="Per-category word-overlap threshold overrides, keyed by category name",
    )

    # AI comparison settings
    compare_model: str = Field(
        default="gpt-4.1",
        description="Model used by the AI comparator",
    )
    max_items_per_category: int = Field(
        default=25,
        ge=1,
        description="Records per collection included in the AI comparison prompt",
    )
    max_field_chars: int = Field(
        default=300,
        ge=10,
        description="String fields longer than this are truncated in the AI prompt",
    )
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=8000)
    max_retries: int = Field(default=2, ge=1)
    use_cache: bool = Field(default=False)

    @field_validator("category_thresholds")
    @classmethod
    def _validate_thresholds(cls, value: dict[str, float]) -> dict[str, float]:
        for category, threshold in value.items():
            if not 0.0 <= threshold <= 1.0:
                raise ValueError(
                    f"Threshold for {category!r} must be between 0.0 and 1.0, got {threshold}"
                )
        return value

    @classmethod
    def from_env(cls, **overrides: object) -> ScoringConfig:
        """Build a config from COMPARE_MODE and COMPARE_MODEL environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, object] = {}
        if mode := os.getenv("COMPARE_MODE"):
            values["strategy"] = mode
        if model := os.getenv("COMPARE_MODEL"):
            values["compare_model"] = model
        values.update(overrides)
        return cls.model_validate(values)
