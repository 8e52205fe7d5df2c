"""Result types for extraction outputs."""

from pydantic import BaseModel, Field

from watershed_extractor.schemas.plan import StructuredDocument


class ExtractionResult(BaseModel):
    """Result of extracting a structured document from plan text.

    Failed extractions raise instead of producing a result, so `data` is
    always present.
    """

    # Core result
    data: StructuredDocument = Field(description="The extracted structured document")

    # Source
    source_path: str | None = Field(
        default=None,
        description="PDF the text was read from, when extracting from a file",
    )
    page_count: int | None = Field(default=None, ge=0, description="Pages in the source PDF")
    text_length: int | None = Field(
        default=None,
        ge=0,
        description="Length of the cleaned document text",
    )

    # Metadata
    model_used: str | None = Field(
        default=None,
        description="LLM model used for extraction",
    )
    cached: bool = Field(
        default=False,
        description="Whether result was served from cache",
    )
    tokens_used: int | None = Field(
        default=None,
        description="Total tokens used for extraction",
    )
    cost_usd: float | None = Field(
        default=None,
        description="Estimated cost in USD",
    )
    raw_response: str | None = Field(
        default=None,
        description="Raw LLM response for debugging",
    )
