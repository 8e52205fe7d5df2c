"""Core extraction functionality."""

from watershed_extractor.core.config import ExtractionConfig, ScoringConfig
from watershed_extractor.core.exceptions import (
    ConfigurationError,
    ExtractionError,
    ExtractionValidationError,
    GroundTruthNotFoundError,
    LLMError,
    PdfReadError,
    WatershedExtractorError,
)
from watershed_extractor.core.extractor import PlanExtractor
from watershed_extractor.core.pdf import PdfText, PdfTextReader, clean_text

__all__ = [
    "PlanExtractor",
    "PdfTextReader",
    "PdfText",
    "clean_text",
    "ExtractionConfig",
    "ScoringConfig",
    "WatershedExtractorError",
    "ExtractionError",
    "ExtractionValidationError",
    "LLMError",
    "PdfReadError",
    "GroundTruthNotFoundError",
    "ConfigurationError",
]
