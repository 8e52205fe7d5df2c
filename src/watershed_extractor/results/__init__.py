"""Result types for extraction outputs."""

from watershed_extractor.results.types import ExtractionResult

__all__ = ["ExtractionResult"]
