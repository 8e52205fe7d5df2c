"""Custom exceptions for watershed-extractor."""

from pathlib import Path
from typing import Any


class WatershedExtractorError(Exception):
    """Base exception for all watershed-extractor errors."""

    pass


class ExtractionError(WatershedExtractorError):
    """Raised when extraction fails."""

    def __init__(
        self,
        message: str,
        raw_response: str | None = None,
        last_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.raw_response = raw_response
        self.last_error = last_error


class ExtractionValidationError(ExtractionError):
    """Raised when extracted data fails Pydantic validation."""

    def __init__(
        self,
        message: str,
        validation_errors: Any = None,
        raw_response: str | None = None,
    ) -> None:
        super().__init__(message, raw_response=raw_response)
        self.validation_errors = validation_errors


class LLMError(ExtractionError):
    """Raised when the LLM client fails or returns an invalid response."""

    pass


class PdfReadError(ExtractionError):
    """Raised when a PDF cannot be opened or yields no text."""

    pass


class GroundTruthNotFoundError(WatershedExtractorError):
    """Raised when no ground truth document exists for a test case."""

    def __init__(self, case_id: str, path: str | Path | None = None) -> None:
        message = f"Ground truth not found for case {case_id!r}"
        if path is not None:
            message += f" (looked in {path})"
        super().__init__(message)
        self.case_id = case_id
        self.path = Path(path) if path is not None else None


class ConfigurationError(WatershedExtractorError):
    """Raised when extraction or scoring configuration is invalid."""

    pass
