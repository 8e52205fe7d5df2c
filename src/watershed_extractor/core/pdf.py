"""Plain text extraction from plan PDFs using PyMuPDF (fitz)."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

from watershed_extractor.core.exceptions import PdfReadError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse line breaks and whitespace runs to single spaces.

    Example:
        ```python
        clean_text("Bell Creek\\r\\n\\n  Watershed ")  # "Bell Creek Watershed"
        ```
    """
    text = text.replace("\r\n", "\n")
    text = re.sub(r"\n+", "\n", text)
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class PdfText:
    """Text read from a PDF, before cleaning."""

    source_path: Path
    text: str
    pages: int

    @property
    def cleaned(self) -> str:
        return clean_text(self.text)


class PdfTextReader:
    """Reads the text layer of a PDF.

    Usage:
        reader = PdfTextReader()
        pdf = reader.read("pdfs/Bell_Creek_Muddy_Creek_Watershed_Plan_2012.pdf")
        prompt_text = pdf.cleaned
    """

    def read(self, path: str | Path) -> PdfText:
        """Read all pages of a PDF.

        Args:
            path: Path to the PDF file.

        Returns:
            PdfText with the concatenated page text and the page count.

        Raises:
            PdfReadError: If the file is missing, cannot be opened, or has no
                text layer.
        """
        path = Path(path)
        if not path.exists():
            raise PdfReadError(f"PDF not found: {path}")

        try:
            doc = fitz.open(path)
        except Exception as e:
            raise PdfReadError(f"Failed to open PDF {path}: {e}", last_error=e) from e

        try:
            text = "\n".join(page.get_text("text") for page in doc)
            pages = len(doc)
        finally:
            doc.close()

        if not text.strip():
            raise PdfReadError(f"No extractable text in {path} (scanned PDF?)")

        logger.debug("Read %d pages (%d chars) from %s", pages, len(text), path)
        return PdfText(source_path=path, text=text, pages=pages)
