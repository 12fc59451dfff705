"""Plain-text document parsers.

These parsers provide the text-only extraction path: full document text and
per-page text with no layout information. The PDF parser uses pdfplumber and
falls back to PyPDF2 when pdfplumber cannot open the file. A failure on a
single page yields an empty page rather than aborting the document.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .exceptions import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class ParsedPage:
    """A single page of parsed content."""

    page_number: int
    text: str
    metadata: dict = field(default_factory=dict)


@dataclass
class ParsedDocument:
    """Structured output from document parsing."""

    pages: list[ParsedPage] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def full_text(self) -> str:
        """Concatenate all pages into a single text string."""
        return "\n\n".join(page.text for page in self.pages if page.text)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def page_texts(self) -> list[str]:
        return [page.text for page in self.pages]


class DocumentParser(ABC):
    """Abstract base class for byte-level document parsers."""

    name: str = "parser"

    @abstractmethod
    def parse(self, data: bytes) -> ParsedDocument:
        """Parse raw document bytes into page-annotated text.

        Raises:
            ExtractionError: If the document cannot be opened at all.
        """
        ...


class PDFPlumberParser(DocumentParser):
    """Parser for PDF documents using pdfplumber."""

    name = "pdfplumber"

    def parse(self, data: bytes) -> ParsedDocument:
        import pdfplumber

        pages: list[ParsedPage] = []
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for i, page in enumerate(pdf.pages):
                    pages.append(
                        ParsedPage(
                            page_number=i + 1,
                            text=_safe_page_text(page.extract_text, i + 1),
                            metadata={"width": page.width, "height": page.height},
                        )
                    )
        except Exception as exc:
            raise ExtractionError(f"pdfplumber could not read the PDF: {exc}") from exc

        return ParsedDocument(pages=pages, metadata={"format": "pdf", "parser": self.name})


class PyPDF2Parser(DocumentParser):
    """Secondary PDF parser using PyPDF2, for files pdfplumber rejects."""

    name = "pypdf2"

    def parse(self, data: bytes) -> ParsedDocument:
        from PyPDF2 import PdfReader

        try:
            reader = PdfReader(io.BytesIO(data))
            pdf_pages = list(reader.pages)
        except Exception as exc:
            raise ExtractionError(f"PyPDF2 could not read the PDF: {exc}") from exc

        pages = [
            ParsedPage(page_number=i + 1, text=_safe_page_text(page.extract_text, i + 1))
            for i, page in enumerate(pdf_pages)
        ]
        return ParsedDocument(pages=pages, metadata={"format": "pdf", "parser": self.name})


class TextParser:
    """Parser for already-extracted plain text.

    Splits on form-feed characters (``\\f``) if present, so each form feed
    starts a new page. Empty pages are kept to preserve page numbering.
    """

    def parse_text(self, text: str) -> ParsedDocument:
        raw_pages = text.split("\f") if "\f" in text else [text]
        pages = [
            ParsedPage(page_number=i + 1, text=page_text.strip())
            for i, page_text in enumerate(raw_pages)
        ]
        return ParsedDocument(pages=pages, metadata={"format": "text"})


class PDFTextExtractor:
    """Runs PDF parsers in order until one yields a readable document.

    Args:
        parsers: Parsers to try, in order. Defaults to pdfplumber then PyPDF2.
    """

    def __init__(self, parsers: list[DocumentParser] | None = None) -> None:
        self._parsers = parsers or [PDFPlumberParser(), PyPDF2Parser()]

    def parse(self, data: bytes) -> ParsedDocument:
        """Return the first parse that produced any text.

        A parse with pages but no text is kept as a last resort so page
        numbering survives for scanned documents.

        Raises:
            ExtractionError: If every parser failed to open the document.
        """
        if not data:
            raise ExtractionError("The uploaded document is empty.")

        empty: ParsedDocument | None = None
        errors: list[str] = []
        for parser in self._parsers:
            try:
                parsed = parser.parse(data)
            except ExtractionError as exc:
                logger.warning("%s parser failed: %s", parser.name, exc)
                errors.append(str(exc))
                continue
            if parsed.full_text.strip():
                return parsed
            logger.info("%s parser found %d page(s) but no text", parser.name, parsed.page_count)
            if empty is None:
                empty = parsed

        if empty is not None:
            return empty
        raise ExtractionError("Could not read the PDF: " + "; ".join(errors))


def _safe_page_text(extract, page_number: int) -> str:
    try:
        return (extract() or "").strip()
    except Exception as exc:
        logger.warning("Text extraction failed for page %d: %s", page_number, exc)
        return ""
