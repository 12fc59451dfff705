"""Pipeline orchestrator turning a contract into an :class:`AnalysisResult`.

The ``ContractAnalyzer`` class is the primary entry point. It extracts text
and positioned segments, redacts PII, labels segments, analyzes each page,
runs document-level risk analysis, and assembles one immutable result.

Every delegated capability is optional and injected at construction time.
Only :class:`~contract_risk.exceptions.ExtractionError` escapes ``analyze``;
all other failures degrade to default content.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from .config import Settings
from .exceptions import ExtractionError
from .generation import create_generation_service
from .labeler import SegmentLabeler
from .layout import LayoutExtractor, LayoutService, PdfPlumberLayoutService
from .models import (
    AnalysisResult,
    BoundingBox,
    Clause,
    DocumentAnalysis,
    Language,
    PageAnalysis,
    RawSegment,
    Segment,
    max_risk,
)
from .pages import PageContentAnalyzer
from .parsers import ParsedDocument, PDFTextExtractor, TextParser
from .redaction import Redactor
from .risk import DocumentRiskAnalyzer

logger = logging.getLogger(__name__)

PLACEHOLDER_SLOTS_PER_PAGE = 6
PLACEHOLDER_TEXT_CHARS = 100


class ContractAnalyzer:
    """High-level contract risk analyzer.

    Example::

        analyzer = ContractAnalyzer.from_settings(Settings.from_env())
        result = analyzer.analyze(Path("lease.pdf").read_bytes(), "en")

        print(result.summary)
        print(result.overall_risk.value, len(result.clauses))

    Args:
        layout_service: Text/layout capability. ``None`` skips straight to
            the text-only extraction path.
        pdf_extractor: Text-only PDF extraction, also used for page texts.
        redactor: PII redaction applied to segments and document text.
        labeler: Segment risk labeler.
        page_analyzer: Per-page content analyzer.
        risk_analyzer: Document-level risk analyzer.
        pdf_char_budget: Document text budget for PDF input.
        text_char_budget: Document text budget for plain-text input.
    """

    def __init__(
        self,
        layout_service: LayoutService | None = None,
        pdf_extractor: PDFTextExtractor | None = None,
        redactor: Redactor | None = None,
        labeler: SegmentLabeler | None = None,
        page_analyzer: PageContentAnalyzer | None = None,
        risk_analyzer: DocumentRiskAnalyzer | None = None,
        pdf_char_budget: int = 8000,
        text_char_budget: int = 100_000,
    ) -> None:
        self._layout = LayoutExtractor(layout_service) if layout_service is not None else None
        self._pdf_extractor = pdf_extractor or PDFTextExtractor()
        self._redactor = redactor or Redactor()
        self._labeler = labeler or SegmentLabeler()
        self._page_analyzer = page_analyzer or PageContentAnalyzer(self._redactor)
        self._risk_analyzer = risk_analyzer or DocumentRiskAnalyzer()
        self._text_parser = TextParser()
        self.pdf_char_budget = pdf_char_budget
        self.text_char_budget = text_char_budget

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ContractAnalyzer:
        """Resolve every capability once and wire the pipeline."""
        settings = settings or Settings.from_env()
        generation = create_generation_service(settings)
        redactor = Redactor()
        return cls(
            layout_service=PdfPlumberLayoutService(),
            redactor=redactor,
            labeler=SegmentLabeler(generation, max_batches=settings.label_batches),
            page_analyzer=PageContentAnalyzer(redactor),
            risk_analyzer=DocumentRiskAnalyzer(generation, max_chars=settings.pdf_char_budget),
            pdf_char_budget=settings.pdf_char_budget,
            text_char_budget=settings.text_char_budget,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, data: bytes, language: str | Language = Language.EN) -> AnalysisResult:
        """Run the full pipeline on PDF bytes.

        Raises:
            ExtractionError: If no usable text could be extracted.
            UnsupportedLanguageError: If ``language`` is not supported.
        """
        lang = Language.parse(language)

        text, raw_segments, parsed = self._extract(data)
        logger.info("Extracted %d chars and %d segment(s)", len(text), len(raw_segments))

        segments: list[Segment] = []
        if raw_segments:
            redacted = [replace(s, text=self._redactor.redact(s.text)) for s in raw_segments]
            segments = self._labeler.label(redacted, lang)

        pages = self._analyze_pdf_pages(data, parsed, lang)

        clean_text = self._redactor.redact(text)
        document = self._risk_analyzer.analyze(clean_text, lang, max_chars=self.pdf_char_budget)
        return self._assemble(document, segments, pages)

    def analyze_text(self, text: str, language: str | Language = Language.EN) -> AnalysisResult:
        """Analyze already-extracted text. Form feeds (``\\f``) separate pages.

        Raises:
            ExtractionError: If ``text`` is empty.
            UnsupportedLanguageError: If ``language`` is not supported.
        """
        lang = Language.parse(language)
        if not text or not text.strip():
            raise ExtractionError("Empty text: nothing to analyze.")

        parsed = self._text_parser.parse_text(text)
        pages = self._page_analyzer.analyze_pages(parsed.page_texts, lang)
        clean_text = self._redactor.redact(parsed.full_text)
        document = self._risk_analyzer.analyze(clean_text, lang, max_chars=self.text_char_budget)
        return self._assemble(document, [], pages)

    def analyze_file(self, file_path: str | Path, language: str | Language = Language.EN) -> AnalysisResult:
        """Analyze a PDF (by bytes) or any other file as UTF-8 text.

        Raises:
            FileNotFoundError: If the file does not exist.
            ExtractionError: If no usable text could be extracted.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if path.suffix.lower() == ".pdf":
            return self.analyze(path.read_bytes(), language)
        return self.analyze_text(path.read_text(encoding="utf-8", errors="replace"), language)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _extract(self, data: bytes) -> tuple[str, list[RawSegment], ParsedDocument | None]:
        if self._layout is not None:
            try:
                layout = self._layout.extract(data)
                logger.info("Layout path used (%d page(s))", layout.page_count)
                return layout.text, layout.segments, None
            except ExtractionError as exc:
                logger.warning("Layout extraction failed, falling back to text only: %s", exc)

        try:
            parsed = self._pdf_extractor.parse(data)
        except ExtractionError:
            logger.error("Text extraction failed on every path")
            raise
        text = parsed.full_text
        if not text.strip():
            logger.error("No text found in document (%d page(s))", parsed.page_count)
            raise ExtractionError("Could not extract text from PDF.")
        return text, [], parsed

    def _analyze_pdf_pages(
        self, data: bytes, parsed: ParsedDocument | None, language: Language
    ) -> list[PageAnalysis]:
        try:
            document = parsed or self._pdf_extractor.parse(data)
        except Exception as exc:
            logger.warning("Page extraction failed, skipping page analysis: %s", exc)
            return []
        return self._page_analyzer.analyze_pages(document.page_texts, language)

    def _assemble(
        self,
        document: DocumentAnalysis,
        segments: list[Segment],
        pages: list[PageAnalysis],
    ) -> AnalysisResult:
        clauses = assign_clause_pages(document.clauses, len(pages))
        if not segments:
            segments = placeholder_segments(clauses)
        return AnalysisResult(
            summary=document.summary,
            overall_risk=max_risk(c.risk for c in clauses),
            clauses=clauses,
            language=document.language,
            segments=segments,
            page_analysis=pages,
        )


def assign_clause_pages(clauses: list[Clause], page_count: int) -> list[Clause]:
    """Spread clauses without a page evenly over ``1..page_count``.

    This is a positional default, not a content-derived placement. Pages
    beyond ``page_count`` are clamped to the last page.
    """
    last_page = max(page_count, 1)
    per_page = max(1, len(clauses) // page_count) if page_count else max(len(clauses), 1)

    assigned = []
    for index, clause in enumerate(clauses):
        page = clause.page
        if page is None:
            page = index // per_page + 1
        assigned.append(replace(clause, page=min(page, last_page)))
    return assigned


def placeholder_segments(clauses: list[Clause]) -> list[Segment]:
    """One stacked, generic segment per clause for the visual overlay."""
    slots: dict[int, int] = {}
    segments = []
    for index, clause in enumerate(clauses):
        page = clause.page or 1
        slot = slots.get(page, 0) % PLACEHOLDER_SLOTS_PER_PAGE
        slots[page] = slots.get(page, 0) + 1
        excerpt = clause.original or clause.title
        text = excerpt[:PLACEHOLDER_TEXT_CHARS]
        if len(excerpt) > PLACEHOLDER_TEXT_CHARS:
            text += "..."
        segments.append(
            Segment(
                id=f"fallback-{index}",
                page=page,
                bbox=BoundingBox(x=0.05, y=round(0.1 + slot * 0.15, 4), w=0.9, h=0.1),
                text=text,
                risk=clause.risk,
                simple=clause.simple,
            )
        )
    return segments
