"""Layout extraction: document bytes to full text plus positioned segments.

A :class:`LayoutService` reports lines and paragraphs per page with
normalized polygons. :class:`LayoutExtractor` turns that into
:class:`~contract_risk.models.RawSegment` objects, preferring lines and
falling back to sentence-split paragraphs on pages without lines.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from .exceptions import ExtractionError
from .models import BoundingBox, RawSegment

logger = logging.getLogger(__name__)

Vertex = tuple[float, float]

DEFAULT_BBOX = BoundingBox(x=0.0, y=0.0, w=1.0, h=0.05)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")


@dataclass
class LayoutBlock:
    """A line or paragraph with its normalized polygon (clockwise from top-left)."""

    text: str
    vertices: list[Vertex] = field(default_factory=list)


@dataclass
class LayoutPage:
    page_number: int
    lines: list[LayoutBlock] = field(default_factory=list)
    paragraphs: list[LayoutBlock] = field(default_factory=list)


@dataclass
class LayoutDocument:
    text: str
    pages: list[LayoutPage] = field(default_factory=list)


@dataclass
class ExtractedLayout:
    """Output of :meth:`LayoutExtractor.extract`: unredacted and unlabeled."""

    text: str
    segments: list[RawSegment]
    page_count: int


class LayoutService(ABC):
    """Capability interface for text/layout extraction providers."""

    @abstractmethod
    def analyze(self, data: bytes) -> LayoutDocument:
        """Return the document text and per-page layout blocks."""
        ...


def get_bounding_box(vertices: Sequence[Vertex] | None) -> BoundingBox:
    """Derive a bounding box from a four-point polygon.

    Uses the top-left and bottom-right corners. With fewer than four points
    a full-width thin default box is returned.
    """
    if not vertices or len(vertices) < 4:
        return DEFAULT_BBOX

    top_left, _top_right, bottom_right, _bottom_left = vertices[:4]
    x = _clamp(top_left[0] or 0.0)
    y = _clamp(top_left[1] or 0.0)
    w = _clamp((bottom_right[0] or 0.0) - x)
    h = _clamp((bottom_right[1] or 0.0) - y)
    return BoundingBox(x=x, y=y, w=w, h=h)


def split_sentences(text: str) -> list[str]:
    """Split on sentence-terminal punctuation followed by whitespace."""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


class LayoutExtractor:
    """Converts a :class:`LayoutService` response into raw segments.

    Args:
        service: The layout capability to delegate to.
    """

    def __init__(self, service: LayoutService) -> None:
        self._service = service

    def extract(self, data: bytes) -> ExtractedLayout:
        """Extract full text and raw segments.

        Raises:
            ExtractionError: If the service fails or finds no text, so the
                caller can switch to the text-only path.
        """
        try:
            document = self._service.analyze(data)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Layout extraction failed: {exc}") from exc

        if not document.text or not document.text.strip():
            raise ExtractionError("No text extracted by the layout service.")

        segments: list[RawSegment] = []
        for index, page in enumerate(document.pages):
            page_number = index + 1
            if page.lines:
                segments.extend(self._line_segments(page, page_number))
            else:
                segments.extend(self._paragraph_segments(page, page_number))

        logger.info(
            "Layout extraction produced %d segment(s) over %d page(s)",
            len(segments),
            len(document.pages),
        )
        return ExtractedLayout(
            text=document.text, segments=segments, page_count=len(document.pages)
        )

    @staticmethod
    def _line_segments(page: LayoutPage, page_number: int) -> list[RawSegment]:
        return [
            RawSegment(page=page_number, bbox=get_bounding_box(line.vertices), text=line.text.strip())
            for line in page.lines
            if line.text.strip()
        ]

    @staticmethod
    def _paragraph_segments(page: LayoutPage, page_number: int) -> list[RawSegment]:
        segments: list[RawSegment] = []
        for para in page.paragraphs:
            text = para.text.strip()
            if not text:
                continue
            sentences = split_sentences(text)
            bbox = get_bounding_box(para.vertices)
            line_height = bbox.h / max(len(sentences), 1)
            for idx, sentence in enumerate(sentences):
                segments.append(
                    RawSegment(
                        page=page_number,
                        bbox=BoundingBox(
                            x=bbox.x, y=bbox.y + idx * line_height, w=bbox.w, h=line_height
                        ),
                        text=sentence,
                    )
                )
        return segments


class PdfPlumberLayoutService(LayoutService):
    """Local layout provider built on pdfplumber's text-line detection.

    Lines come from ``Page.extract_text_lines``; paragraphs group consecutive
    lines separated by less than ``paragraph_gap`` line heights.
    """

    def __init__(self, paragraph_gap: float = 0.8) -> None:
        self.paragraph_gap = paragraph_gap

    def analyze(self, data: bytes) -> LayoutDocument:
        import pdfplumber

        pages: list[LayoutPage] = []
        texts: list[str] = []
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for i, page in enumerate(pdf.pages):
                width, height = float(page.width), float(page.height)
                lines = [
                    LayoutBlock(
                        text=line["text"],
                        vertices=_rect_vertices(
                            line["x0"], line["top"], line["x1"], line["bottom"], width, height
                        ),
                    )
                    for line in page.extract_text_lines()
                ]
                pages.append(
                    LayoutPage(
                        page_number=i + 1,
                        lines=lines,
                        paragraphs=self._group_paragraphs(lines),
                    )
                )
                texts.append("\n".join(line.text for line in lines))

        return LayoutDocument(text="\n\n".join(t for t in texts if t), pages=pages)

    def _group_paragraphs(self, lines: list[LayoutBlock]) -> list[LayoutBlock]:
        paragraphs: list[LayoutBlock] = []
        current: list[LayoutBlock] = []
        for line in lines:
            if current:
                prev = current[-1]
                prev_height = prev.vertices[2][1] - prev.vertices[0][1]
                gap = line.vertices[0][1] - prev.vertices[2][1]
                if gap > prev_height * self.paragraph_gap:
                    paragraphs.append(_merge_blocks(current))
                    current = []
            current.append(line)
        if current:
            paragraphs.append(_merge_blocks(current))
        return paragraphs


def _rect_vertices(
    x0: float, top: float, x1: float, bottom: float, width: float, height: float
) -> list[Vertex]:
    left, right = x0 / width, x1 / width
    upper, lower = top / height, bottom / height
    return [(left, upper), (right, upper), (right, lower), (left, lower)]


def _merge_blocks(blocks: list[LayoutBlock]) -> LayoutBlock:
    left = min(b.vertices[0][0] for b in blocks)
    upper = min(b.vertices[0][1] for b in blocks)
    right = max(b.vertices[2][0] for b in blocks)
    lower = max(b.vertices[2][1] for b in blocks)
    return LayoutBlock(
        text=" ".join(b.text.strip() for b in blocks),
        vertices=[(left, upper), (right, upper), (right, lower), (left, lower)],
    )
