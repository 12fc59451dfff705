"""Data models for contract risk analysis."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .exceptions import UnsupportedLanguageError


class RiskLevel(str, Enum):
    """Risk severity levels, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def coerce(cls, value: object, default: RiskLevel | None = None) -> RiskLevel:
        """Parse a loosely formatted risk value ("High", " medium ") with a default."""
        if isinstance(value, RiskLevel):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return default if default is not None else cls.LOW


_SEVERITY = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


def max_risk(levels: Iterable[RiskLevel]) -> RiskLevel:
    """Highest risk present, or ``LOW`` when there is nothing to aggregate."""
    return max(levels, key=lambda level: level.severity, default=RiskLevel.LOW)


class KeyPointType(str, Enum):
    """Page key-point categories. ``INFO`` marks neutral, descriptive points."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    INFO = "info"


class Language(str, Enum):
    """Output languages supported by the analysis."""

    EN = "en"
    HI = "hi"
    HINGLISH = "hinglish"

    @classmethod
    def parse(cls, value: str | Language) -> Language:
        """Validate a language code at the API boundary.

        Raises:
            UnsupportedLanguageError: If the code is not one of the supported set.
        """
        if isinstance(value, Language):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(lang.value for lang in cls)
            raise UnsupportedLanguageError(
                f"Unsupported language '{value}'. Supported: {supported}"
            ) from None


@dataclass(frozen=True)
class BoundingBox:
    """Normalized rectangle relative to page size, origin top-left."""

    x: float
    y: float
    w: float
    h: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class RawSegment:
    """A positioned, unlabeled unit of text straight from layout extraction."""

    page: int
    bbox: BoundingBox
    text: str


@dataclass(frozen=True)
class Segment:
    """A positioned unit of (redacted) text with its risk label."""

    id: str
    page: int
    bbox: BoundingBox
    text: str
    risk: RiskLevel
    simple: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "page": self.page,
            "bbox": self.bbox.to_dict(),
            "text": self.text,
            "risk": self.risk.value,
            "simple": self.simple,
        }


@dataclass(frozen=True)
class Citation:
    title: str
    url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class Clause:
    """A meaningful excerpt of the document with its interpretation."""

    id: str
    title: str
    original: str
    simple: str
    why: str
    risk: RiskLevel
    page: Optional[int] = None
    citations: list[Citation] = field(default_factory=list)

    @property
    def is_risky(self) -> bool:
        return self.risk in (RiskLevel.HIGH, RiskLevel.MEDIUM)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "original": self.original,
            "simple": self.simple,
            "why": self.why,
            "risk": self.risk.value,
            "citations": [c.to_dict() for c in self.citations],
        }
        if self.page is not None:
            data["page"] = self.page
        return data


@dataclass(frozen=True)
class KeyPoint:
    type: KeyPointType
    title: str
    explanation: str

    def to_dict(self) -> dict:
        return {"type": self.type.value, "title": self.title, "explanation": self.explanation}


@dataclass(frozen=True)
class PageAnalysis:
    """Interpretation of a single physical page.

    ``text`` holds the raw page text and is not serialized unless asked for.
    """

    page_number: int
    text: str
    summary: str
    key_points: list[KeyPoint] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW
    clauses: list[Clause] = field(default_factory=list)

    def to_dict(self, include_text: bool = False) -> dict:
        data = {
            "pageNumber": self.page_number,
            "summary": self.summary,
            "keyPoints": [kp.to_dict() for kp in self.key_points],
            "riskLevel": self.risk_level.value,
            "clauses": [c.to_dict() for c in self.clauses],
        }
        if include_text:
            data["text"] = self.text
        return data


@dataclass(frozen=True)
class DocumentAnalysis:
    """Document-level analysis before segments and pages are attached."""

    summary: str
    clauses: list[Clause]
    language: Language

    @property
    def overall_risk(self) -> RiskLevel:
        return max_risk(c.risk for c in self.clauses)


@dataclass(frozen=True)
class AnalysisResult:
    """Complete analysis result for one document."""

    summary: str
    overall_risk: RiskLevel
    clauses: list[Clause]
    language: Language
    segments: Optional[list[Segment]] = None
    page_analysis: Optional[list[PageAnalysis]] = None

    @property
    def page_count(self) -> int:
        return len(self.page_analysis or [])

    @property
    def high_risk_clauses(self) -> list[Clause]:
        return [c for c in self.clauses if c.risk == RiskLevel.HIGH]

    def risk_counts(self) -> dict[RiskLevel, int]:
        counts = {level: 0 for level in RiskLevel}
        for clause in self.clauses:
            counts[clause.risk] += 1
        return counts

    def to_dict(self, include_page_text: bool = False) -> dict:
        data: dict = {
            "summary": self.summary,
            "overallRisk": self.overall_risk.value,
            "clauses": [c.to_dict() for c in self.clauses],
            "language": self.language.value,
        }
        if self.segments is not None:
            data["segments"] = [s.to_dict() for s in self.segments]
        if self.page_analysis is not None:
            data["pageAnalysis"] = [
                p.to_dict(include_text=include_page_text) for p in self.page_analysis
            ]
        return data
