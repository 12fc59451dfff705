"""Page-by-page content analysis.

Each page is analyzed on its own from its raw text, using topic keywords.
Pages never share state, and every page from 1 to N produces exactly one
:class:`~contract_risk.models.PageAnalysis`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .config import MIN_PAGE_CHARS
from .exceptions import PartialAnalysisFailure
from .models import KeyPoint, KeyPointType, Language, PageAnalysis, RiskLevel
from .redaction import Redactor

logger = logging.getLogger(__name__)

BRIEF_PAGE_CHARS = 100
SNIPPET_CHARS = 200


@dataclass(frozen=True)
class _PageTopic:
    name: str
    label: str
    pattern: re.Pattern
    key_point: KeyPoint


def _topic(name: str, label: str, keywords: str, kp_type: KeyPointType, title: str, explanation: str) -> _PageTopic:
    return _PageTopic(
        name=name,
        label=label,
        pattern=re.compile(rf"\b(?:{keywords})", re.IGNORECASE),
        key_point=KeyPoint(type=kp_type, title=title, explanation=explanation),
    )


PAYMENT = _topic(
    "payment", "payment terms", r"pay\w*|fees?\b|costs?\b|pric\w*",
    KeyPointType.MEDIUM, "Payment and Financial Terms",
    "This page contains information about payment obligations, costs, or financial "
    "responsibilities. Understanding these terms is important for budgeting and avoiding "
    "unexpected expenses.",
)
TERMINATION = _topic(
    "termination", "termination procedures", r"terminat\w*|cancel\w*|ends?\b|expir\w*",
    KeyPointType.MEDIUM, "Termination and Exit Procedures",
    "This page explains how the agreement can end and what procedures must be followed. "
    "Understanding these terms helps maintain your flexibility.",
)
LIABILITY = _topic(
    "liability", "liability provisions", r"liabilit\w*|liable|responsib\w*|damages?\b|loss(?:es)?\b",
    KeyPointType.HIGH, "Liability and Risk Allocation",
    "This page addresses who is responsible for various types of damages or losses. These "
    "provisions can significantly impact your financial exposure if problems arise.",
)
ARBITRATION = _topic(
    "arbitration", "dispute resolution", r"arbitrat\w*|disputes?\b|courts?\b",
    KeyPointType.HIGH, "Dispute Resolution",
    "This page covers how disagreements will be resolved. These terms can affect your legal "
    "rights and options for pursuing claims.",
)
CONFIDENTIALITY = _topic(
    "confidentiality", "confidentiality requirements", r"confidential\w*|non-disclosure|secrets?\b",
    KeyPointType.MEDIUM, "Confidentiality Requirements",
    "This page contains obligations to keep certain information secret. These terms can "
    "affect what you can discuss about your relationship or business.",
)
INTELLECTUAL_PROPERTY = _topic(
    "intellectual_property", "intellectual property rights", r"intellectual|copyrights?\b|trademarks?\b",
    KeyPointType.MEDIUM, "Intellectual Property Rights",
    "This page addresses ownership of ideas, creations, or innovations. These terms can "
    "affect your rights to work you create or contribute.",
)

# Order used for the summary topic list.
SUMMARY_ORDER = [PAYMENT, TERMINATION, LIABILITY, ARBITRATION, CONFIDENTIALITY, INTELLECTUAL_PROPERTY]
# Order used for key points.
KEY_POINT_ORDER = [PAYMENT, LIABILITY, ARBITRATION, TERMINATION, CONFIDENTIALITY, INTELLECTUAL_PROPERTY]

HIGH_RISK_TOPICS = {LIABILITY.name, ARBITRATION.name}

RISK_SENTENCES = {
    RiskLevel.HIGH: (
        "This page contains important provisions that could significantly impact your rights "
        "and obligations. Pay careful attention to these terms as they may affect your "
        "financial exposure or legal options."
    ),
    RiskLevel.MEDIUM: (
        "This page contains terms that require attention and understanding. While not "
        "immediately high-risk, these provisions could affect your costs, responsibilities, "
        "or procedures under the agreement."
    ),
    RiskLevel.LOW: (
        "This page contains routine provisions that follow standard practices. These terms "
        "are generally administrative or procedural in nature."
    ),
}

INTRODUCTION_POINT = KeyPoint(
    type=KeyPointType.INFO,
    title="Document Introduction",
    explanation=(
        "This opening page typically establishes the parties to the agreement and provides "
        "foundational information for understanding the document."
    ),
)
GENERAL_POINT = KeyPoint(
    type=KeyPointType.INFO,
    title="General Provisions",
    explanation=(
        "This page contains provisions that support the overall agreement structure and "
        "establish important terms or procedures."
    ),
)

_DEFINITIONS_RE = re.compile(r"\b(?:definition\w*|means\b|includ\w*)", re.IGNORECASE)
_AGREEMENT_RE = re.compile(r"\b(?:part(?:y|ies)\b|agreement\w*|contract\w*)", re.IGNORECASE)


class PageContentAnalyzer:
    """Deterministic per-page summary, key points and risk level.

    Args:
        redactor: Applied to the text snippet quoted in page summaries.
    """

    def __init__(self, redactor: Redactor | None = None) -> None:
        self._redactor = redactor or Redactor()

    def analyze_pages(self, page_texts: list[str], language: Language) -> list[PageAnalysis]:
        """Analyze pages ``1..N`` independently; a failing page gets a default entry."""
        results: list[PageAnalysis] = []
        for index, text in enumerate(page_texts):
            page_number = index + 1
            try:
                results.append(self._analyze_guarded(text or "", page_number, language))
            except PartialAnalysisFailure as exc:
                logger.warning("Page %d analysis failed: %s", page_number, exc.cause)
                results.append(
                    PageAnalysis(
                        page_number=page_number,
                        text=text or "",
                        summary=f"Page {page_number} could not be analyzed due to an error.",
                    )
                )
        return results

    def _analyze_guarded(self, text: str, page_number: int, language: Language) -> PageAnalysis:
        try:
            return self.analyze(text, page_number, language)
        except Exception as exc:
            raise PartialAnalysisFailure(f"page {page_number}", exc) from exc

    def analyze(self, text: str, page_number: int, language: Language) -> PageAnalysis:
        """Analyze one page's raw text."""
        if len(text.strip()) < MIN_PAGE_CHARS:
            return PageAnalysis(
                page_number=page_number,
                text=text,
                summary=f"Page {page_number} contains minimal text content.",
            )

        found = {topic.name for topic in SUMMARY_ORDER if topic.pattern.search(text)}
        risk = self._risk_for(found)
        return PageAnalysis(
            page_number=page_number,
            text=text,
            summary=self._summarize(text, page_number, found, risk),
            key_points=self._key_points(page_number, found),
            risk_level=risk,
        )

    @staticmethod
    def _risk_for(found: set[str]) -> RiskLevel:
        if found & HIGH_RISK_TOPICS:
            return RiskLevel.HIGH
        if found:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def _summarize(self, text: str, page_number: int, found: set[str], risk: RiskLevel) -> str:
        if len(text) < BRIEF_PAGE_CHARS:
            return (
                f"Page {page_number} contains brief content, likely introductory or "
                "transitional material."
            )

        if found:
            labels = ", ".join(t.label for t in SUMMARY_ORDER if t.name in found)
            snippet = self._redactor.redact(" ".join(text[:SNIPPET_CHARS].split()))
            return (
                f'Page {page_number} primarily covers {labels}. Example text: "{snippet}" '
                f"{RISK_SENTENCES[risk]}"
            )

        if _DEFINITIONS_RE.search(text):
            return (
                f"Page {page_number} appears to contain definitions and explanatory content "
                "that establishes the framework for understanding the rest of the document."
            )
        if _AGREEMENT_RE.search(text):
            return (
                f"Page {page_number} contains general agreement terms and structural "
                "provisions that establish the basic framework of the relationship between "
                "the parties."
            )
        return (
            f"Page {page_number} contains substantive provisions of the agreement. The "
            "specific terms on this page contribute to the overall rights, obligations, and "
            "procedures established by this document."
        )

    @staticmethod
    def _key_points(page_number: int, found: set[str]) -> list[KeyPoint]:
        points = [topic.key_point for topic in KEY_POINT_ORDER if topic.name in found]
        if not points:
            points.append(INTRODUCTION_POINT if page_number == 1 else GENERAL_POINT)
        return points
