"""Document-level risk analysis.

With a generation service, the model is asked for strict JSON and its
answer is parsed, repaired and validated. A response that cannot be
repaired is salvaged (summary only) or replaced by a generic review clause.
Without a service, or when the call itself fails, the deterministic
:class:`~contract_risk.heuristics.FallbackHeuristicEngine` produces the
analysis. :meth:`DocumentRiskAnalyzer.analyze` never raises.
"""

from __future__ import annotations

import logging

from .exceptions import CapabilityUnavailable, MalformedCapabilityOutput
from .generation import GenerationConfig, TextGenerationService
from .heuristics import FallbackHeuristicEngine
from .models import Citation, Clause, DocumentAnalysis, Language, RiskLevel
from .prompts import DOCUMENT_PROMPT, DOCUMENT_SYSTEM_PROMPT, LANGUAGE_NAMES
from .repair import ParseOutcome, parse_json_object, salvage_string_field

logger = logging.getLogger(__name__)

DEFAULT_CHAR_BUDGET = 8000
MIN_SALVAGED_SUMMARY = 50

GENERIC_SUMMARY = (
    "This document contains important legal provisions that should be reviewed carefully. "
    "An automated summary could not be produced for it, so read each section with "
    "attention to payments, obligations, termination and dispute terms. For specific "
    "legal advice regarding this document, please consult with a qualified attorney."
)

ANALYSIS_CONFIG = GenerationConfig(
    temperature=0.1, max_output_tokens=4000, system=DOCUMENT_SYSTEM_PROMPT
)

_DEFAULT_SIMPLE = "This clause contains terms that deserve a careful read."
_DEFAULT_WHY = "Clauses like this can affect your rights, costs or obligations under the agreement."


def generic_review_clause(text: str) -> Clause:
    """The single clause emitted when model output cannot be used."""
    return Clause(
        id="review-1",
        title="Document Review Required",
        original=text[:300] + ("..." if len(text) > 300 else ""),
        simple="This document contains legal provisions that require careful review.",
        why=(
            "Legal documents often contain important rights, obligations, and procedures "
            "that can affect your interests."
        ),
        risk=RiskLevel.MEDIUM,
    )


class DocumentRiskAnalyzer:
    """Produces the summary and labeled clauses for a whole document.

    Args:
        service: Optional text generation capability.
        engine: Heuristic engine used when no usable model call is possible.
        max_chars: Default document text budget sent to the model.
    """

    def __init__(
        self,
        service: TextGenerationService | None = None,
        engine: FallbackHeuristicEngine | None = None,
        max_chars: int = DEFAULT_CHAR_BUDGET,
    ) -> None:
        self._service = service
        self._engine = engine or FallbackHeuristicEngine()
        self.max_chars = max_chars

    def analyze(
        self, text: str, language: Language, max_chars: int | None = None
    ) -> DocumentAnalysis:
        budget = max_chars or self.max_chars
        try:
            raw = self._generate(text[:budget], language)
        except CapabilityUnavailable:
            logger.info("Generation unavailable, using heuristic document analysis")
            return self._engine.analyze(text, language)
        except Exception as exc:
            logger.warning("Generation failed, using heuristic document analysis: %s", exc)
            return self._engine.analyze(text, language)

        analysis, outcome = self.interpret(raw, text, language)
        logger.info("Document analysis from model output: %s", outcome.value)
        return analysis

    def _generate(self, text: str, language: Language) -> str:
        if self._service is None:
            raise CapabilityUnavailable("text generation")
        prompt = DOCUMENT_PROMPT.format(
            language_name=LANGUAGE_NAMES[language.value],
            language=language.value,
            document_text=text,
        )
        return self._service.generate(prompt, ANALYSIS_CONFIG)

    def interpret(
        self, raw: str, text: str, language: Language
    ) -> tuple[DocumentAnalysis, ParseOutcome]:
        """Turn raw model output into an analysis, degrading step by step."""
        try:
            parsed = parse_json_object(raw)
            return self._validate(parsed, language), ParseOutcome.VALID
        except MalformedCapabilityOutput as exc:
            logger.warning("Model output unusable (%s); attempting summary salvage", exc)
        except Exception as exc:
            logger.warning("Model output failed validation (%r); attempting summary salvage", exc)

        salvaged = salvage_string_field(raw or "", "summary")
        if salvaged and len(salvaged.strip()) > MIN_SALVAGED_SUMMARY:
            outcome = ParseOutcome.SALVAGED
            summary = salvaged.strip()
        else:
            logger.warning("No usable summary in model output; using generic analysis")
            outcome = ParseOutcome.GENERIC_FALLBACK
            summary = GENERIC_SUMMARY
        return (
            DocumentAnalysis(summary=summary, clauses=[generic_review_clause(text)], language=language),
            outcome,
        )

    def _validate(self, parsed: dict, language: Language) -> DocumentAnalysis:
        summary = parsed.get("summary")
        raw_clauses = parsed.get("clauses")
        if not isinstance(summary, str) or not summary.strip():
            raise MalformedCapabilityOutput("Model output has no summary")
        if not isinstance(raw_clauses, list):
            raw_clauses = []

        clauses = []
        for index, item in enumerate(raw_clauses):
            clause = _clause_from_dict(item, index)
            if clause is not None:
                clauses.append(clause)
        return DocumentAnalysis(summary=summary.strip(), clauses=clauses, language=language)


def _clause_from_dict(item: object, index: int) -> Clause | None:
    if not isinstance(item, dict):
        return None
    title = _text(item.get("title"))
    original = _text(item.get("original"))
    if not title and not original:
        return None

    page = item.get("page")
    try:
        page = int(page) if page is not None else None
    except (TypeError, ValueError, OverflowError):
        page = None
    if page is not None and page < 1:
        page = None

    raw_citations = item.get("citations")
    citations = []
    for cite in raw_citations if isinstance(raw_citations, list) else []:
        if isinstance(cite, dict) and _text(cite.get("url")):
            url = _text(cite.get("url"))
            citations.append(Citation(title=_text(cite.get("title")) or url, url=url))

    return Clause(
        id=_text(item.get("id")) or f"c{index + 1}",
        title=title or "Clause",
        original=original,
        simple=_text(item.get("simple")) or _DEFAULT_SIMPLE,
        why=_text(item.get("why")) or _DEFAULT_WHY,
        risk=RiskLevel.coerce(item.get("risk"), RiskLevel.MEDIUM),
        page=page,
        citations=citations,
    )


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""
