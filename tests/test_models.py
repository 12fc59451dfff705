"""Tests for data models: RiskLevel, Language, Clause, PageAnalysis, AnalysisResult."""

from __future__ import annotations

import pytest

from contract_risk.exceptions import UnsupportedLanguageError
from contract_risk.models import (
    AnalysisResult,
    BoundingBox,
    Citation,
    Clause,
    KeyPoint,
    KeyPointType,
    Language,
    PageAnalysis,
    RiskLevel,
    Segment,
    max_risk,
)


def _clause(risk: RiskLevel, page: int | None = None) -> Clause:
    return Clause(
        id="c1",
        title="Late Fees",
        original="A late fee of 2% applies.",
        simple="Paying late costs extra.",
        why="Fees add up quickly.",
        risk=risk,
        page=page,
    )


# ---------------------------------------------------------------------------
# RiskLevel
# ---------------------------------------------------------------------------


class TestRiskLevel:
    def test_ordering(self) -> None:
        assert RiskLevel.LOW.severity < RiskLevel.MEDIUM.severity < RiskLevel.HIGH.severity

    def test_max_risk(self) -> None:
        assert max_risk([RiskLevel.LOW, RiskLevel.HIGH, RiskLevel.MEDIUM]) == RiskLevel.HIGH
        assert max_risk([RiskLevel.MEDIUM, RiskLevel.LOW]) == RiskLevel.MEDIUM

    def test_max_risk_empty_is_low(self) -> None:
        assert max_risk([]) == RiskLevel.LOW

    def test_coerce_loose_values(self) -> None:
        assert RiskLevel.coerce(" High ") == RiskLevel.HIGH
        assert RiskLevel.coerce("MEDIUM") == RiskLevel.MEDIUM
        assert RiskLevel.coerce(RiskLevel.LOW) == RiskLevel.LOW

    def test_coerce_unknown_uses_default(self) -> None:
        assert RiskLevel.coerce("critical") == RiskLevel.LOW
        assert RiskLevel.coerce(None, RiskLevel.MEDIUM) == RiskLevel.MEDIUM
        assert RiskLevel.coerce(3, RiskLevel.HIGH) == RiskLevel.HIGH


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------


class TestLanguage:
    @pytest.mark.parametrize("code", ["en", "hi", "hinglish", "EN", " Hinglish "])
    def test_supported_codes(self, code: str) -> None:
        assert Language.parse(code).value == code.strip().lower()

    def test_rejects_unsupported(self) -> None:
        with pytest.raises(UnsupportedLanguageError, match="Supported: en, hi, hinglish"):
            Language.parse("fr")

    def test_unsupported_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Language.parse("")

    def test_passthrough(self) -> None:
        assert Language.parse(Language.HI) is Language.HI


# ---------------------------------------------------------------------------
# Clause and PageAnalysis
# ---------------------------------------------------------------------------


class TestClause:
    def test_is_risky(self) -> None:
        assert _clause(RiskLevel.HIGH).is_risky is True
        assert _clause(RiskLevel.MEDIUM).is_risky is True
        assert _clause(RiskLevel.LOW).is_risky is False

    def test_to_dict_omits_missing_page(self) -> None:
        data = _clause(RiskLevel.LOW).to_dict()
        assert "page" not in data
        assert data["risk"] == "low"
        assert data["citations"] == []

    def test_to_dict_with_page_and_citations(self) -> None:
        clause = Clause(
            id="c2",
            title="Arbitration",
            original="Disputes go to arbitration.",
            simple="You cannot sue in court.",
            why="You give up a jury trial.",
            risk=RiskLevel.HIGH,
            page=3,
            citations=[Citation(title="FAA", url="https://example.org/faa")],
        )
        data = clause.to_dict()
        assert data["page"] == 3
        assert data["citations"] == [{"title": "FAA", "url": "https://example.org/faa"}]


class TestPageAnalysis:
    def test_camel_case_keys(self) -> None:
        page = PageAnalysis(
            page_number=2,
            text="raw page text",
            summary="Page 2 covers payment terms.",
            key_points=[KeyPoint(KeyPointType.MEDIUM, "Payment", "Pay on time.")],
            risk_level=RiskLevel.MEDIUM,
        )
        data = page.to_dict()
        assert data["pageNumber"] == 2
        assert data["riskLevel"] == "medium"
        assert data["keyPoints"] == [{"type": "medium", "title": "Payment", "explanation": "Pay on time."}]
        assert "text" not in data

    def test_text_included_on_request(self) -> None:
        page = PageAnalysis(page_number=1, text="raw", summary="s")
        assert page.to_dict(include_text=True)["text"] == "raw"


# ---------------------------------------------------------------------------
# AnalysisResult
# ---------------------------------------------------------------------------


class TestAnalysisResult:
    def _result(self) -> AnalysisResult:
        clauses = [_clause(RiskLevel.HIGH, 1), _clause(RiskLevel.LOW, 1), _clause(RiskLevel.HIGH, 2)]
        segment = Segment(
            id="seg-0",
            page=1,
            bbox=BoundingBox(0.1, 0.2, 0.5, 0.05),
            text="Late fee applies.",
            risk=RiskLevel.MEDIUM,
            simple="Fee for paying late.",
        )
        return AnalysisResult(
            summary="A service agreement.",
            overall_risk=RiskLevel.HIGH,
            clauses=clauses,
            language=Language.HINGLISH,
            segments=[segment],
            page_analysis=[
                PageAnalysis(page_number=1, text="one", summary="p1"),
                PageAnalysis(page_number=2, text="two", summary="p2"),
            ],
        )

    def test_counts(self) -> None:
        result = self._result()
        assert result.page_count == 2
        assert len(result.high_risk_clauses) == 2
        assert result.risk_counts() == {RiskLevel.LOW: 1, RiskLevel.MEDIUM: 0, RiskLevel.HIGH: 2}

    def test_to_dict(self) -> None:
        data = self._result().to_dict()
        assert data["overallRisk"] == "high"
        assert data["language"] == "hinglish"
        assert data["segments"][0]["bbox"] == {"x": 0.1, "y": 0.2, "w": 0.5, "h": 0.05}
        assert [p["pageNumber"] for p in data["pageAnalysis"]] == [1, 2]
        assert "text" not in data["pageAnalysis"][0]

    def test_to_dict_without_optional_parts(self) -> None:
        result = AnalysisResult(
            summary="s", overall_risk=RiskLevel.LOW, clauses=[], language=Language.EN
        )
        data = result.to_dict()
        assert "segments" not in data
        assert "pageAnalysis" not in data
        assert result.page_count == 0
