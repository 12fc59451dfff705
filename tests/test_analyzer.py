"""Tests for the ContractAnalyzer pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from contract_risk.analyzer import ContractAnalyzer, assign_clause_pages, placeholder_segments
from contract_risk.config import Settings
from contract_risk.exceptions import ExtractionError, UnsupportedLanguageError
from contract_risk.layout import LayoutBlock, LayoutDocument, LayoutPage
from contract_risk.models import Clause, Language, RiskLevel, max_risk
from contract_risk.redaction import EMAIL_PLACEHOLDER, PHONE_PLACEHOLDER
from contract_risk.risk import DocumentRiskAnalyzer

from fakes import FakeGenerationService, FakeLayoutService, FakePDFExtractor

SQUARE = [(0.1, 0.2), (0.9, 0.2), (0.9, 0.25), (0.1, 0.25)]

PAGE_ONE = (
    "SERVICE AGREEMENT between Alpha Corp. and Beta LLC. Contact legal@alpha.example. "
    "The Client shall pay a monthly fee. Late payments accrue a penalty."
)
PAGE_TWO = (
    "In no event shall the Provider be liable for indirect damages. Any dispute "
    "shall be resolved by binding arbitration."
)


def _layout_document() -> LayoutDocument:
    return LayoutDocument(
        text=f"{PAGE_ONE}\n\n{PAGE_TWO}",
        pages=[
            LayoutPage(
                page_number=1,
                lines=[
                    LayoutBlock("Contact legal@alpha.example or 555-123-4567.", SQUARE),
                    LayoutBlock("Late payments accrue a penalty.", SQUARE),
                ],
            ),
            LayoutPage(page_number=2, lines=[LayoutBlock("Any dispute goes to arbitration.", SQUARE)]),
        ],
    )


def _clause(index: int, page: int | None = None, risk: RiskLevel = RiskLevel.LOW) -> Clause:
    return Clause(
        id=f"c{index + 1}",
        title=f"Clause {index + 1}",
        original=f"Original text {index + 1}",
        simple="Plain words.",
        why="It matters.",
        risk=risk,
        page=page,
    )


class TestLayoutPath:
    def test_full_result(self) -> None:
        extractor = FakePDFExtractor([PAGE_ONE, PAGE_TWO])
        analyzer = ContractAnalyzer(layout_service=FakeLayoutService(_layout_document()), pdf_extractor=extractor)
        result = analyzer.analyze(b"%PDF", "en")

        assert [s.id for s in result.segments] == ["seg-0", "seg-1", "seg-2"]
        assert [s.page for s in result.segments] == [1, 1, 2]
        assert result.segments[0].text == f"Contact {EMAIL_PLACEHOLDER} or {PHONE_PLACEHOLDER}."
        assert result.segments[1].risk == RiskLevel.HIGH
        assert [p.page_number for p in result.page_analysis] == [1, 2]
        assert extractor.calls == 1

    def test_layout_page_count_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(_layout_document()),
            pdf_extractor=FakePDFExtractor([PAGE_ONE, PAGE_TWO]),
        )
        with caplog.at_level(logging.INFO, logger="contract_risk.analyzer"):
            analyzer.analyze(b"%PDF")
        assert "Layout path used (2 page(s))" in caplog.text

    def test_overall_risk_is_max_clause_risk(self) -> None:
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(_layout_document()),
            pdf_extractor=FakePDFExtractor([PAGE_ONE, PAGE_TWO]),
        )
        result = analyzer.analyze(b"%PDF")
        assert result.overall_risk == max_risk(c.risk for c in result.clauses)
        assert all(1 <= c.page <= 2 for c in result.clauses)

    def test_page_analysis_failure_is_tolerated(self) -> None:
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(_layout_document()),
            pdf_extractor=FakePDFExtractor(error=RuntimeError("corrupt xref")),
        )
        result = analyzer.analyze(b"%PDF")
        assert result.page_analysis == []
        assert all(c.page == 1 for c in result.clauses)
        assert len(result.segments) == 3

    def test_document_text_is_redacted_before_generation(self) -> None:
        service = FakeGenerationService(
            json.dumps({"summary": "A service agreement.", "clauses": [{"title": "Fees", "risk": "medium"}]})
        )
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(_layout_document()),
            pdf_extractor=FakePDFExtractor([PAGE_ONE, PAGE_TWO]),
            risk_analyzer=DocumentRiskAnalyzer(service),
        )
        result = analyzer.analyze(b"%PDF")

        assert "legal@alpha.example" not in service.prompts[0]
        assert EMAIL_PLACEHOLDER in service.prompts[0]
        assert result.summary == "A service agreement."
        assert result.overall_risk == RiskLevel.MEDIUM

    def test_non_finite_clause_page_from_model(self) -> None:
        service = FakeGenerationService(
            '{"summary": "A service agreement.", "clauses": [{"title": "Fees", "risk": "high", "page": 1e999}]}'
        )
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(_layout_document()),
            pdf_extractor=FakePDFExtractor([PAGE_ONE, PAGE_TWO]),
            risk_analyzer=DocumentRiskAnalyzer(service),
        )
        result = analyzer.analyze(b"%PDF")

        assert [c.title for c in result.clauses] == ["Fees"]
        assert result.clauses[0].page == 1
        assert result.overall_risk == RiskLevel.HIGH


class TestTextOnlyPath:
    def test_layout_failure_uses_pdf_text(self) -> None:
        extractor = FakePDFExtractor([PAGE_ONE, PAGE_TWO, "Signature page."])
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(error=ConnectionError("quota exceeded")),
            pdf_extractor=extractor,
        )
        result = analyzer.analyze(b"%PDF")

        assert extractor.calls == 1
        assert result.page_count == 3
        assert len(result.segments) == len(result.clauses)
        assert all(s.id.startswith("fallback-") for s in result.segments)

    def test_no_layout_service(self) -> None:
        result = ContractAnalyzer(pdf_extractor=FakePDFExtractor([PAGE_ONE])).analyze(b"%PDF")
        assert [s.id for s in result.segments] == [f"fallback-{i}" for i in range(len(result.clauses))]

    def test_placeholder_segments_follow_clauses(self) -> None:
        result = ContractAnalyzer(pdf_extractor=FakePDFExtractor([PAGE_ONE, PAGE_TWO])).analyze(b"%PDF")
        for segment, clause in zip(result.segments, result.clauses):
            assert segment.page == clause.page
            assert segment.risk == clause.risk
            assert segment.simple == clause.simple

    def test_every_path_failing_raises(self) -> None:
        analyzer = ContractAnalyzer(
            layout_service=FakeLayoutService(error=TimeoutError()),
            pdf_extractor=FakePDFExtractor(error=ExtractionError("unreadable")),
        )
        with pytest.raises(ExtractionError):
            analyzer.analyze(b"%PDF")

    def test_no_text_raises(self) -> None:
        analyzer = ContractAnalyzer(pdf_extractor=FakePDFExtractor(["", "  "]))
        with pytest.raises(ExtractionError):
            analyzer.analyze(b"%PDF")

    def test_pdf_budget_applies(self) -> None:
        service = FakeGenerationService("not json")
        analyzer = ContractAnalyzer(
            pdf_extractor=FakePDFExtractor(["x" * 9000 + " ZZZTAIL"]),
            risk_analyzer=DocumentRiskAnalyzer(service),
        )
        analyzer.analyze(b"%PDF")
        assert "ZZZTAIL" not in service.prompts[0]


class TestLanguage:
    def test_unsupported_language_rejected_before_extraction(self) -> None:
        extractor = FakePDFExtractor([PAGE_ONE])
        with pytest.raises(UnsupportedLanguageError):
            ContractAnalyzer(pdf_extractor=extractor).analyze(b"%PDF", "de")
        assert extractor.calls == 0

    def test_language_carried_to_result(self) -> None:
        result = ContractAnalyzer(pdf_extractor=FakePDFExtractor([PAGE_ONE])).analyze(b"%PDF", "hinglish")
        assert result.language == Language.HINGLISH
        assert result.to_dict()["language"] == "hinglish"


class TestAnalyzeText:
    def test_form_feed_pages(self, short_contract_text: str) -> None:
        result = ContractAnalyzer().analyze_text(f"{short_contract_text}\f{PAGE_TWO}\fEnd.")

        assert result.page_count == 3
        assert result.page_analysis[2].summary == "Page 3 contains minimal text content."
        assert all(s.id.startswith("fallback-") for s in result.segments)
        assert result.overall_risk == RiskLevel.HIGH

    def test_blank_text(self) -> None:
        with pytest.raises(ExtractionError):
            ContractAnalyzer().analyze_text(" \n\f ")

    def test_text_budget_is_larger(self) -> None:
        service = FakeGenerationService("not json")
        analyzer = ContractAnalyzer(risk_analyzer=DocumentRiskAnalyzer(service))
        analyzer.analyze_text("x" * 9000 + " ZZZTAIL")
        assert "ZZZTAIL" in service.prompts[0]


class TestAnalyzeFile:
    def test_text_file(self, tmp_path: Path, short_contract_text: str) -> None:
        path = tmp_path / "contract.txt"
        path.write_text(short_contract_text, encoding="utf-8")
        result = ContractAnalyzer().analyze_file(path)
        assert result.clauses
        assert result.page_count == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ContractAnalyzer().analyze_file(tmp_path / "missing.pdf")

    def test_pdf_file_end_to_end(self, tmp_path: Path, pdf_factory) -> None:
        path = tmp_path / "contract.pdf"
        path.write_bytes(
            pdf_factory(
                [
                    "SERVICE AGREEMENT\nThe Client shall pay a monthly fee of $5,000.\n"
                    "Late payments accrue a penalty of 2% per month.\nContact: legal@alpha.example",
                    "LIMITATION OF LIABILITY\nThe Provider is not liable for indirect damages.\n"
                    "Any dispute shall be resolved by binding arbitration.",
                ]
            )
        )
        result = ContractAnalyzer.from_settings(Settings(offline=True)).analyze_file(path)

        assert result.page_count == 2
        assert result.segments[0].id == "seg-0"
        assert {s.page for s in result.segments} == {1, 2}
        assert not any("legal@alpha.example" in s.text for s in result.segments)
        assert result.page_analysis[1].risk_level == RiskLevel.HIGH
        assert result.overall_risk == RiskLevel.HIGH


# ---------------------------------------------------------------------------
# Assembly helpers
# ---------------------------------------------------------------------------


class TestAssignClausePages:
    def test_even_spread(self) -> None:
        clauses = assign_clause_pages([_clause(i) for i in range(6)], 3)
        assert [c.page for c in clauses] == [1, 1, 2, 2, 3, 3]

    def test_more_pages_than_clauses(self) -> None:
        clauses = assign_clause_pages([_clause(i) for i in range(3)], 10)
        assert [c.page for c in clauses] == [1, 2, 3]

    def test_remainder_clamped_to_last_page(self) -> None:
        clauses = assign_clause_pages([_clause(i) for i in range(5)], 3)
        assert [c.page for c in clauses] == [1, 2, 3, 3, 3]

    def test_existing_pages_kept_and_clamped(self) -> None:
        clauses = assign_clause_pages([_clause(0, page=2), _clause(1, page=9)], 3)
        assert [c.page for c in clauses] == [2, 3]

    def test_no_pages(self) -> None:
        clauses = assign_clause_pages([_clause(i) for i in range(4)], 0)
        assert [c.page for c in clauses] == [1, 1, 1, 1]


class TestPlaceholderSegments:
    def test_one_per_clause(self) -> None:
        clauses = [_clause(i, page=1 + i % 2, risk=RiskLevel.MEDIUM) for i in range(4)]
        segments = placeholder_segments(clauses)

        assert [s.id for s in segments] == ["fallback-0", "fallback-1", "fallback-2", "fallback-3"]
        assert [s.page for s in segments] == [1, 2, 1, 2]
        assert [s.bbox.y for s in segments] == [0.1, 0.1, 0.25, 0.25]
        assert all(s.risk == RiskLevel.MEDIUM for s in segments)

    def test_boxes_stay_on_page(self) -> None:
        segments = placeholder_segments([_clause(i, page=1) for i in range(14)])
        for segment in segments:
            assert segment.bbox.x == 0.05
            assert segment.bbox.w == 0.9
            assert segment.bbox.h == 0.1
            assert 0.0 <= segment.bbox.y and segment.bbox.y + segment.bbox.h <= 1.0
        assert segments[6].bbox.y == 0.1

    def test_long_text_truncated(self) -> None:
        clause = Clause(
            id="c1", title="T", original="w" * 250, simple="s", why="y", risk=RiskLevel.LOW, page=1
        )
        assert placeholder_segments([clause])[0].text == "w" * 100 + "..."

    def test_empty(self) -> None:
        assert placeholder_segments([]) == []
