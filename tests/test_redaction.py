"""Tests for PII redaction."""

from __future__ import annotations

import pytest

from contract_risk.redaction import (
    EMAIL_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    SSN_PLACEHOLDER,
    Redactor,
    RegexRedactor,
)

from fakes import FailingRedactionService, UppercaseRedactionService


class TestRegexRedactor:
    def test_email_and_phone(self) -> None:
        text = "Contact foo@bar.com or 555-123-4567 today."
        assert RegexRedactor().redact(text) == (
            f"Contact {EMAIL_PLACEHOLDER} or {PHONE_PLACEHOLDER} today."
        )

    def test_government_id(self) -> None:
        assert RegexRedactor().redact("SSN: 123-45-6789.") == f"SSN: {SSN_PLACEHOLDER}."

    def test_multiple_occurrences(self) -> None:
        text = "a@x.io, b@y.org and 555-000-1111 / 555-222-3333"
        redacted = RegexRedactor().redact(text)
        assert redacted.count(EMAIL_PLACEHOLDER) == 2
        assert redacted.count(PHONE_PLACEHOLDER) == 2

    def test_leaves_other_numbers(self) -> None:
        text = "Invoice 2024-001 is due in 30 days; call 5551234567."
        assert RegexRedactor().redact(text) == text

    @pytest.mark.parametrize(
        "text",
        [
            "Contact foo@bar.com or 555-123-4567 today.",
            "SSN 123-45-6789, phone 555-987-6543",
            "No personal data at all.",
            "",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        redactor = RegexRedactor()
        once = redactor.redact(text)
        assert redactor.redact(once) == once


class TestRedactor:
    def test_defaults_to_regex(self) -> None:
        redactor = Redactor()
        assert redactor.is_delegated is False
        assert redactor.redact("mail me: jane@doe.com") == f"mail me: {EMAIL_PLACEHOLDER}"

    def test_uses_service_when_configured(self) -> None:
        redactor = Redactor(service=UppercaseRedactionService())
        assert redactor.is_delegated is True
        assert redactor.redact("hello") == "HELLO"

    def test_service_failure_falls_back_to_regex(self) -> None:
        redactor = Redactor(service=FailingRedactionService())
        text = "Contact foo@bar.com or 555-123-4567 today."
        assert redactor.redact(text) == (
            f"Contact {EMAIL_PLACEHOLDER} or {PHONE_PLACEHOLDER} today."
        )

    def test_blank_text_untouched(self) -> None:
        redactor = Redactor(service=FailingRedactionService())
        assert redactor.redact("") == ""
        assert redactor.redact("   ") == "   "
