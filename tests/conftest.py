"""Shared test fixtures for contract-risk tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from fakes import build_pdf


@pytest.fixture
def short_contract_text() -> str:
    """A short service agreement touching several risk topics."""
    return (
        "SERVICE AGREEMENT\n\n"
        "This Agreement is entered into by Alpha Corp. (contact: legal@alpha.example, "
        "555-123-4567) and Beta Services LLC.\n\n"
        "1. PAYMENT\n"
        "The Client shall pay the Provider a monthly fee of $5,000. Late payments "
        "accrue a penalty of 2% per month.\n\n"
        "2. TERMINATION\n"
        "Either party may terminate this Agreement upon thirty days written notice. "
        "Early termination by the Client requires a termination fee.\n\n"
        "3. LIMITATION OF LIABILITY\n"
        "In no event shall the Provider be liable for indirect damages.\n\n"
        "4. DISPUTES\n"
        "Any dispute shall be resolved by binding arbitration.\n"
    )


@pytest.fixture
def neutral_text() -> str:
    """Text matching none of the topic keyword sets."""
    return (
        "Hello world. This note describes the weather in spring, with birds singing "
        "in the morning sun and long walks along the river."
    )


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    return build_pdf
