"""PII redaction.

A delegated :class:`RedactionService` is used when one is configured. The
regex fallback always covers email addresses, ``NNN-NNN-NNNN`` phone numbers
and ``NNN-NN-NNNN`` government ID numbers. Placeholders never match the PII
patterns, so redaction is idempotent.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

EMAIL_PLACEHOLDER = "[EMAIL_REDACTED]"
PHONE_PLACEHOLDER = "[PHONE_REDACTED]"
SSN_PLACEHOLDER = "[SSN_REDACTED]"

_PII_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), EMAIL_PLACEHOLDER),
    (re.compile(r"\b\d{3}-\d{3}-\d{4}\b"), PHONE_PLACEHOLDER),
    (re.compile(r"\b\d{3}-\d{2}-\d{4}\b"), SSN_PLACEHOLDER),
]


class RedactionService(ABC):
    """Capability interface for a general PII detection provider."""

    @abstractmethod
    def redact(self, text: str) -> str:
        """Return ``text`` with PII replaced by typed placeholders."""
        ...


class RegexRedactor(RedactionService):
    """Deterministic pattern-based redaction."""

    def __init__(self, patterns: list[tuple[re.Pattern, str]] | None = None) -> None:
        self.patterns = patterns or _PII_PATTERNS

    def redact(self, text: str) -> str:
        if not text or not text.strip():
            return text
        for pattern, placeholder in self.patterns:
            text = pattern.sub(placeholder, text)
        return text


class Redactor:
    """Redaction with a delegated service and a regex fallback.

    Never raises: when the service is absent or fails, the regex fallback
    is applied instead of passing the text through unredacted.

    Args:
        service: Optional delegated redaction capability.
        fallback: Regex redactor used when the service is unavailable.
    """

    def __init__(
        self,
        service: RedactionService | None = None,
        fallback: RegexRedactor | None = None,
    ) -> None:
        self._service = service
        self._fallback = fallback or RegexRedactor()

    @property
    def is_delegated(self) -> bool:
        return self._service is not None

    def redact(self, text: str) -> str:
        if not text or not text.strip():
            return text
        if self._service is not None:
            try:
                return self._service.redact(text)
            except Exception as exc:
                logger.warning("Redaction service failed, using regex fallback: %s", exc)
        return self._redact_fallback(text)

    def _redact_fallback(self, text: str) -> str:
        try:
            return self._fallback.redact(text)
        except Exception:
            # Unredacted text is the last resort only.
            logger.exception("Regex redaction failed, proceeding with unredacted text")
            return text
