"""Exception taxonomy for the analysis pipeline.

Only :class:`ExtractionError` (and :class:`UnsupportedLanguageError`, raised
before any work starts) ever reaches callers of ``ContractAnalyzer``. The
other errors are raised and absorbed inside the component that owns the
corresponding fallback.
"""

from __future__ import annotations


class ContractRiskError(Exception):
    """Base class for all package errors."""


class ExtractionError(ContractRiskError):
    """No usable text could be obtained from the document by any path."""

    default_hint = "Try again with a clearer scan or a different file."

    def __init__(self, message: str = "Could not extract text from the document.") -> None:
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        return f"{self.message} {self.default_hint}"


class UnsupportedLanguageError(ContractRiskError, ValueError):
    """The requested output language is not in the supported set."""


class CapabilityUnavailable(ContractRiskError):
    """A delegated capability is not configured or not reachable."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"{capability} capability is not available")
        self.capability = capability


class MalformedCapabilityOutput(ContractRiskError):
    """Delegated generation returned output that could not be parsed."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class PartialAnalysisFailure(ContractRiskError):
    """A single page or segment batch failed independently of the rest."""

    def __init__(self, unit: str, cause: Exception | None = None) -> None:
        super().__init__(f"{unit} failed: {cause}" if cause else f"{unit} failed")
        self.unit = unit
        self.cause = cause
