"""Runtime configuration read from environment variables.

Values can come from the process environment or a ``.env`` file; the CLI
calls ``load_dotenv()`` before :meth:`Settings.from_env`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

#: Segments sent to the generation model in a single labeling call.
MAX_SEGMENTS_PER_BATCH = 50

#: Pages shorter than this are not analyzed for topics.
MIN_PAGE_CHARS = 50

DEFAULT_MODEL = "gpt-4o-mini"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


@dataclass
class Settings:
    """Process-wide settings, resolved once at start-up."""

    model: str = DEFAULT_MODEL
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    offline: bool = False
    timeout: float = 60.0
    max_retries: int = 3
    label_batches: int = 1
    pdf_char_budget: int = 8000
    text_char_budget: int = 100_000
    log_level: str = "WARNING"

    @property
    def uses_anthropic(self) -> bool:
        return self.model.startswith("claude")

    @property
    def api_key(self) -> Optional[str]:
        """Credential for the provider selected by :attr:`model`."""
        return self.anthropic_api_key if self.uses_anthropic else self.openai_api_key

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            model=os.getenv("CONTRACT_RISK_MODEL", DEFAULT_MODEL),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            offline=_env_bool("CONTRACT_RISK_OFFLINE"),
            timeout=_env_float("CONTRACT_RISK_TIMEOUT", 60.0),
            max_retries=max(1, _env_int("CONTRACT_RISK_MAX_RETRIES", 3)),
            label_batches=max(0, _env_int("CONTRACT_RISK_LABEL_BATCHES", 1)),
            pdf_char_budget=_env_int("CONTRACT_RISK_PDF_CHARS", 8000),
            text_char_budget=_env_int("CONTRACT_RISK_TEXT_CHARS", 100_000),
            log_level=os.getenv("CONTRACT_RISK_LOG_LEVEL", "WARNING").upper(),
        )


def configure_logging(level: str | int = "WARNING") -> None:
    """Set up root logging for command-line use."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
