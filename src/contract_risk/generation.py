"""Text generation capability backed by OpenAI or Anthropic models.

The generation output is treated as untrusted text; callers parse and
validate it with :mod:`contract_risk.repair`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tenacity import retry, stop_after_attempt, wait_exponential

from .config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    """Per-call generation parameters."""

    temperature: float = 0.2
    max_output_tokens: int = 2048
    system: Optional[str] = None


class TextGenerationService(ABC):
    """Capability interface: ``generate(prompt, config) -> text``."""

    @abstractmethod
    def generate(self, prompt: str, config: GenerationConfig) -> str:
        ...


class _RetryingService(TextGenerationService):
    """Shared retry wrapper around a provider call."""

    def __init__(self, model: str, timeout: float = 60.0, max_retries: int = 3) -> None:
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries

    def generate(self, prompt: str, config: GenerationConfig) -> str:
        call = retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=4, max=10),
            reraise=True,
        )(self._call)
        return call(prompt, config) or ""

    @abstractmethod
    def _call(self, prompt: str, config: GenerationConfig) -> str:
        ...


class OpenAIGenerationService(_RetryingService):
    """Chat-completions client for OpenAI models."""

    def __init__(self, api_key: str, model: str, timeout: float = 60.0, max_retries: int = 3) -> None:
        super().__init__(model, timeout, max_retries)
        from openai import OpenAI

        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def _call(self, prompt: str, config: GenerationConfig) -> str:
        messages = []
        if config.system:
            messages.append({"role": "system", "content": config.system})
        messages.append({"role": "user", "content": prompt})
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=config.temperature,
            max_tokens=config.max_output_tokens,
        )
        return response.choices[0].message.content


class AnthropicGenerationService(_RetryingService):
    """Messages-API client for Anthropic models."""

    def __init__(self, api_key: str, model: str, timeout: float = 60.0, max_retries: int = 3) -> None:
        super().__init__(model, timeout, max_retries)
        from anthropic import Anthropic

        self.client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def _call(self, prompt: str, config: GenerationConfig) -> str:
        kwargs = {}
        if config.system:
            kwargs["system"] = config.system
        response = self.client.messages.create(
            model=self.model,
            max_tokens=config.max_output_tokens,
            temperature=config.temperature,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )


def create_generation_service(settings: Settings) -> TextGenerationService | None:
    """Build the generation capability, or ``None`` when it is not configured.

    ``None`` puts the pipeline in heuristic mode: every component uses its
    deterministic fallback.
    """
    if settings.offline:
        logger.info("Offline mode: text generation disabled")
        return None

    api_key = settings.api_key
    if not api_key:
        provider = "ANTHROPIC_API_KEY" if settings.uses_anthropic else "OPENAI_API_KEY"
        logger.info("%s not set: text generation disabled, using heuristics", provider)
        return None

    cls = AnthropicGenerationService if settings.uses_anthropic else OpenAIGenerationService
    return cls(
        api_key=api_key,
        model=settings.model,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    )
