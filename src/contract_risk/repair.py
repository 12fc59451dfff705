"""Parsing untrusted JSON produced by the generation capability.

Model output moves through a fixed sequence of states::

    RawText -> Stripped -> Parsed -> Validated

``parse_json_object`` covers the first three: it strips markdown fences,
isolates the outermost JSON object, and, when the object is truncated,
closes an unterminated string and appends the missing closing brackets.
Callers validate the parsed dict and decide between a valid result, a
salvaged summary (``salvage_string_field``) or a generic fallback.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum

from .exceptions import MalformedCapabilityOutput

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*|\s*```\s*$")
_TRAILING_COMMA_RE = re.compile(r",\s*$")


class ParseOutcome(str, Enum):
    """How a delegated response was turned into a result."""

    VALID = "valid"
    SALVAGED = "salvaged"
    GENERIC_FALLBACK = "generic_fallback"


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapped around the JSON."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_RE.sub("", cleaned).strip()
    return cleaned


def _scan(text: str) -> tuple[list[str], bool, int | None]:
    """Track open brackets and string state across ``text``.

    Returns the stack of unclosed openers, whether the text ends inside a
    string, and the index where the outermost value closed (if it did).
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append(char)
        elif char in "}]":
            if stack:
                stack.pop()
            if not stack:
                return [], False, index
    return stack, in_string, None


def repair_truncated_json(text: str) -> str:
    """Close an unterminated string and any unclosed objects or arrays."""
    stack, in_string, _ = _scan(text)
    if not stack and not in_string:
        return text

    repaired = text
    if in_string:
        if repaired.endswith("\\"):
            repaired = repaired[:-1]
        repaired += '"'
    repaired = _TRAILING_COMMA_RE.sub("", repaired.rstrip())
    if repaired.endswith(":"):
        repaired += " null"
    for opener in reversed(stack):
        repaired += "}" if opener == "{" else "]"
    return repaired


def extract_json_object(text: str) -> str:
    """Isolate the outermost JSON object, keeping a truncated tail intact."""
    start = text.find("{")
    if start < 0:
        raise MalformedCapabilityOutput("No JSON object found in model output", raw=text)
    candidate = text[start:]
    _, _, end = _scan(candidate)
    return candidate[: end + 1] if end is not None else candidate


def parse_json_object(raw: str) -> dict:
    """Parse a JSON object from model output, repairing it if truncated.

    Raises:
        MalformedCapabilityOutput: If no JSON object can be recovered.
    """
    if not raw or not raw.strip():
        raise MalformedCapabilityOutput("Empty model output", raw=raw or "")

    stripped = strip_code_fences(raw)
    candidate = extract_json_object(stripped)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        repaired = repair_truncated_json(candidate)
        try:
            parsed = json.loads(repaired)
        except json.JSONDecodeError as exc:
            raise MalformedCapabilityOutput(f"Unrepairable JSON: {exc}", raw=raw) from exc
        logger.warning("Repaired truncated JSON from model output (%d chars)", len(raw))

    if not isinstance(parsed, dict):
        raise MalformedCapabilityOutput("Model output is not a JSON object", raw=raw)
    return parsed


def salvage_string_field(raw: str, name: str) -> str | None:
    """Pull a single string field out of otherwise unparseable output."""
    match = re.search(rf'"{re.escape(name)}"\s*:\s*"((?:[^"\\]|\\.)*)"', raw)
    if not match:
        return None
    try:
        return json.loads(f'"{match.group(1)}"')
    except json.JSONDecodeError:
        return match.group(1)
