"""Risk labels and plain-language notes for positioned segments.

Segments are sent to the generation model in batches of at most
``MAX_SEGMENTS_PER_BATCH``. Batches are independent calls run in parallel.
Segments beyond the configured number of batches, and every segment when no
model is configured, are labeled by the deterministic keyword classifier.
A batch whose call fails keeps its segments with a low-risk "requires
review" label; no segment is ever dropped.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor

from .config import MAX_SEGMENTS_PER_BATCH
from .exceptions import MalformedCapabilityOutput, PartialAnalysisFailure
from .generation import GenerationConfig, TextGenerationService
from .heuristics import classify_segment
from .models import Language, RawSegment, RiskLevel, Segment
from .prompts import LANGUAGE_NAMES, SEGMENT_PROMPT, SEGMENT_SYSTEM_PROMPT
from .repair import parse_json_object

logger = logging.getLogger(__name__)

UNLABELED_NOTE = "Standard legal text."
REVIEW_NOTE = "Legal text requiring review."

LABEL_CONFIG = GenerationConfig(
    temperature=0.2, max_output_tokens=3000, system=SEGMENT_SYSTEM_PROMPT
)


class SegmentLabeler:
    """Assigns a risk level and a one-sentence explanation to each segment.

    Args:
        service: Optional text generation capability.
        max_batches: Number of model batches per document.
        batch_size: Segments per model call.
    """

    def __init__(
        self,
        service: TextGenerationService | None = None,
        max_batches: int = 1,
        batch_size: int = MAX_SEGMENTS_PER_BATCH,
    ) -> None:
        self._service = service
        self.max_batches = max_batches
        self.batch_size = min(batch_size, MAX_SEGMENTS_PER_BATCH)

    def label(self, segments: list[RawSegment], language: Language) -> list[Segment]:
        """Label every segment, preserving order and ids ``seg-{index}``."""
        if not segments:
            return []

        delegated_count = 0
        if self._service is not None:
            delegated_count = min(len(segments), self.max_batches * self.batch_size)
        else:
            logger.info("No generation service: labeling %d segment(s) heuristically", len(segments))

        batches = [
            list(range(start, min(start + self.batch_size, delegated_count)))
            for start in range(0, delegated_count, self.batch_size)
        ]
        labeled: list[Segment] = []
        if batches:
            with ThreadPoolExecutor(max_workers=len(batches)) as executor:
                for batch_result in executor.map(
                    lambda batch: self._label_batch_safely(segments, batch, language), batches
                ):
                    labeled.extend(batch_result)

        if delegated_count < len(segments) and self._service is not None:
            logger.info(
                "Labeling %d segment(s) beyond the model batches heuristically",
                len(segments) - delegated_count,
            )
        for index in range(delegated_count, len(segments)):
            risk, note = classify_segment(segments[index].text)
            labeled.append(_to_segment(index, segments[index], risk, note))
        return labeled

    def _label_batch_safely(
        self, segments: list[RawSegment], indices: list[int], language: Language
    ) -> list[Segment]:
        try:
            return self._label_batch(segments, indices, language)
        except PartialAnalysisFailure as exc:
            logger.warning("Segment labeling batch failed, using defaults: %s", exc)
            return [
                _to_segment(i, segments[i], RiskLevel.LOW, REVIEW_NOTE) for i in indices
            ]

    def _label_batch(
        self, segments: list[RawSegment], indices: list[int], language: Language
    ) -> list[Segment]:
        lines = [{"i": i, "text": segments[i].text} for i in indices]
        prompt = SEGMENT_PROMPT.format(
            language_name=LANGUAGE_NAMES[language.value],
            lines_json=json.dumps(lines, ensure_ascii=False, separators=(",", ":")),
        )
        try:
            raw = self._service.generate(prompt, LABEL_CONFIG)
            labels = _parse_labels(raw)
        except Exception as exc:
            raise PartialAnalysisFailure(f"segments {indices[0]}-{indices[-1]}", exc) from exc

        result = []
        for i in indices:
            label = labels.get(i, {})
            note = label.get("simple")
            result.append(
                _to_segment(
                    i,
                    segments[i],
                    RiskLevel.coerce(label.get("risk"), RiskLevel.LOW),
                    note.strip() if isinstance(note, str) and note.strip() else UNLABELED_NOTE,
                )
            )
        return result


def _parse_labels(raw: str) -> dict[int, dict]:
    parsed = parse_json_object(raw)
    labels = parsed.get("labels")
    if not isinstance(labels, list):
        raise MalformedCapabilityOutput("Missing 'labels' list in labeling output", raw=raw)

    by_index: dict[int, dict] = {}
    for label in labels:
        if not isinstance(label, dict):
            continue
        try:
            by_index.setdefault(int(label.get("i")), label)
        except (TypeError, ValueError):
            continue
    return by_index


def _to_segment(index: int, raw: RawSegment, risk: RiskLevel, simple: str) -> Segment:
    return Segment(
        id=f"seg-{index}",
        page=raw.page,
        bbox=raw.bbox,
        text=raw.text,
        risk=risk,
        simple=simple,
    )
