"""Prose annotation of a finished council timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rce.annotator.client import OpenRouterClient, OpenRouterError
from rce.core.types import Timeline

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a concise health coach. Rephrase the recommended action and alerts "
    "in at most three friendly sentences. Do not add new advice."
)


@dataclass(frozen=True, slots=True)
class Annotation:
    text: str
    source: str  # "llm" or "fallback"


class TimelineAnnotator:
    """Optional language layer; called only after the timeline is final.

    Any client failure degrades to the council's rationale strings verbatim.
    """

    def __init__(self, client: OpenRouterClient | None = None, *, temperature: float = 0.3) -> None:
        self._client = client
        self._temperature = temperature

    def annotate(self, timeline: Timeline) -> Annotation:
        if self._client is None:
            return self.fallback(timeline)
        try:
            text = self._client.complete_sync(self.build_messages(timeline), temperature=self._temperature)
        except OpenRouterError as exc:
            logger.warning(
                "annotator_fallback commander=%s error=%s",
                timeline.commander_action.id,
                exc,
            )
            return self.fallback(timeline)
        return Annotation(text=text, source="llm")

    @staticmethod
    def fallback(timeline: Timeline) -> Annotation:
        commander = timeline.commander_action
        lines = [commander.rationale]
        lines.extend(alert.rationale for alert in timeline.alerts if alert.id != commander.id)
        return Annotation(text="\n".join(lines), source="fallback")

    @staticmethod
    def build_messages(timeline: Timeline) -> list[dict[str, str]]:
        commander = timeline.commander_action
        parts = [
            f"Now: {commander.title} - {commander.description}. Why: {commander.rationale}",
            f"Focus: {timeline.focus_message}",
        ]
        parts.extend(f"Alert: {alert.title} - {alert.rationale}" for alert in timeline.alerts)
        parts.extend(f"Next: {action.title}" for action in timeline.upcoming_actions)
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "\n".join(parts)},
        ]
