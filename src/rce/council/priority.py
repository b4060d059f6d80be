"""Priority Scorer."""

from __future__ import annotations

from rce.core.types import PRIORITY_RANGE, WEIGHT_RANGE, ActionCandidate, RankedAction, clamp

URGENCY_FACTOR = 0.4
IMPACT_FACTOR = 0.4
WINDOW_BONUS = 20.0


class PriorityScorer:
    """Combines urgency, impact, expert weight and time-window fit into one score."""

    def score(self, candidate: ActionCandidate, expert_weight: float, minute_of_day: int) -> float:
        base = candidate.urgency * URGENCY_FACTOR + candidate.impact * IMPACT_FACTOR
        weighted = base * (1.0 + clamp(expert_weight, WEIGHT_RANGE))
        bonus = WINDOW_BONUS if self.in_window(candidate, minute_of_day) else 0.0
        return clamp(weighted + bonus, PRIORITY_RANGE)

    def rank(self, candidate: ActionCandidate, expert_weight: float, minute_of_day: int) -> RankedAction:
        return RankedAction(
            candidate=candidate,
            priority_score=self.score(candidate, expert_weight, minute_of_day),
            expert_weight=clamp(expert_weight, WEIGHT_RANGE),
        )

    @staticmethod
    def in_window(candidate: ActionCandidate, minute_of_day: int) -> bool:
        window = candidate.time_window
        return window is not None and window.contains(minute_of_day)
