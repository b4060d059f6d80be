"""Time-of-day urgency modifier."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from rce.core.types import ActionCandidate

MORNING = "morning"
MIDDAY = "midday"
AFTERNOON = "afternoon"
EVENING = "evening"
NIGHT = "night"


def time_bucket(hour: int) -> str:
    """Map a clock hour to its coarse bucket."""
    if 5 <= hour < 12:
        return MORNING
    if 12 <= hour < 14:
        return MIDDAY
    if 14 <= hour < 18:
        return AFTERNOON
    if 18 <= hour < 22:
        return EVENING
    return NIGHT


@dataclass(frozen=True, slots=True)
class TimeRule:
    """Additive urgency delta for one domain while ``applies(hour, bucket)`` holds."""

    domain: str
    label: str
    applies: Callable[[int, str], bool]
    delta: float


DEFAULT_POLICY: tuple[TimeRule, ...] = (
    TimeRule("fuel", "early_morning", lambda hour, _: 5 <= hour < 9, 15.0),
    TimeRule("fuel", "lunch_window", lambda hour, _: 11 <= hour <= 13, 10.0),
    TimeRule("fuel", "dinner_window", lambda hour, _: 17 <= hour <= 19, 10.0),
    TimeRule("mindspace", "working_hours", lambda hour, _: 9 <= hour <= 17, 10.0),
    TimeRule("mindspace", "night", lambda _, bucket: bucket == NIGHT, -20.0),
    TimeRule("recovery", "afternoon", lambda _, bucket: bucket == AFTERNOON, -10.0),
    TimeRule("recovery", "evening", lambda _, bucket: bucket == EVENING, 15.0),
    TimeRule("recovery", "night", lambda _, bucket: bucket == NIGHT, 20.0),
    TimeRule("performance", "morning", lambda _, bucket: bucket == MORNING, 5.0),
    TimeRule("performance", "night", lambda _, bucket: bucket == NIGHT, -30.0),
)


class TimeOfDayModifier:
    """Applies the domain x time-bucket policy table to candidate urgency."""

    def __init__(self, policy: tuple[TimeRule, ...] = DEFAULT_POLICY) -> None:
        self._policy = policy

    def delta(self, domain: str, hour: int) -> float:
        bucket = time_bucket(hour)
        return sum(
            rule.delta for rule in self._policy if rule.domain == domain and rule.applies(hour, bucket)
        )

    def apply(self, candidate: ActionCandidate, hour: int) -> ActionCandidate:
        delta = self.delta(candidate.domain, hour)
        if delta == 0:
            return candidate
        # ActionCandidate re-clamps urgency to [0, 100].
        return candidate.evolve(urgency=candidate.urgency + delta)
