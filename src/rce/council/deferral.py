"""Deferral filter: suppresses actions that are inappropriate right now."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from rce.core.types import ActionCandidate, Context, Deferral, DomainState, RankedAction

logger = logging.getLogger(__name__)

RECOVERY_NEUTRAL_SCORE = 80.0
WAKE_WINDOW_SLACK_HOURS = 1


@dataclass(frozen=True, slots=True)
class DeferralRule:
    """Named predicate; overridable rules yield to urgency at or above the threshold."""

    name: str
    overridable: bool
    check: Callable[[ActionCandidate, DomainState, Context], str | None]


def _is_awake(context: Context) -> bool:
    """Wake window widened by an hour of slack on each side, wrapping past midnight."""
    first = (context.wake_hour - WAKE_WINDOW_SLACK_HOURS) % 24
    last = (context.bed_hour + WAKE_WINDOW_SLACK_HOURS) % 24
    return (context.current_hour - first) % 24 <= (last - first) % 24


class DeferralFilter:
    """Removes scored candidates whose moment is wrong, recording why."""

    def __init__(
        self,
        *,
        stimulant_cutoff_hour: int = 16,
        recovery_floor: float = 40.0,
        override_threshold: float = 90.0,
    ) -> None:
        self.stimulant_cutoff_hour = stimulant_cutoff_hour
        self.recovery_floor = recovery_floor
        self.override_threshold = override_threshold
        self.rules: tuple[DeferralRule, ...] = (
            DeferralRule("outside_wake_window", True, self._outside_wake_window),
            DeferralRule("stimulant_after_cutoff", False, self._stimulant_after_cutoff),
            DeferralRule("training_below_recovery_floor", True, self._training_below_floor),
        )

    def filter(
        self,
        ranked: Sequence[RankedAction],
        state: DomainState,
        context: Context,
    ) -> tuple[list[RankedAction], list[Deferral]]:
        kept: list[RankedAction] = []
        deferrals: list[Deferral] = []
        for item in ranked:
            deferral = self.check(item.candidate, state, context)
            if deferral is None:
                kept.append(item)
                continue
            logger.info(
                "candidate_deferred id=%s rule=%s reason=%s",
                deferral.candidate_id,
                deferral.rule,
                deferral.reason,
            )
            deferrals.append(deferral)
        return kept, deferrals

    def check(self, candidate: ActionCandidate, state: DomainState, context: Context) -> Deferral | None:
        """Return the first rule that suppresses ``candidate``, if any."""
        overridden = candidate.urgency >= self.override_threshold
        for rule in self.rules:
            if rule.overridable and overridden:
                continue
            reason = rule.check(candidate, state, context)
            if reason is not None:
                return Deferral(candidate_id=candidate.id, rule=rule.name, reason=reason)
        return None

    @staticmethod
    def _outside_wake_window(candidate: ActionCandidate, state: DomainState, context: Context) -> str | None:
        _ = (candidate, state)
        if _is_awake(context):
            return None
        return f"{context.current_hour:02d}h is outside {context.wake_time}-{context.bed_time}"

    def _stimulant_after_cutoff(
        self, candidate: ActionCandidate, state: DomainState, context: Context
    ) -> str | None:
        _ = state
        if candidate.category != "stimulant" or context.current_hour <= self.stimulant_cutoff_hour:
            return None
        return f"stimulant after {self.stimulant_cutoff_hour:02d}:00 cutoff"

    def _training_below_floor(
        self, candidate: ActionCandidate, state: DomainState, context: Context
    ) -> str | None:
        _ = context
        if candidate.category != "training":
            return None
        recovery = state.score("recovery", RECOVERY_NEUTRAL_SCORE)
        if recovery >= self.recovery_floor:
            return None
        return f"recovery {recovery:.0f} below floor {self.recovery_floor:.0f}"
