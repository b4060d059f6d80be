"""Negotiator: resolves opinions that violate another expert's constraints."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from rce.core.types import ExpertOpinion

logger = logging.getLogger(__name__)

# (action category, constraint tag) pairs that conflict.
DEFAULT_VIOLATIONS: tuple[tuple[str, str], ...] = (
    ("eating", "digestive_load_risk"),
    ("training", "injury_risk"),
)

DEFAULT_PENALTY = 50.0


def compromise_suffix(constraint: str) -> str:
    return f" Adjusted due to council constraint: {constraint}."


class Negotiator:
    """Single-pass constraint resolution.

    A compromise that replaces a vetoed primary is not re-validated against
    the active constraints.
    """

    def __init__(
        self,
        violations: Iterable[tuple[str, str]] = DEFAULT_VIOLATIONS,
        penalty: float = DEFAULT_PENALTY,
    ) -> None:
        self._violations = frozenset(violations)
        self._penalty = penalty

    @staticmethod
    def active_constraints(opinions: Sequence[ExpertOpinion]) -> tuple[str, ...]:
        """Ordered union of constraints from opinions with urgency above zero.

        Opinions are visited in lexicographic domain order and constraints
        keep their first-seen position.
        """
        ordered: dict[str, None] = {}
        for opinion in sorted(opinions, key=lambda item: item.domain):
            if opinion.urgency <= 0:
                continue
            for constraint in opinion.constraints:
                ordered.setdefault(constraint, None)
        return tuple(ordered)

    def violated_constraint(self, opinion: ExpertOpinion, constraints: Sequence[str]) -> str | None:
        category = opinion.primary_action.category
        for constraint in constraints:
            if (category, constraint) in self._violations:
                return constraint
        return None

    def negotiate(self, opinions: Sequence[ExpertOpinion]) -> list[ExpertOpinion]:
        constraints = self.active_constraints(opinions)
        if not constraints:
            return list(opinions)
        return [self._resolve(opinion, constraints) for opinion in opinions]

    def _resolve(self, opinion: ExpertOpinion, constraints: Sequence[str]) -> ExpertOpinion:
        constraint = self.violated_constraint(opinion, constraints)
        if constraint is None:
            return opinion

        if opinion.compromise_options:
            compromise = opinion.compromise_options[0]
            replacement = compromise.evolve(rationale=compromise.rationale + compromise_suffix(constraint))
            logger.info(
                "opinion_downgraded domain=%s constraint=%s from=%s to=%s",
                opinion.domain,
                constraint,
                opinion.primary_action.id,
                replacement.id,
            )
            return ExpertOpinion(
                domain=opinion.domain,
                primary_action=replacement,
                urgency=replacement.urgency,
                reasoning=f"{opinion.reasoning} (Downgraded due to {constraint})",
                constraints=opinion.constraints,
                compromise_options=opinion.compromise_options[1:],
            )

        urgency = max(0.0, opinion.urgency - self._penalty)
        logger.info(
            "opinion_downgraded domain=%s constraint=%s action=%s urgency=%.1f->%.1f",
            opinion.domain,
            constraint,
            opinion.primary_action.id,
            opinion.urgency,
            urgency,
        )
        return ExpertOpinion(
            domain=opinion.domain,
            primary_action=opinion.primary_action.evolve(urgency=urgency),
            urgency=urgency,
            reasoning=f"{opinion.reasoning} (Urgency reduced due to {constraint})",
            constraints=opinion.constraints,
            compromise_options=opinion.compromise_options,
        )
