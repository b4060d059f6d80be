"""Council: gathers expert opinions and assembles the timeline."""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence

from rce.bus.handoffs import HandoffBus
from rce.core.config import Settings
from rce.core.types import (
    ActionCandidate,
    Context,
    DomainState,
    ExpertOpinion,
    RankedAction,
    Timeline,
)
from rce.council.deferral import DeferralFilter
from rce.council.negotiator import Negotiator
from rce.council.priority import PriorityScorer
from rce.council.timing import TimeOfDayModifier
from rce.experts.base import Expert
from rce.experts.registry import ExpertRegistry, build_registry

logger = logging.getLogger(__name__)

ALERT_URGENCY = 70.0
OPTIMAL_SCORE = 80.0
# Used when an expert abstained from weighting but still voted.
NEUTRAL_WEIGHT = 0.2
GENERAL_DOMAIN = "general"
OPTIMAL_MESSAGE = "All systems optimal"


def steady_state_action() -> ActionCandidate:
    return ActionCandidate(
        id="council_steady_state",
        domain="council",
        category="maintenance",
        title="Continue as planned",
        description="Nothing needs your attention right now",
        urgency=10,
        impact=0,
        duration_minutes=0,
        rationale="All experts report stable domains",
    )


class Council:
    """Runs one synchronous evaluation cycle over the registered experts."""

    def __init__(
        self,
        experts: Sequence[Expert] | None = None,
        *,
        settings: Settings | None = None,
        max_workers: int | None = None,
        modifier: TimeOfDayModifier | None = None,
        scorer: PriorityScorer | None = None,
    ) -> None:
        self.settings = settings or Settings()
        workers = self.settings.max_workers if max_workers is None else max_workers
        self.registry: ExpertRegistry = build_registry(
            None if experts is None else list(experts),
            max_workers=workers,
        )
        self.negotiator = Negotiator(penalty=self.settings.constraint_penalty)
        self.modifier = modifier or TimeOfDayModifier()
        self.scorer = scorer or PriorityScorer()
        self.deferral = DeferralFilter(
            stimulant_cutoff_hour=self.settings.stimulant_cutoff_hour,
            recovery_floor=self.settings.recovery_floor,
            override_threshold=self.settings.override_threshold,
        )

    def evaluate(self, state: DomainState, context: Context) -> Timeline:
        """Produce the ranked timeline for ``state`` at ``context``."""
        state = copy.deepcopy(state)
        context = self._deliver_handoffs(state, context)

        analyses = self.registry.analyses(state, context)
        weights = self.registry.weights(state, context)
        opinions = self.registry.opinions(state, context)
        negotiated = [
            opinion
            for opinion in self.negotiator.negotiate(self._one_per_domain(opinions))
            if opinion.primary_action.impact > 0
        ]

        ranked = [
            self.scorer.rank(
                self.modifier.apply(opinion.primary_action, context.current_hour),
                weights.get(opinion.domain, NEUTRAL_WEIGHT),
                context.minute_of_day,
            )
            for opinion in negotiated
        ]
        kept, deferrals = self.deferral.filter(ranked, state, context)
        kept.sort(key=lambda item: (-item.priority_score, item.candidate.id))

        timeline = self._assemble(kept, state)
        timeline.expert_weights = weights
        timeline.analyses = analyses
        timeline.deferrals = deferrals
        logger.info(
            "council_convened experts=%d opinions=%d ranked=%d deferred=%d commander=%s focus=%s",
            len(self.registry),
            len(opinions),
            len(kept),
            len(deferrals),
            timeline.commander_action.id,
            timeline.focus_domain,
        )
        return timeline

    def _deliver_handoffs(self, state: DomainState, context: Context) -> Context:
        bus = HandoffBus(self.registry.domains)
        bus.enqueue_all(self.registry.handoffs(state, context))
        delivered = bus.deliver()
        if delivered:
            logger.info("handoffs_delivered count=%d", len(delivered))
        return context.with_handoffs(delivered)

    @staticmethod
    def _one_per_domain(opinions: Sequence[ExpertOpinion]) -> list[ExpertOpinion]:
        seen: set[str] = set()
        unique: list[ExpertOpinion] = []
        for opinion in opinions:
            if opinion.domain in seen:
                logger.warning("duplicate_opinion_dropped domain=%s", opinion.domain)
                continue
            seen.add(opinion.domain)
            unique.append(opinion)
        return unique

    def _assemble(self, ranked: list[RankedAction], state: DomainState) -> Timeline:
        actions = [item.candidate for item in ranked]
        commander = actions[0] if actions else steady_state_action()
        upcoming = actions[1 : 1 + self.settings.max_upcoming]
        alerts = [
            action
            for action in actions
            if action.urgency >= ALERT_URGENCY and action.time_window is None
        ]
        focus_domain, focus_message = self._focus(state)
        return Timeline(
            commander_action=commander,
            upcoming_actions=upcoming,
            alerts=alerts,
            focus_domain=focus_domain,
            focus_message=focus_message,
            all_ranked=actions,
            priority_scores={item.candidate.id: item.priority_score for item in ranked},
        )

    def _focus(self, state: DomainState) -> tuple[str, str]:
        """Lowest-scoring domain; ties go to registered experts, then snapshot order."""
        registered = self.registry.domains
        order = [domain for domain in registered if state.has(domain)]
        order += [domain for domain in state.domains if domain not in registered]
        if not order:
            return GENERAL_DOMAIN, OPTIMAL_MESSAGE

        focus = min(order, key=lambda domain: (state.score(domain, 100.0), order.index(domain)))
        if state.score(focus, 100.0) >= OPTIMAL_SCORE:
            return focus, OPTIMAL_MESSAGE
        for expert in self.registry:
            if expert.domain == focus and expert.focus_message:
                return focus, expert.focus_message
        return focus, f"Focus on {focus} today"
