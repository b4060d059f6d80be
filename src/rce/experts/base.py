"""Base expert contracts for rule-driven candidate generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from rce.core.types import (
    MINUTES_PER_DAY,
    ActionCandidate,
    Context,
    DomainState,
    ExpertAnalysis,
    ExpertOpinion,
    Handoff,
    TimeWindow,
    WEIGHT_RANGE,
    clamp,
)


@dataclass(frozen=True, slots=True)
class ExpertInput:
    """Read-only view of the cycle inputs, scoped to one expert's domain."""

    state: DomainState
    context: Context
    domain: str
    default_score: float = 70.0

    @property
    def hour(self) -> int:
        return self.context.current_hour

    @property
    def now(self) -> int:
        return self.context.minute_of_day

    @property
    def score(self) -> float:
        return self.state.score(self.domain, self.default_score)

    def signal(self, name: str, default: Any = None, domain: str | None = None) -> Any:
        return self.state.signal(domain or self.domain, name, default)

    def number(self, name: str, default: float, domain: str | None = None) -> float:
        value = self.signal(name, default, domain)
        try:
            return float(value)
        except (TypeError, ValueError):
            return float(default)

    def handoff(self, kind: str) -> Handoff | None:
        for item in self.context.inbox(self.domain):
            if item.kind == kind:
                return item
        return None

    @property
    def has_session_today(self) -> bool:
        return self.context.next_session is not None or self.context.last_session is not None

    @property
    def training_hour(self) -> int | None:
        """Clock hour of the next scheduled session, if any."""
        session = self.context.next_session
        if session is None:
            return None
        return ((self.now + session.minutes) % MINUTES_PER_DAY) // 60


Predicate = Callable[[ExpertInput], bool]
Value = Union[float, Callable[[ExpertInput], float]]
Text = Union[str, Callable[[ExpertInput], str]]
WindowFn = Callable[[ExpertInput], Union[TimeWindow, None]]


def _resolve(value: Any, inp: ExpertInput) -> Any:
    return value(inp) if callable(value) else value


def hours_window(start_hour: float, end_hour: float) -> TimeWindow:
    """Build a same-day window from fractional clock hours."""
    start = int(round(max(0.0, start_hour) * 60))
    end = int(round(min(24.0, end_hour) * 60))
    return TimeWindow(start=min(start, MINUTES_PER_DAY - 1), end=min(end, MINUTES_PER_DAY - 1))


def minutes_window(start: int, end: int) -> TimeWindow:
    return TimeWindow(start=max(0, start), end=min(MINUTES_PER_DAY - 1, end))


def before_bed_window(inp: ExpertInput, start_before: int, end_before: int = 0) -> TimeWindow:
    """Window from ``start_before`` to ``end_before`` minutes ahead of bed time.

    Offsets wrap past midnight; a window crossing midnight is cut at the end
    of the day it starts in.
    """
    bed = inp.context.bed_minutes
    start = (bed - start_before) % MINUTES_PER_DAY
    end = (bed - end_before) % MINUTES_PER_DAY
    if end < start:
        end = MINUTES_PER_DAY - 1
    return TimeWindow(start=start, end=end)


@dataclass(frozen=True, slots=True)
class CandidateRule:
    """Declarative recipe for one action an expert may propose."""

    key: str
    category: str
    title: Text
    description: Text
    when: Predicate
    urgency: Value
    impact: Value
    rationale: Text
    duration_minutes: int = 0
    window: WindowFn | None = None
    protocol: Text | None = None

    def build(self, inp: ExpertInput) -> ActionCandidate:
        return ActionCandidate(
            id=f"{inp.domain}_{self.key}",
            domain=inp.domain,
            category=self.category,
            title=str(_resolve(self.title, inp)),
            description=str(_resolve(self.description, inp)),
            urgency=float(_resolve(self.urgency, inp)),
            impact=float(_resolve(self.impact, inp)),
            duration_minutes=self.duration_minutes,
            rationale=str(_resolve(self.rationale, inp)),
            time_window=self.window(inp) if self.window is not None else None,
            protocol=None if self.protocol is None else str(_resolve(self.protocol, inp)),
        )


@dataclass(frozen=True, slots=True)
class Finding:
    """Concern or opportunity line reported by ``analyze``."""

    when: Predicate
    message: Text


@dataclass(frozen=True, slots=True)
class Placeholder:
    """Maintenance opinion used when an expert has nothing to propose."""

    key: str
    title: str
    description: str
    rationale: str
    reasoning: str
    urgency: float = 0.0

    def build(self, inp: ExpertInput) -> ActionCandidate:
        return ActionCandidate(
            id=f"{inp.domain}_{self.key}",
            domain=inp.domain,
            category="maintenance",
            title=self.title,
            description=self.description,
            urgency=min(30.0, self.urgency),
            impact=0.0,
            duration_minutes=0,
            rationale=self.rationale,
        )


class Expert(ABC):
    """Common protocol for all council experts.

    Subclasses declare ``rules``, ``concerns``, ``opportunities`` and a
    ``placeholder``; the base class evaluates them. Every public method is a
    pure function of ``(DomainState, Context)``.
    """

    name: str
    domain: str
    focus_message: str = ""
    default_score: float = 70.0
    rules: tuple[CandidateRule, ...] = ()
    concerns: tuple[Finding, ...] = ()
    opportunities: tuple[Finding, ...] = ()
    placeholder: Placeholder = Placeholder(
        key="maintenance",
        title="Maintain Routine",
        description="Domain within optimal range",
        rationale="No intervention required",
        reasoning="Domain stable.",
    )

    def view(self, state: DomainState, context: Context) -> ExpertInput:
        return ExpertInput(state=state, context=context, domain=self.domain, default_score=self.default_score)

    def analyze(self, state: DomainState, context: Context) -> ExpertAnalysis:
        inp = self.view(state, context)
        concerns = tuple(str(_resolve(f.message, inp)) for f in self.concerns if f.when(inp))
        opportunities = tuple(
            str(_resolve(f.message, inp)) for f in self.opportunities if f.when(inp)
        )
        score = clamp(self.compute_score(inp), (0.0, 100.0))
        return ExpertAnalysis(
            domain=self.domain,
            score=score,
            summary=self.summarize(score, concerns),
            concerns=concerns,
            opportunities=opportunities,
        )

    def get_candidates(self, state: DomainState, context: Context) -> list[ActionCandidate]:
        inp = self.view(state, context)
        return [rule.build(inp) for rule in self.rules if rule.when(inp)]

    def get_weight(self, state: DomainState, context: Context) -> float:
        return clamp(self.weight(self.view(state, context)), WEIGHT_RANGE)

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        """Outgoing cross-domain signals; none by default."""
        _ = (state, context)
        return []

    def form_opinion(self, state: DomainState, context: Context) -> ExpertOpinion:
        inp = self.view(state, context)
        candidates = self.get_candidates(state, context)
        analysis = self.analyze(state, context)

        if not candidates:
            primary = self.placeholder.build(inp)
            opinion = ExpertOpinion(
                domain=self.domain,
                primary_action=primary,
                urgency=primary.urgency,
                reasoning=self.placeholder.reasoning,
                constraints=self.constraints(inp, primary),
            )
            return self.revise(inp, opinion)

        # sorted() is stable: equal urgency keeps declaration order.
        ranked = sorted(candidates, key=lambda candidate: -candidate.urgency)
        primary = ranked[0]
        opinion = ExpertOpinion(
            domain=self.domain,
            primary_action=primary,
            urgency=primary.urgency,
            reasoning=self.reasoning(inp, primary, analysis),
            constraints=self.constraints(inp, primary),
            compromise_options=self.compromises(inp, primary, ranked[1:]),
        )
        return self.revise(inp, opinion)

    @abstractmethod
    def weight(self, inp: ExpertInput) -> float:
        """How much this domain matters right now, before clamping."""

    def compute_score(self, inp: ExpertInput) -> float:
        return inp.score

    def summarize(self, score: float, concerns: Sequence[str]) -> str:
        if not concerns:
            return f"{self.domain.capitalize()} optimal"
        if score < 40:
            return f"{self.domain.capitalize()} critically needs intervention"
        return f"{self.domain.capitalize()} needs attention"

    def reasoning(
        self,
        inp: ExpertInput,
        primary: ActionCandidate,
        analysis: ExpertAnalysis,
    ) -> str:
        _ = inp
        return analysis.concerns[0] if analysis.concerns else primary.rationale

    def constraints(self, inp: ExpertInput, primary: ActionCandidate) -> tuple[str, ...]:
        _ = (inp, primary)
        return ()

    def compromises(
        self,
        inp: ExpertInput,
        primary: ActionCandidate,
        alternatives: Sequence[ActionCandidate],
    ) -> tuple[ActionCandidate, ...]:
        """Fallbacks accepted if the primary is vetoed; remaining candidates by default."""
        _ = (inp, primary)
        return tuple(alternatives)

    def revise(self, inp: ExpertInput, opinion: ExpertOpinion) -> ExpertOpinion:
        """Final hook for cross-cutting adjustments of the opinion."""
        _ = inp
        return opinion


def threshold_weight(score: float, steps: Sequence[tuple[float, float]], base: float) -> float:
    """Return the weight of the first ``(below, weight)`` step matching ``score``."""
    for below, weight in steps:
        if score < below:
            return weight
    return base
