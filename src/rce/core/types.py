"""Canonical domain types shared across council layers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

URGENCY_RANGE = (0.0, 100.0)
IMPACT_RANGE = (0.0, 100.0)
WEIGHT_RANGE = (0.0, 1.0)
PRIORITY_RANGE = (0.0, 180.0)

MINUTES_PER_DAY = 24 * 60


def clamp(value: float, bounds: tuple[float, float]) -> float:
    """Clamp a scalar into an inclusive ``(low, high)`` range."""
    low, high = bounds
    return max(low, min(high, float(value)))


def parse_clock(raw: str, default: str = "00:00") -> int:
    """Convert an ``HH:MM`` string into minutes since midnight."""
    text = (raw or default).strip()
    try:
        hours_str, _, minutes_str = text.partition(":")
        hours = int(hours_str)
        minutes = int(minutes_str or 0)
    except ValueError as exc:
        raise ValueError(f"Invalid clock time: {raw!r}") from exc
    if not 0 <= hours < 24 or not 0 <= minutes < 60:
        raise ValueError(f"Invalid clock time: {raw!r}")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True, slots=True)
class DomainSnapshot:
    """Normalized output of one external domain score calculator."""

    score: float
    signals: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", clamp(self.score, (0.0, 100.0)))
        object.__setattr__(self, "signals", MappingProxyType(dict(self.signals)))

    def __deepcopy__(self, memo: dict[int, Any]) -> DomainSnapshot:
        return DomainSnapshot(score=self.score, signals=dict(self.signals))


@dataclass(frozen=True, slots=True)
class DomainState:
    """Read-only snapshot of every domain, in registration order."""

    domains: Mapping[str, DomainSnapshot] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "domains", MappingProxyType(dict(self.domains)))

    def __deepcopy__(self, memo: dict[int, Any]) -> DomainState:
        return DomainState(
            {
                name: DomainSnapshot(score=snap.score, signals=dict(snap.signals))
                for name, snap in self.domains.items()
            }
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> DomainState:
        """Build from ``{domain: {"score": .., "signals": {..}}}``."""
        domains: dict[str, DomainSnapshot] = {}
        for name, payload in raw.items():
            signals = payload.get("signals", {})
            domains[str(name)] = DomainSnapshot(
                score=float(payload.get("score", 0.0)),
                signals=dict(signals) if isinstance(signals, Mapping) else {},
            )
        return cls(domains)

    def has(self, domain: str) -> bool:
        return domain in self.domains

    def score(self, domain: str, default: float) -> float:
        snapshot = self.domains.get(domain)
        return snapshot.score if snapshot is not None else float(default)

    def signal(self, domain: str, name: str, default: Any = None) -> Any:
        """Return a domain signal, or ``default`` when absent or null."""
        snapshot = self.domains.get(domain)
        if snapshot is None:
            return default
        value = snapshot.signals.get(name)
        return default if value is None else value

    def to_dict(self) -> dict[str, Any]:
        return {
            name: {"score": snap.score, "signals": dict(snap.signals)}
            for name, snap in self.domains.items()
        }


@dataclass(frozen=True, slots=True)
class SessionRef:
    """Scheduled or completed activity relative to the evaluation instant."""

    type: str
    minutes: int
    intensity: str = "moderate"
    duration_minutes: int = 60


@dataclass(frozen=True, slots=True)
class Handoff:
    """Cross-domain signal raised by one expert for another."""

    from_domain: str
    to_domain: str
    kind: str
    data: Mapping[str, Any] = field(default_factory=dict)
    dedupe_key: str = ""

    def key(self) -> str:
        if self.dedupe_key:
            return self.dedupe_key
        content_key = "|".join(f"{k}:{self.data[k]}" for k in sorted(self.data.keys()))
        return f"{self.from_domain}->{self.to_domain}:{self.kind}:{content_key}"


@dataclass(frozen=True, slots=True)
class Context:
    """Temporal/session context fed identically to every expert."""

    current_hour: int
    current_minute: int = 0
    wake_time: str = "07:30"
    bed_time: str = "23:00"
    day_of_week: int = 0
    next_session: SessionRef | None = None
    last_session: SessionRef | None = None
    user_goal_tags: frozenset[str] = frozenset()
    handoffs: tuple[Handoff, ...] = ()

    @property
    def minute_of_day(self) -> int:
        return self.current_hour * 60 + self.current_minute

    @property
    def wake_minutes(self) -> int:
        return parse_clock(self.wake_time, "07:30")

    @property
    def bed_minutes(self) -> int:
        return parse_clock(self.bed_time, "23:00")

    @property
    def wake_hour(self) -> int:
        return self.wake_minutes // 60

    @property
    def bed_hour(self) -> int:
        return self.bed_minutes // 60

    @property
    def minutes_to_bed(self) -> int:
        """Signed distance to bed time, counted along the day that starts at wake time.

        Negative once bed time has passed, until the next wake time. Bed times
        after midnight belong to the day that started the previous morning.
        """
        awake_span = (self.bed_minutes - self.wake_minutes) % MINUTES_PER_DAY
        since_wake = (self.minute_of_day - self.wake_minutes) % MINUTES_PER_DAY
        return awake_span - since_wake

    @property
    def hours_to_bed(self) -> int:
        """Whole clock hours until the bed hour, wrapping past midnight."""
        return (self.bed_hour - self.current_hour) % 24

    def is_within_before_bed(self, minutes: int) -> bool:
        return self.minutes_to_bed <= minutes

    def is_in_last_hours_before_bed(self, hours: int) -> bool:
        """True during the ``hours`` clock hours that precede the bed hour."""
        return 1 <= self.hours_to_bed <= hours

    def has_goal(self, *fragments: str) -> bool:
        return any(fragment in tag for tag in self.user_goal_tags for fragment in fragments)

    def inbox(self, domain: str) -> tuple[Handoff, ...]:
        return tuple(handoff for handoff in self.handoffs if handoff.to_domain == domain)

    def with_handoffs(self, handoffs: tuple[Handoff, ...]) -> Context:
        return replace(self, handoffs=handoffs)


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Inclusive window expressed in minutes since midnight."""

    start: int
    end: int

    def contains(self, minute_of_day: int) -> bool:
        return self.start <= minute_of_day <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": format_clock(self.start), "end": format_clock(self.end)}


@dataclass(frozen=True, slots=True)
class ActionCandidate:
    """Immutable action proposal produced by one expert in one cycle."""

    id: str
    domain: str
    category: str
    title: str
    description: str
    urgency: float
    impact: float
    duration_minutes: int
    rationale: str
    time_window: TimeWindow | None = None
    protocol: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "urgency", clamp(self.urgency, URGENCY_RANGE))
        object.__setattr__(self, "impact", clamp(self.impact, IMPACT_RANGE))

    def evolve(self, **changes: Any) -> ActionCandidate:
        """Return a copy with ``changes`` applied (re-clamped)."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["time_window"] = self.time_window.to_dict() if self.time_window else None
        return payload


@dataclass(frozen=True, slots=True)
class ExpertAnalysis:
    """Read-only assessment of one domain."""

    domain: str
    score: float
    summary: str
    concerns: tuple[str, ...] = ()
    opportunities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "score": self.score,
            "summary": self.summary,
            "concerns": list(self.concerns),
            "opportunities": list(self.opportunities),
        }


@dataclass(frozen=True, slots=True)
class ExpertOpinion:
    """One expert's single vote for the cycle."""

    domain: str
    primary_action: ActionCandidate
    urgency: float
    reasoning: str
    constraints: tuple[str, ...] = ()
    compromise_options: tuple[ActionCandidate, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "urgency", clamp(self.urgency, URGENCY_RANGE))
        primary_id = self.primary_action.id
        object.__setattr__(
            self,
            "compromise_options",
            tuple(option for option in self.compromise_options if option.id != primary_id),
        )
        object.__setattr__(self, "constraints", tuple(dict.fromkeys(self.constraints)))


@dataclass(frozen=True, slots=True)
class Deferral:
    """Audit record of a candidate suppressed by the appropriateness filter."""

    candidate_id: str
    rule: str
    reason: str


@dataclass(frozen=True, slots=True)
class RankedAction:
    """Candidate together with the derived ranking key of this cycle."""

    candidate: ActionCandidate
    priority_score: float
    expert_weight: float


@dataclass(slots=True)
class Timeline:
    """Council output for one evaluation cycle."""

    commander_action: ActionCandidate
    upcoming_actions: list[ActionCandidate]
    alerts: list[ActionCandidate]
    focus_domain: str
    focus_message: str
    all_ranked: list[ActionCandidate]
    priority_scores: dict[str, float] = field(default_factory=dict)
    expert_weights: dict[str, float] = field(default_factory=dict)
    analyses: dict[str, ExpertAnalysis] = field(default_factory=dict)
    deferrals: list[Deferral] = field(default_factory=list)

    def scheduled(self) -> list[ActionCandidate]:
        """Ranked actions that carry a time window, ordered by window start."""
        windowed = [action for action in self.all_ranked if action.time_window is not None]
        return sorted(windowed, key=lambda action: (action.time_window.start, action.id))  # type: ignore[union-attr]

    def to_dict(self) -> dict[str, Any]:
        """Public payload; diagnostics (analyses, deferrals) stay internal."""
        return {
            "commander_action": self.commander_action.to_dict(),
            "upcoming_actions": [action.to_dict() for action in self.upcoming_actions],
            "alerts": [action.to_dict() for action in self.alerts],
            "focus_domain": self.focus_domain,
            "focus_message": self.focus_message,
            "all_ranked": [action.to_dict() for action in self.all_ranked],
            "priority_scores": dict(self.priority_scores),
        }


@dataclass(frozen=True, slots=True)
class Profile:
    """Person-level preferences carried by a snapshot."""

    wake_time: str | None = None
    bed_time: str | None = None
    goals: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScheduledSession:
    """Session entry of a snapshot, anchored to a clock time of the same day."""

    type: str
    time_of_day: str
    completed: bool = False
    intensity: str = "moderate"
    duration_minutes: int = 60


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Validated input of one evaluation cycle."""

    state: DomainState
    profile: Profile = field(default_factory=Profile)
    sessions: tuple[ScheduledSession, ...] = ()
    captured_at: datetime | None = None
