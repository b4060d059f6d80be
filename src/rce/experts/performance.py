"""Performance expert: training sessions, load and readiness."""

from __future__ import annotations

from rce.core.types import ActionCandidate, Context, DomainState, Handoff
from rce.experts.base import (
    CandidateRule,
    Expert,
    ExpertInput,
    Finding,
    Placeholder,
    minutes_window,
)

ACWR_DEFAULT = 1.0
ACWR_INJURY_THRESHOLD = 1.5
RECOVERY_DEFAULT = 80.0


def _acwr(inp: ExpertInput) -> float:
    return inp.number("acwr", ACWR_DEFAULT)


def _recovery(inp: ExpertInput) -> float:
    return inp.state.score("recovery", RECOVERY_DEFAULT)


def _upcoming_within(inp: ExpertInput, minutes: int) -> bool:
    session = inp.context.next_session
    return session is not None and 0 <= session.minutes <= minutes


def _session_window(inp: ExpertInput):
    session = inp.context.next_session
    start = inp.now + session.minutes
    return minutes_window(start, start + session.duration_minutes)


def _session_title(inp: ExpertInput) -> str:
    return f"{inp.context.next_session.type.capitalize()} Session"


RULES = (
    CandidateRule(
        key="upcoming_session",
        category="training",
        title=_session_title,
        description=lambda inp: f"{inp.context.next_session.intensity.capitalize()} intensity session",
        when=lambda inp: _upcoming_within(inp, 60),
        urgency=80,
        impact=90,
        rationale=lambda inp: f"Session starts in {inp.context.next_session.minutes} minutes",
        duration_minutes=60,
        window=_session_window,
    ),
    CandidateRule(
        key="reduce_intensity",
        category="training_adjustment",
        title="Reduce Session Intensity",
        description="Recovery too low for the planned load",
        when=lambda inp: inp.context.next_session is not None and _recovery(inp) < 60,
        urgency=70,
        impact=80,
        rationale=lambda inp: f"Recovery at {_recovery(inp):.0f}% - scale volume by 30-40%",
        protocol="Keep technique work, cut intensity and volume",
    ),
    CandidateRule(
        key="capacity_available",
        category="training",
        title="Training Capacity Available",
        description="Fully recovered with no session planned",
        when=lambda inp: not inp.has_session_today and _recovery(inp) >= 80 and 9 <= inp.hour <= 18,
        urgency=40,
        impact=60,
        rationale="High readiness is a good day for a quality session",
        duration_minutes=45,
    ),
    CandidateRule(
        key="rest_day",
        category="rest",
        title="Mandatory Rest Day",
        description="Cancel training today",
        when=lambda inp: _recovery(inp) < 40,
        urgency=95,
        impact=95,
        rationale=lambda inp: f"Recovery at {_recovery(inp):.0f}% - training risks injury",
        protocol="Cancel or postpone today's session",
    ),
    CandidateRule(
        key="warmup",
        category="training",
        title="Warm-Up",
        description="Prime the body for the session",
        when=lambda inp: _upcoming_within(inp, 30),
        urgency=75,
        impact=80,
        rationale="Proper warm-up reduces injury risk",
        duration_minutes=15,
        window=lambda inp: minutes_window(inp.now, inp.now + inp.context.next_session.minutes),
        protocol="Raise, activate, mobilize, potentiate",
    ),
    CandidateRule(
        key="injury_response",
        category="training_adjustment",
        title="Modify Training for Injury Markers",
        description="Medical markers suggest tissue stress",
        when=lambda inp: inp.handoff("injury_markers") is not None,
        urgency=85,
        impact=90,
        rationale="Elevated inflammation raises injury risk under load",
        protocol="Swap impact work for low-load alternatives",
    ),
    CandidateRule(
        key="deload",
        category="training_adjustment",
        title="Deload Recommended",
        description="HRV trend suggests accumulated fatigue",
        when=lambda inp: inp.handoff("hrv_declining") is not None,
        urgency=75,
        impact=85,
        rationale="A planned deload restores adaptation capacity",
        protocol="Reduce volume 40-50% this week",
    ),
)


class PerformanceExpert(Expert):
    name = "Performance Coach"
    domain = "performance"
    default_score = 70.0
    rules = RULES
    focus_message = "Training optimization - adjust load based on readiness"
    concerns = (
        Finding(
            lambda inp: _acwr(inp) > ACWR_INJURY_THRESHOLD,
            lambda inp: f"ACWR {_acwr(inp):.2f} - training load spike",
        ),
        Finding(lambda inp: _acwr(inp) < 0.8, "Training load dropping - detraining risk"),
        Finding(
            lambda inp: inp.context.next_session is not None and _recovery(inp) < 60,
            "Session planned on low recovery",
        ),
    )
    opportunities = (
        Finding(lambda inp: _recovery(inp) >= 80, "High readiness for quality work"),
        Finding(lambda inp: 0.8 <= _acwr(inp) <= 1.3, "Training load in the sweet spot"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="Stay Active",
        description="No session demands right now",
        rationale="No performance intervention required",
        reasoning="Performance stable.",
    )

    def compute_score(self, inp: ExpertInput) -> float:
        if inp.state.has(self.domain):
            return inp.score
        score = _recovery(inp)
        if _acwr(inp) > ACWR_INJURY_THRESHOLD:
            score -= 20
        return score

    def weight(self, inp: ExpertInput) -> float:
        weight = 0.30 if inp.has_session_today else 0.20
        if inp.context.has_goal("performance", "athlete", "competition"):
            weight += 0.15
        acwr = _acwr(inp)
        if acwr > 1.3 or acwr < 0.8:
            weight += 0.10
        return min(weight, 0.45)

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        inp = self.view(state, context)
        out: list[Handoff] = []
        if _acwr(inp) > ACWR_INJURY_THRESHOLD:
            out.append(Handoff(self.domain, "recovery", "acwr_spike", {"acwr": _acwr(inp)}))
        session = context.next_session
        if session is not None and session.intensity == "high":
            out.append(Handoff(self.domain, "fuel", "high_intensity_session", {"type": session.type}))
        if session is not None and session.type == "competition":
            out.append(
                Handoff(self.domain, "mindspace", "competition_soon", {"minutes": session.minutes})
            )
        return out

    def constraints(self, inp: ExpertInput, primary: ActionCandidate) -> tuple[str, ...]:
        _ = primary
        if _acwr(inp) > ACWR_INJURY_THRESHOLD:
            return ("injury_risk",)
        return ()
