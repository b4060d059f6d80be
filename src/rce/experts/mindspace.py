"""Mindspace expert: stress, focus and emotional regulation."""

from __future__ import annotations

from rce.core.types import Context, DomainState, Handoff
from rce.experts.base import (
    CandidateRule,
    Expert,
    ExpertInput,
    Finding,
    Placeholder,
    before_bed_window,
    hours_window,
    minutes_window,
)

STRESS_DEFAULT = 50.0
FOCUS_DEFAULT = 70.0
VALENCE_DEFAULT = 0.0
AROUSAL_DEFAULT = 0.5


def _stress(inp: ExpertInput) -> float:
    return inp.number("stress_level", STRESS_DEFAULT)


def _focus(inp: ExpertInput) -> float:
    return inp.number("attentional_stability", FOCUS_DEFAULT)


def _session_within(inp: ExpertInput, minutes: int) -> bool:
    session = inp.context.next_session
    return session is not None and 0 <= session.minutes <= minutes


def _evening(inp: ExpertInput) -> bool:
    return inp.context.is_in_last_hours_before_bed(2)


RULES = (
    CandidateRule(
        key="morning_intention",
        category="reflection",
        title="Set Daily Intention",
        description="Two minutes to define what matters today",
        when=lambda inp: inp.context.wake_hour <= inp.hour <= inp.context.wake_hour + 1,
        urgency=55,
        impact=70,
        rationale="Clear intention reduces decision fatigue",
        duration_minutes=5,
        window=lambda inp: hours_window(inp.context.wake_hour, inp.context.wake_hour + 1.5),
        protocol="Write down the one thing that would make today a win",
    ),
    CandidateRule(
        key="stress_relief",
        category="breathwork",
        title="Stress Relief",
        description=lambda inp: f"Stress at {_stress(inp):.0f}% - downregulate now",
        when=lambda inp: _stress(inp) > 60,
        urgency=lambda inp: min(_stress(inp) + 10, 95),
        impact=85,
        rationale="Physiological sigh lowers arousal within minutes",
        duration_minutes=5,
        protocol="Double inhale through the nose, long exhale. Repeat 5 times.",
    ),
    CandidateRule(
        key="focus_boost",
        category="focus",
        title="Focus Recovery",
        description="Attention is scattered - reset before deep work",
        when=lambda inp: _focus(inp) < 50 and 9 <= inp.hour <= 17,
        urgency=65,
        impact=75,
        rationale=lambda inp: f"Attentional stability {_focus(inp):.0f}%",
        duration_minutes=10,
        window=lambda inp: hours_window(9, 17),
        protocol="Close tabs, single task, 25 min focus block",
    ),
    CandidateRule(
        key="afternoon_reset",
        category="breathwork",
        title="Afternoon Reset",
        description="Counter the post-lunch dip",
        when=lambda inp: 14 <= inp.hour <= 16 and _stress(inp) > 40,
        urgency=45,
        impact=65,
        rationale="Short reset prevents afternoon stress accumulation",
        duration_minutes=5,
        window=lambda inp: hours_window(14, 16),
        protocol="5 min walk outside or box breathing",
    ),
    CandidateRule(
        key="pre_training_visualization",
        category="visualization",
        title="Pre-Session Visualization",
        description="Mentally rehearse the upcoming session",
        when=lambda inp: _session_within(inp, 60),
        urgency=50,
        impact=70,
        rationale="Mental rehearsal improves execution quality",
        duration_minutes=5,
        window=lambda inp: minutes_window(inp.now, inp.now + inp.context.next_session.minutes),
    ),
    CandidateRule(
        key="evening_gratitude",
        category="reflection",
        title="Evening Gratitude",
        description="Close the day on a positive note",
        when=_evening,
        urgency=40,
        impact=65,
        rationale="Positive reflection lowers pre-sleep rumination",
        duration_minutes=5,
        window=lambda inp: before_bed_window(inp, 120),
        protocol="Write three things that went well today",
    ),
    CandidateRule(
        key="sleep_anxiety",
        category="breathwork",
        title="Sleep Anxiety Protocol",
        description="Poor sleep detected - calm the mind before bed",
        when=lambda inp: inp.handoff("poor_sleep") is not None,
        urgency=60,
        impact=70,
        rationale="Racing thoughts are a common cause of poor sleep",
        duration_minutes=10,
        protocol="Brain dump to paper, then 4-7-8 breathing",
    ),
    CandidateRule(
        key="competition_prep",
        category="visualization",
        title="Competition Mindset",
        description="Competition ahead - prepare mentally",
        when=lambda inp: inp.handoff("competition_soon") is not None,
        urgency=70,
        impact=85,
        rationale="Pre-competition routines stabilize arousal",
        duration_minutes=15,
        protocol="Visualize the opening, rehearse cue words",
    ),
)


class MindspaceExpert(Expert):
    name = "Mental Coach"
    domain = "mindspace"
    default_score = 70.0
    rules = RULES
    focus_message = "Mental wellness priority - stress management needed"
    concerns = (
        Finding(lambda inp: _stress(inp) > 70, "High stress load"),
        Finding(lambda inp: _focus(inp) < 50, "Attention fragmented"),
        Finding(
            lambda inp: inp.number("emotional_valence", VALENCE_DEFAULT) < -0.3,
            "Low mood detected",
        ),
        Finding(
            lambda inp: inp.number("arousal", AROUSAL_DEFAULT) > 0.8 and inp.hour >= 20,
            "High arousal late in the day",
        ),
    )
    opportunities = (
        Finding(lambda inp: _focus(inp) >= 70 and 9 <= inp.hour <= 12, "Prime window for deep work"),
        Finding(lambda inp: _stress(inp) < 30, "Calm state - good time for hard decisions"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="Stay Present",
        description="Mental state balanced",
        rationale="No mental intervention required",
        reasoning="Mindspace stable.",
    )

    def compute_score(self, inp: ExpertInput) -> float:
        if inp.state.has(self.domain):
            return inp.score
        return (100.0 - _stress(inp)) * 0.5 + _focus(inp) * 0.5

    def weight(self, inp: ExpertInput) -> float:
        stress = _stress(inp)
        if stress > 70:
            weight = 0.35
        elif stress > 50:
            weight = 0.25
        else:
            weight = 0.15
        if _focus(inp) < 50:
            weight += 0.10
        return min(weight, 0.40)

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        inp = self.view(state, context)
        if _stress(inp) > 70:
            return [Handoff(self.domain, "recovery", "high_stress", {"stress_level": _stress(inp)})]
        return []
