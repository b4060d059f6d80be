"""Circadian expert: light, temperature and sleep timing for longevity."""

from __future__ import annotations

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

RECOVERY_DEFAULT = 80.0
SLEEP_HOURS_DEFAULT = 7.0
CAFFEINE_DEFAULT_MG = 0.0


def _morning(inp: ExpertInput) -> bool:
    wake_hour = inp.context.wake_hour
    return wake_hour <= inp.hour <= wake_hour + 2


def _evening(inp: ExpertInput) -> bool:
    return inp.context.is_within_before_bed(180)


def _bed_window(inp: ExpertInput, hours: int) -> bool:
    return inp.context.is_in_last_hours_before_bed(hours)


RULES = (
    CandidateRule(
        key="morning_light",
        category="light",
        title="Morning Sunlight",
        description="Get outside light within the first hours of waking",
        when=_morning,
        urgency=lambda inp: 80 if inp.hour <= inp.context.wake_hour + 1 else 60,
        impact=90,
        rationale="Morning light anchors the circadian clock and cortisol peak",
        duration_minutes=10,
        window=lambda inp: hours_window(inp.context.wake_hour, inp.context.wake_hour + 2),
        protocol="10-20 min outside, no sunglasses",
    ),
    CandidateRule(
        key="morning_movement",
        category="movement",
        title="Morning Movement",
        description="Light movement to raise core temperature",
        when=lambda inp: inp.context.wake_minutes + 30 <= inp.now <= inp.context.wake_minutes + 120,
        urgency=50,
        impact=65,
        rationale="Early movement advances the temperature rhythm",
        duration_minutes=15,
        window=lambda inp: minutes_window(inp.context.wake_minutes + 30, inp.context.wake_minutes + 120),
        protocol="Brisk walk or mobility flow",
    ),
    CandidateRule(
        key="caffeine_cutoff",
        category="stimulant",
        title="Caffeine Cutoff",
        description="Last window for caffeine before it harms sleep",
        when=lambda inp: 13 <= inp.hour <= 15,
        urgency=lambda inp: 65 if inp.hour > 14 else 45,
        impact=75,
        rationale="Adenosine blockade persists 8-10 hours",
        duration_minutes=2,
        protocol="Switch to decaf or herbal tea",
    ),
    CandidateRule(
        key="cold_exposure",
        category="cold_exposure",
        title="Cold Exposure",
        description="Deliberate cold for metabolic health",
        when=lambda inp: inp.state.score("recovery", RECOVERY_DEFAULT) < 80 and 10 <= inp.hour <= 17,
        urgency=40,
        impact=70,
        rationale="Cold raises dopamine and brown fat activity",
        duration_minutes=5,
        window=lambda inp: hours_window(10, 17),
        protocol="11 min total per week, split in sessions",
    ),
    CandidateRule(
        key="dim_lights",
        category="light",
        title="Dim the Lights",
        description="Reduce light exposure ahead of sleep",
        when=lambda inp: _bed_window(inp, 2),
        urgency=lambda inp: 75 if inp.context.hours_to_bed <= 1 else 55,
        impact=85,
        rationale="Bright light after dark suppresses melatonin",
        duration_minutes=0,
        window=lambda inp: before_bed_window(inp, 120),
        protocol="Lamps only, warm tones, screens on night mode",
    ),
    CandidateRule(
        key="evening_breathwork",
        category="breathwork",
        title="Evening Breathwork",
        description="Slow breathing before bed",
        when=lambda inp: _bed_window(inp, 1),
        urgency=60,
        impact=75,
        rationale="Slow exhales raise vagal tone before sleep",
        duration_minutes=5,
        window=lambda inp: before_bed_window(inp, 60),
        protocol="4-7-8 breathing for 5 minutes",
    ),
    CandidateRule(
        key="target_bedtime",
        category="sleep_hygiene",
        title="Target Bedtime",
        description=lambda inp: f"Lights out at {inp.context.bed_time}",
        when=lambda inp: inp.context.hours_to_bed in (0, 1),
        urgency=lambda inp: 85 if inp.context.hours_to_bed == 0 else 60,
        impact=95,
        rationale="Consistent sleep timing is the strongest circadian signal",
        window=lambda inp: before_bed_window(inp, 30, -30),
    ),
    CandidateRule(
        key="anti_inflammatory",
        category="cold_exposure",
        title="Anti-Inflammatory Protocol",
        description="Inflammation markers elevated",
        when=lambda inp: inp.handoff("inflammation") is not None,
        urgency=70,
        impact=80,
        rationale="Cold and light hygiene lower systemic inflammation",
        protocol="Cold exposure, omega-3 rich meal, early bedtime",
    ),
    CandidateRule(
        key="sleep_protocol",
        category="sleep_hygiene",
        title="Sleep Repair Protocol",
        description="Recent sleep was poor - tighten sleep hygiene",
        when=lambda inp: inp.handoff("poor_sleep") is not None,
        urgency=75,
        impact=90,
        rationale="Sleep debt compounds across days",
        protocol="Cool dark room, fixed wake time, no late meals",
    ),
)


class CircadianExpert(Expert):
    name = "Longevity Coach"
    domain = "circadian"
    default_score = 80.0
    rules = RULES
    focus_message = "Circadian priority - protect sleep and light exposure"
    concerns = (
        Finding(
            lambda inp: inp.number("sleep_hours", SLEEP_HOURS_DEFAULT, domain="recovery") < 6,
            "Short sleep undermines circadian alignment",
        ),
        Finding(
            lambda inp: inp.hour >= 14
            and inp.number("caffeine_mg", CAFFEINE_DEFAULT_MG, domain="fuel") > 0,
            "Afternoon caffeine detected",
        ),
        Finding(
            lambda inp: inp.context.minutes_to_bed < 0,
            "Past target bedtime",
        ),
    )
    opportunities = (
        Finding(_morning, "Morning light window open"),
        Finding(lambda inp: _bed_window(inp, 2), "Evening wind-down window"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="Keep Rhythm",
        description="Daily rhythm on track",
        rationale="No circadian intervention required",
        reasoning="Circadian rhythm stable.",
    )

    def compute_score(self, inp: ExpertInput) -> float:
        if inp.state.has(self.domain):
            return inp.score
        concerns = sum(1 for finding in self.concerns if finding.when(inp))
        opportunities = sum(1 for finding in self.opportunities if finding.when(inp))
        return self.default_score - 10 * concerns + 5 * opportunities

    def weight(self, inp: ExpertInput) -> float:
        weight = 0.30 if inp.context.has_goal("longevity", "health") else 0.15
        if _evening(inp):
            weight += 0.10
        if _morning(inp):
            weight += 0.10
        return min(weight, 0.35)
