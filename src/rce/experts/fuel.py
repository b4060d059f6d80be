"""Fuel expert for meal timing, hydration and session nutrition."""

from __future__ import annotations

from collections.abc import Sequence

from rce.core.types import ActionCandidate, ExpertOpinion
from rce.experts.base import (
    CandidateRule,
    Expert,
    ExpertInput,
    Finding,
    Placeholder,
    before_bed_window,
    hours_window,
    minutes_window,
    threshold_weight,
)

TRAINING_TYPES = frozenset({"training", "strength", "conditioning", "endurance", "competition"})
LATE_EATING_MINUTES = 180

# Neutral defaults for absent signals.
HYDRATION_DEFAULT_L = 2.0
CAFFEINE_DEFAULT_MG = 0.0
HOURS_SINCE_MEAL_DEFAULT = 0.0


def _hydration(inp: ExpertInput) -> float:
    return inp.number("hydration_liters", HYDRATION_DEFAULT_L)


def _caffeine(inp: ExpertInput) -> float:
    return inp.number("caffeine_mg", CAFFEINE_DEFAULT_MG)


def _minutes_to_session(inp: ExpertInput) -> int | None:
    session = inp.context.next_session
    if session is None or session.type not in TRAINING_TYPES:
        return None
    return session.minutes


def _minutes_since_training(inp: ExpertInput) -> int | None:
    session = inp.context.last_session
    if session is None or session.type not in TRAINING_TYPES:
        return None
    return session.minutes


def _pre_training(inp: ExpertInput) -> bool:
    minutes = _minutes_to_session(inp)
    return minutes is not None and 30 <= minutes <= 120


def _post_training(inp: ExpertInput) -> bool:
    minutes = _minutes_since_training(inp)
    return minutes is not None and 0 <= minutes <= 150


def _lunch_blocked(inp: ExpertInput) -> bool:
    training_hour = inp.training_hour
    return training_hour is not None and 11 <= training_hour <= 14


def _body_composition_goal(inp: ExpertInput) -> bool:
    return inp.context.has_goal("fat", "weight", "muscle", "strength")


def _breakfast_protocol(inp: ExpertInput) -> str:
    if inp.context.has_goal("fat", "weight"):
        return "High protein, moderate carbs (30g P, 25g C, 10g F)"
    if inp.context.has_goal("muscle", "strength"):
        return "High protein, high carbs (40g P, 50g C, 15g F)"
    return "Balanced: 30g protein, 40g carbs, 15g fat"


def _pre_training_window(inp: ExpertInput):
    minutes = _minutes_to_session(inp) or 0
    start_of_session = inp.now + minutes
    return minutes_window(start_of_session - 120, start_of_session - 30)


def _post_training_window(inp: ExpertInput):
    finished_at = inp.now - (_minutes_since_training(inp) or 0)
    return minutes_window(finished_at, finished_at + 90)


RULES = (
    CandidateRule(
        key="breakfast",
        category="eating",
        title="Breakfast",
        description="Start your day with balanced nutrition",
        when=lambda inp: inp.context.wake_hour <= inp.hour <= inp.context.wake_hour + 2,
        urgency=lambda inp: 75 if inp.hour >= inp.context.wake_hour + 1 else 60,
        impact=85,
        rationale="Break overnight fast, stabilize blood sugar",
        duration_minutes=30,
        window=lambda inp: hours_window(inp.context.wake_hour, inp.context.wake_hour + 2),
        protocol=_breakfast_protocol,
    ),
    CandidateRule(
        key="pre_training",
        category="eating",
        title="Pre-Training Fuel",
        description="Fuel for optimal performance",
        when=_pre_training,
        urgency=85,
        impact=90,
        rationale=lambda inp: f"Training in {_minutes_to_session(inp)} minutes",
        duration_minutes=20,
        window=_pre_training_window,
        protocol="Easy-digest carbs + light protein (40g C, 15g P)",
    ),
    CandidateRule(
        key="post_training",
        category="eating",
        title="Post-Training Nutrition",
        description="Critical recovery window",
        when=_post_training,
        urgency=90,
        impact=95,
        rationale="Anabolic window for muscle protein synthesis",
        duration_minutes=15,
        window=_post_training_window,
        protocol="Fast protein + carbs (40g P, 50g C) - shake ideal",
    ),
    CandidateRule(
        key="lunch",
        category="eating",
        title="Lunch",
        description="Midday refuel for afternoon energy",
        when=lambda inp: not _lunch_blocked(inp) and 12 <= inp.hour <= 14,
        urgency=lambda inp: 70 if inp.hour >= 13 else 55,
        impact=75,
        rationale="Maintain stable energy through afternoon",
        duration_minutes=30,
        window=lambda inp: hours_window(12, 14),
        protocol="Balanced meal with vegetables, protein, complex carbs",
    ),
    CandidateRule(
        key="dinner",
        category="eating",
        title="Dinner",
        description="Final meal for overnight recovery",
        when=lambda inp: 2 <= inp.context.hours_to_bed <= 4,
        urgency=lambda inp: 65 if inp.context.hours_to_bed <= 3 else 50,
        impact=70,
        rationale=lambda inp: f"Last meal before {(inp.context.bed_hour - 2) % 24:02d}:00 cutoff",
        duration_minutes=45,
        window=lambda inp: before_bed_window(inp, 240, 120),
        protocol=lambda inp: (
            "Protein-focused, lower carbs (35g P, 20g C)"
            if inp.context.has_goal("fat", "weight")
            else "Protein + moderate carbs for recovery (35g P, 35g C)"
        ),
    ),
    CandidateRule(
        key="critical",
        category="eating",
        title="Critical: Eat Now",
        description="Energy critically low - immediate action needed",
        when=lambda inp: inp.score < 40,
        urgency=95,
        impact=90,
        rationale=lambda inp: f"Fuel at {inp.score:.0f}% - performance crash imminent",
        duration_minutes=15,
        protocol="Quick carbs + protein: fruit + nuts or shake",
    ),
    CandidateRule(
        key="hydrate",
        category="hydration",
        title="Hydration Alert",
        description=lambda inp: f"Only {_hydration(inp):.1f}L today - drink water",
        when=lambda inp: _hydration(inp) < 1.5 and inp.hour >= 10,
        urgency=lambda inp: 80 if inp.hour > 14 else 60,
        impact=85,
        rationale="3% dehydration = 25% performance drop",
        duration_minutes=2,
        protocol="Drink 500ml water now",
    ),
    CandidateRule(
        key="caffeine_window",
        category="stimulant",
        title="Caffeine Cutoff Soon",
        description="Last chance for caffeine today",
        when=lambda inp: 13 <= inp.hour <= 15 and _caffeine(inp) < 400,
        urgency=40,
        impact=60,
        rationale="Caffeine half-life ~6h, cutoff protects sleep",
        duration_minutes=5,
        protocol=lambda inp: "No more caffeine today" if inp.hour > 14 else "Last coffee if needed",
    ),
    CandidateRule(
        key="b12_boost",
        category="nutrition_plan",
        title="B12 Boost Needed",
        description="Medical markers show low B12 - dietary intervention",
        when=lambda inp: inp.handoff("low_b12") is not None,
        urgency=70,
        impact=75,
        rationale="Low B12 affects energy and cognition",
        protocol="Increase: red meat, eggs, dairy, or supplement",
    ),
    CandidateRule(
        key="carb_load",
        category="nutrition_plan",
        title="Carb Loading Suggested",
        description="Heavy training detected - fuel up",
        when=lambda inp: inp.handoff("high_intensity_session") is not None,
        urgency=65,
        impact=80,
        rationale="High intensity training requires extra glycogen",
        protocol="Increase carb intake today (+20-30%)",
    ),
)


class FuelExpert(Expert):
    name = "Nutritionist"
    domain = "fuel"
    default_score = 70.0
    rules = RULES
    focus_message = "Nutrition priority - focus on meal timing and hydration"
    concerns = (
        Finding(lambda inp: inp.score < 40, "Fuel critically low - energy crash imminent"),
        Finding(lambda inp: 40 <= inp.score < 60, "Fuel suboptimal - performance may suffer"),
        Finding(
            lambda inp: _hydration(inp) < 1.5,
            lambda inp: f"Only {_hydration(inp):.1f}L consumed - dehydrated",
        ),
        Finding(
            lambda inp: inp.hour > 14 and _caffeine(inp) > 0,
            "Caffeine after 2pm may affect sleep",
        ),
        Finding(
            lambda inp: inp.number("hours_since_last_meal", HOURS_SINCE_MEAL_DEFAULT) > 4,
            lambda inp: (
                f"{inp.number('hours_since_last_meal', 0):.0f}h since last meal - consider eating"
            ),
        ),
    )
    opportunities = (
        Finding(lambda inp: 6 <= inp.hour <= 9, "Morning - optimal breakfast window"),
        Finding(lambda inp: 12 <= inp.hour <= 14, "Midday - lunch window"),
        Finding(_pre_training, "Pre-training fuel window is NOW"),
        Finding(_post_training, "Anabolic window - post-training nutrition critical"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="Maintenance Hydration",
        description="Keep hydration steady",
        rationale="Baseline maintenance",
        reasoning="Fuel stable.",
        urgency=30,
    )

    def weight(self, inp: ExpertInput) -> float:
        weight = threshold_weight(inp.score, ((40, 0.45), (60, 0.35)), 0.25)
        if _body_composition_goal(inp):
            weight += 0.10
        if inp.has_session_today:
            weight += 0.05
        return min(weight, 0.50)

    def constraints(self, inp: ExpertInput, primary: ActionCandidate) -> tuple[str, ...]:
        if self._late_post_training(inp, primary):
            return ("late_night_eating",)
        return ()

    def compromises(
        self,
        inp: ExpertInput,
        primary: ActionCandidate,
        alternatives: Sequence[ActionCandidate],
    ) -> tuple[ActionCandidate, ...]:
        _ = alternatives
        if not self._late_post_training(inp, primary):
            return ()
        return (
            primary.evolve(
                id=f"{self.domain}_liquid_recovery",
                title="Liquid Recovery (Compromise)",
                description="Fast-digesting shake ONLY. No solid food.",
                urgency=85,
                rationale=(
                    "Liquid bypasses mechanical digestion. Spikes insulin fast for recovery "
                    "but clears stomach before sleep."
                ),
                protocol="Whey isolate + dextrose/banana blended with water. No fats/fiber.",
            ),
        )

    def revise(self, inp: ExpertInput, opinion: ExpertOpinion) -> ExpertOpinion:
        if not self._late_post_training(inp, opinion.primary_action):
            return opinion
        return ExpertOpinion(
            domain=opinion.domain,
            primary_action=opinion.primary_action,
            urgency=opinion.urgency,
            reasoning=(
                "User trained late. Glycogen replenishment is critical for tomorrow's "
                "recovery, despite the late hour."
            ),
            constraints=opinion.constraints,
            compromise_options=opinion.compromise_options,
        )

    def _late_post_training(self, inp: ExpertInput, primary: ActionCandidate) -> bool:
        return (
            primary.id == f"{self.domain}_post_training"
            and inp.context.is_within_before_bed(LATE_EATING_MINUTES)
        )
