import logging
from datetime import datetime

import pytest

from rce.core.config import Settings
from rce.core.types import Context, DomainState
from rce.council.council import Council
from rce.ctx.builder import ContextBuilder
from rce.epl.processor import SnapshotProcessingLayer
from rce.examples.scenarios import all_examples, late_training_example, red_day_example
from rce.experts import CandidateRule, Expert, ExpertInput, FuelExpert, MedicalExpert


class RuleExpert(Expert):
    """Configurable expert driven by an explicit rule list."""

    def __init__(self, domain: str, rules=(), weight: float = 0.2) -> None:
        self.name = domain
        self.domain = domain
        self.rules = tuple(rules)
        self._weight = weight

    def weight(self, inp: ExpertInput) -> float:
        return self._weight


class BrokenExpert(RuleExpert):
    def form_opinion(self, state, context):
        raise RuntimeError("sensor offline")


def _rule(key: str, category: str, urgency: float, impact: float = 80) -> CandidateRule:
    return CandidateRule(
        key=key,
        category=category,
        title=key.replace("_", " ").title(),
        description="d",
        when=lambda inp: True,
        urgency=urgency,
        impact=impact,
        rationale="r",
    )


def _evaluate_example(raw: dict[str, object], council: Council | None = None):
    settings = Settings()
    snapshot = SnapshotProcessingLayer(settings.snapshot_schema_path).ingest(raw)
    context = ContextBuilder(settings).build(snapshot)
    return (council or Council(settings=settings)).evaluate(snapshot.state, context)


def test_red_day_rest_directive_commands() -> None:
    timeline = _evaluate_example(red_day_example())

    commander = timeline.commander_action
    assert commander.id == "recovery_red_day"
    assert commander.urgency == 100.0
    assert timeline.priority_scores[commander.id] == pytest.approx(120.9)
    assert commander in timeline.alerts
    assert "medical_investigate" in [alert.id for alert in timeline.alerts]
    assert timeline.focus_domain == "recovery"
    assert timeline.focus_message == "Recovery priority - rest and modalities today"


def test_late_training_resolves_to_liquid_recovery() -> None:
    timeline = _evaluate_example(late_training_example())

    commander = timeline.commander_action
    assert commander.id == "fuel_liquid_recovery"
    assert commander.urgency == 85.0
    assert commander.rationale.endswith(" Adjusted due to council constraint: digestive_load_risk.")
    assert timeline.priority_scores[commander.id] == pytest.approx(128.0)
    assert "fuel_post_training" not in [action.id for action in timeline.all_ranked]
    assert "performance_maintenance" not in timeline.priority_scores


def test_stimulant_after_cutoff_never_commands() -> None:
    council = Council([RuleExpert("fuel", [_rule("espresso", "stimulant", 95)])])

    timeline = council.evaluate(DomainState(), Context(current_hour=17))

    assert timeline.commander_action.id == "council_steady_state"
    assert timeline.all_ranked == []
    assert [(d.candidate_id, d.rule) for d in timeline.deferrals] == [
        ("fuel_espresso", "stimulant_after_cutoff")
    ]


def test_all_placeholders_yield_steady_state() -> None:
    council = Council([RuleExpert("fuel"), RuleExpert("recovery")])

    timeline = council.evaluate(DomainState(), Context(current_hour=11))

    assert timeline.commander_action.id == "council_steady_state"
    assert timeline.commander_action.title == "Continue as planned"
    assert timeline.upcoming_actions == []
    assert timeline.alerts == []
    assert timeline.focus_domain == "general"
    assert timeline.focus_message == "All systems optimal"


def test_timeline_shape_invariants() -> None:
    for raw in all_examples():
        timeline = _evaluate_example(raw)
        ids = [action.id for action in timeline.all_ranked]
        assert len(ids) == len(set(ids))
        assert len(timeline.upcoming_actions) <= 3
        if timeline.all_ranked:
            assert timeline.commander_action == timeline.all_ranked[0]
            assert timeline.upcoming_actions == timeline.all_ranked[1:4]
        priorities = [timeline.priority_scores[i] for i in ids]
        assert priorities == sorted(priorities, reverse=True)
        assert all(0.0 <= value <= 180.0 for value in priorities)
        assert all(alert.urgency >= 70 and alert.time_window is None for alert in timeline.alerts)
        assert all(0.0 <= weight <= 1.0 for weight in timeline.expert_weights.values())


def test_evaluation_is_deterministic_and_does_not_mutate_input() -> None:
    state = DomainState.from_mapping({"fuel": {"score": 45, "signals": {"hydration_liters": 1.0}}})
    before = state.to_dict()
    context = Context(current_hour=15)
    council = Council()

    first = council.evaluate(state, context).to_dict()
    second = council.evaluate(state, context).to_dict()

    assert first == second
    assert state.to_dict() == before


def test_thread_pool_matches_sequential_dispatch() -> None:
    sequential = _evaluate_example(red_day_example(), Council(max_workers=0))
    pooled = _evaluate_example(red_day_example(), Council(max_workers=4))

    assert pooled.to_dict() == sequential.to_dict()
    assert pooled.expert_weights == sequential.expert_weights


def test_failing_expert_abstains(caplog) -> None:
    council = Council(
        [
            BrokenExpert("fuel", [_rule("meal", "eating", 90)]),
            RuleExpert("mindspace", [_rule("breathe", "breathwork", 60)]),
        ]
    )

    with caplog.at_level(logging.WARNING):
        timeline = council.evaluate(DomainState(), Context(current_hour=11))

    assert [action.id for action in timeline.all_ranked] == ["mindspace_breathe"]
    assert "expert_abstained domain=fuel operation=form_opinion" in caplog.text


def test_handoffs_reach_their_recipient() -> None:
    state = DomainState.from_mapping({"medical": {"score": 70, "signals": {"b12": 240, "days_since_bloodwork": 10}}})
    context = Context(current_hour=11)

    with_medical = Council([FuelExpert(), MedicalExpert()]).evaluate(state, context)
    without_medical = Council([FuelExpert()]).evaluate(state, context)

    assert "fuel_b12_boost" in with_medical.priority_scores
    assert "fuel_b12_boost" not in without_medical.priority_scores


def test_focus_prefers_registered_domain_on_ties() -> None:
    state = DomainState.from_mapping({"recovery": {"score": 50}, "fuel": {"score": 50}})

    timeline = Council().evaluate(state, Context(current_hour=11))

    assert timeline.focus_domain == "fuel"
    assert timeline.focus_message == "Nutrition priority - focus on meal timing and hydration"


def test_focus_reports_optimal_when_every_domain_is_high() -> None:
    state = DomainState.from_mapping({"fuel": {"score": 92}, "recovery": {"score": 85}})

    timeline = Council().evaluate(state, Context(current_hour=11))

    assert timeline.focus_domain == "recovery"
    assert timeline.focus_message == "All systems optimal"


def test_focus_on_unregistered_domain() -> None:
    state = DomainState.from_mapping({"fuel": {"score": 70}, "hydration_lab": {"score": 20}})

    timeline = Council([FuelExpert()]).evaluate(state, Context(current_hour=11))

    assert timeline.focus_domain == "hydration_lab"
    assert timeline.focus_message == "Focus on hydration_lab today"


def test_settings_control_council_thresholds() -> None:
    settings = Settings(stimulant_cutoff_hour=20, max_upcoming=1)
    council = Council(
        [
            RuleExpert("fuel", [_rule("espresso", "stimulant", 40)]),
            RuleExpert("mindspace", [_rule("breathe", "breathwork", 60)]),
            RuleExpert("circadian", [_rule("light", "light", 50)]),
        ],
        settings=settings,
    )

    timeline = council.evaluate(DomainState(), Context(current_hour=17))

    assert "fuel_espresso" in timeline.priority_scores
    assert len(timeline.upcoming_actions) == 1


def test_breakfast_keeps_its_urgency_with_bed_after_midnight() -> None:
    state = DomainState.from_mapping({"fuel": {"score": 70}, "recovery": {"score": 80}})
    context = Context(current_hour=8, wake_time="07:00", bed_time="00:30")

    timeline = Council().evaluate(state, context)

    breakfast = {action.id: action for action in timeline.all_ranked}["fuel_breakfast"]
    assert breakfast.urgency == 90.0


def test_bedtime_reminder_survives_at_the_bed_hour() -> None:
    state = DomainState.from_mapping({"circadian": {"score": 70}})

    timeline = Council().evaluate(state, Context(current_hour=23, bed_time="23:00"))

    assert "circadian_target_bedtime" in timeline.priority_scores
    assert timeline.deferrals == []


def test_session_logged_done_early_still_triggers_recovery_nutrition() -> None:
    settings = Settings()
    snapshot = SnapshotProcessingLayer(settings.snapshot_schema_path).ingest(late_training_example())
    context = ContextBuilder(settings).build(snapshot, datetime(2026, 3, 2, 20, 0))

    timeline = Council(settings=settings).evaluate(snapshot.state, context)

    assert context.last_session is not None
    assert "fuel_liquid_recovery" in timeline.priority_scores


def test_opinion_of_expert_without_weight_uses_neutral_weight(caplog) -> None:
    class Unweighted(RuleExpert):
        def weight(self, inp: ExpertInput) -> float:
            raise RuntimeError("no weight model")

    council = Council([Unweighted("circadian", [_rule("light", "light", 50, 50)])])

    with caplog.at_level(logging.WARNING):
        timeline = council.evaluate(DomainState(), Context(current_hour=11))

    assert "circadian" not in timeline.expert_weights
    assert timeline.priority_scores["circadian_light"] == pytest.approx(48.0)
    assert "expert_abstained domain=circadian operation=get_weight" in caplog.text
