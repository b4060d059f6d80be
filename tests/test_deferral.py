from rce.core.types import ActionCandidate, Context, DomainState, RankedAction
from rce.council.deferral import DeferralFilter


def _ranked(category: str, urgency: float, candidate_id: str = "x_action") -> RankedAction:
    candidate = ActionCandidate(
        id=candidate_id,
        domain="x",
        category=category,
        title="t",
        description="d",
        urgency=urgency,
        impact=60,
        duration_minutes=5,
        rationale="r",
    )
    return RankedAction(candidate=candidate, priority_score=50.0, expert_weight=0.2)


def _state(recovery: float | None = None) -> DomainState:
    if recovery is None:
        return DomainState()
    return DomainState.from_mapping({"recovery": {"score": recovery}})


def test_stimulant_after_cutoff_is_absolute() -> None:
    deferral = DeferralFilter()
    kept, deferrals = deferral.filter(
        [_ranked("stimulant", 95, "fuel_coffee")],
        _state(),
        Context(current_hour=17),
    )
    assert kept == []
    assert deferrals[0].candidate_id == "fuel_coffee"
    assert deferrals[0].rule == "stimulant_after_cutoff"


def test_stimulant_at_cutoff_hour_is_kept() -> None:
    kept, deferrals = DeferralFilter().filter([_ranked("stimulant", 40)], _state(), Context(current_hour=16))
    assert len(kept) == 1
    assert deferrals == []


def test_training_below_recovery_floor_is_deferred_unless_urgent() -> None:
    deferral = DeferralFilter()
    context = Context(current_hour=10)

    kept, deferrals = deferral.filter([_ranked("training", 80)], _state(35), context)
    assert kept == []
    assert deferrals[0].rule == "training_below_recovery_floor"

    kept, _ = deferral.filter([_ranked("training", 90)], _state(35), context)
    assert len(kept) == 1


def test_rest_directives_are_exempt_from_recovery_floor() -> None:
    kept, deferrals = DeferralFilter().filter([_ranked("rest", 60)], _state(20), Context(current_hour=10))
    assert len(kept) == 1
    assert deferrals == []


def test_missing_recovery_score_is_neutral() -> None:
    kept, _ = DeferralFilter().filter([_ranked("training", 50)], _state(), Context(current_hour=10))
    assert len(kept) == 1


def test_outside_wake_window() -> None:
    deferral = DeferralFilter()
    early = Context(current_hour=5, wake_time="07:00", bed_time="23:00")
    late = Context(current_hour=1, wake_time="07:00", bed_time="23:00")

    for context in (early, late):
        kept, deferrals = deferral.filter([_ranked("light", 60)], _state(), context)
        assert kept == []
        assert deferrals[0].rule == "outside_wake_window"

    kept, _ = deferral.filter([_ranked("rest", 95)], _state(), late)
    assert len(kept) == 1


def test_wake_window_has_an_hour_of_slack() -> None:
    deferral = DeferralFilter()
    for hour in (6, 23, 0):
        context = Context(current_hour=hour, wake_time="07:00", bed_time="23:00")
        kept, deferrals = deferral.filter([_ranked("light", 60)], _state(), context)
        assert len(kept) == 1, hour
        assert deferrals == []


def test_bed_time_after_midnight_keeps_late_evening_awake() -> None:
    context = Context(current_hour=23, wake_time="08:00", bed_time="00:30")
    kept, _ = DeferralFilter().filter([_ranked("light", 60)], _state(), context)
    assert len(kept) == 1


def test_thresholds_are_configurable() -> None:
    deferral = DeferralFilter(stimulant_cutoff_hour=18, recovery_floor=60, override_threshold=95)
    context = Context(current_hour=17)
    kept, deferrals = deferral.filter(
        [_ranked("stimulant", 50, "a_coffee"), _ranked("training", 92, "b_run")],
        _state(50),
        context,
    )
    assert [item.candidate.id for item in kept] == ["a_coffee"]
    assert deferrals[0].candidate_id == "b_run"
