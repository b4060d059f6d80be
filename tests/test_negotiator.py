import logging

from rce.core.types import ActionCandidate, ExpertOpinion
from rce.council.negotiator import Negotiator


def _candidate(candidate_id: str, category: str, urgency: float, impact: float = 80) -> ActionCandidate:
    return ActionCandidate(
        id=candidate_id,
        domain=candidate_id.split("_")[0],
        category=category,
        title=candidate_id,
        description="d",
        urgency=urgency,
        impact=impact,
        duration_minutes=10,
        rationale="Original rationale.",
    )


def _opinion(
    domain: str,
    primary: ActionCandidate,
    constraints: tuple[str, ...] = (),
    compromises: tuple[ActionCandidate, ...] = (),
) -> ExpertOpinion:
    return ExpertOpinion(
        domain=domain,
        primary_action=primary,
        urgency=primary.urgency,
        reasoning="because",
        constraints=constraints,
        compromise_options=compromises,
    )


def test_no_compromise_downgrade_is_exactly_fifty() -> None:
    meal = _opinion("fuel", _candidate("fuel_dinner", "eating", 72))
    guard = _opinion("recovery", _candidate("recovery_wind", "sleep_hygiene", 60), ("digestive_load_risk",))

    negotiated = Negotiator().negotiate([meal, guard])

    assert negotiated[0].urgency == 22.0
    assert negotiated[0].primary_action.urgency == 22.0
    assert negotiated[0].primary_action.id == "fuel_dinner"
    assert negotiated[1] == guard


def test_downgrade_floors_at_zero() -> None:
    session = _opinion("performance", _candidate("performance_session", "training", 30))
    guard = _opinion("recovery", _candidate("recovery_hrv", "awareness", 70), ("injury_risk",))

    negotiated = Negotiator().negotiate([session, guard])

    assert negotiated[0].urgency == 0.0


def test_compromise_replaces_primary_with_suffix(caplog) -> None:
    liquid = _candidate("fuel_liquid", "eating", 85)
    meal = _opinion("fuel", _candidate("fuel_post", "eating", 90), compromises=(liquid,))
    guard = _opinion("recovery", _candidate("recovery_wind", "sleep_hygiene", 60), ("digestive_load_risk",))

    with caplog.at_level(logging.INFO):
        negotiated = Negotiator().negotiate([meal, guard])

    resolved = negotiated[0]
    assert resolved.primary_action.id == "fuel_liquid"
    assert resolved.urgency == 85.0
    assert resolved.primary_action.rationale == (
        "Original rationale. Adjusted due to council constraint: digestive_load_risk."
    )
    assert "opinion_downgraded domain=fuel" in caplog.text


def test_compromise_is_not_revalidated() -> None:
    still_eating = _candidate("fuel_snack", "eating", 70)
    meal = _opinion("fuel", _candidate("fuel_meal", "eating", 90), compromises=(still_eating,))
    guard = _opinion("recovery", _candidate("recovery_wind", "sleep_hygiene", 60), ("digestive_load_risk",))

    resolved = Negotiator().negotiate([meal, guard])[0]

    assert resolved.primary_action.id == "fuel_snack"
    assert resolved.urgency == 70.0


def test_active_constraints_follow_domain_order_and_skip_silent_opinions() -> None:
    opinions = [
        _opinion("recovery", _candidate("recovery_a", "rest", 60), ("digestive_load_risk", "injury_risk")),
        _opinion("circadian", _candidate("circadian_a", "light", 50), ("injury_risk", "late_light")),
        _opinion("mindspace", _candidate("mindspace_a", "focus", 0), ("quiet_mind",)),
    ]

    assert Negotiator.active_constraints(opinions) == ("injury_risk", "late_light", "digestive_load_risk")


def test_first_matching_constraint_wins() -> None:
    negotiator = Negotiator(
        violations=[("eating", "digestive_load_risk"), ("eating", "fasting_window")],
    )
    meal = _opinion("fuel", _candidate("fuel_meal", "eating", 80))
    fast = _opinion("circadian", _candidate("circadian_fast", "light", 40), ("fasting_window",))
    guard = _opinion("recovery", _candidate("recovery_wind", "rest", 60), ("digestive_load_risk",))

    resolved = negotiator.negotiate([meal, fast, guard])[0]

    assert resolved.reasoning.endswith("(Urgency reduced due to fasting_window)")


def test_unrelated_categories_pass_through() -> None:
    light = _opinion("circadian", _candidate("circadian_light", "light", 75))
    guard = _opinion("recovery", _candidate("recovery_wind", "rest", 60), ("digestive_load_risk", "injury_risk"))

    assert Negotiator().negotiate([light, guard])[0] == light
