from rce.core.types import ActionCandidate, TimeWindow
from rce.council.priority import PriorityScorer
from rce.council.timing import TimeOfDayModifier, time_bucket


def _candidate(urgency: float, impact: float, window: TimeWindow | None = None, domain: str = "fuel") -> ActionCandidate:
    return ActionCandidate(
        id=f"{domain}_x",
        domain=domain,
        category="eating",
        title="x",
        description="x",
        urgency=urgency,
        impact=impact,
        duration_minutes=0,
        rationale="r",
        time_window=window,
    )


def test_priority_is_monotone_in_urgency_and_impact() -> None:
    scorer = PriorityScorer()
    for weight in (0.0, 0.3, 1.0):
        for fixed in (0, 40, 100):
            by_urgency = [scorer.score(_candidate(u, fixed), weight, 600) for u in range(0, 101, 10)]
            by_impact = [scorer.score(_candidate(fixed, i), weight, 600) for i in range(0, 101, 10)]
            assert by_urgency == sorted(by_urgency)
            assert by_impact == sorted(by_impact)


def test_priority_formula_and_window_bonus() -> None:
    scorer = PriorityScorer()
    window = TimeWindow(start=600, end=660)
    assert scorer.score(_candidate(50, 50), 0.5, 600) == 60.0
    assert scorer.score(_candidate(50, 50, window), 0.5, 630) == 80.0
    assert scorer.score(_candidate(50, 50, window), 0.5, 700) == 60.0


def test_priority_is_clamped_to_range() -> None:
    scorer = PriorityScorer()
    window = TimeWindow(start=0, end=1439)
    assert scorer.score(_candidate(100, 100, window), 1.0, 10) == 180.0
    assert scorer.score(_candidate(100, 100), 5.0, 10) == 160.0
    assert scorer.score(_candidate(0, 0), 0.0, 10) == 0.0


def test_time_buckets() -> None:
    assert time_bucket(5) == "morning"
    assert time_bucket(12) == "midday"
    assert time_bucket(14) == "afternoon"
    assert time_bucket(18) == "evening"
    assert time_bucket(22) == "night"
    assert time_bucket(3) == "night"


def test_time_modifier_policy_table() -> None:
    modifier = TimeOfDayModifier()
    assert modifier.delta("fuel", 7) == 15.0
    assert modifier.delta("fuel", 12) == 10.0
    assert modifier.delta("fuel", 18) == 10.0
    assert modifier.delta("mindspace", 10) == 10.0
    assert modifier.delta("mindspace", 23) == -20.0
    assert modifier.delta("recovery", 15) == -10.0
    assert modifier.delta("recovery", 19) == 15.0
    assert modifier.delta("recovery", 23) == 20.0
    assert modifier.delta("performance", 8) == 5.0
    assert modifier.delta("performance", 2) == -30.0
    assert modifier.delta("circadian", 22) == 0.0


def test_time_modifier_clamps_urgency() -> None:
    modifier = TimeOfDayModifier()
    assert modifier.apply(_candidate(95, 50, domain="recovery"), 23).urgency == 100.0
    assert modifier.apply(_candidate(10, 50, domain="performance"), 23).urgency == 0.0
