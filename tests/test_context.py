from datetime import datetime

from rce.core.config import Settings
from rce.core.types import DomainState, Profile, ScheduledSession, Snapshot
from rce.ctx.builder import ContextBuilder


def _snapshot(*sessions: ScheduledSession, profile: Profile = Profile(), captured_at=None) -> Snapshot:
    return Snapshot(state=DomainState(), profile=profile, sessions=sessions, captured_at=captured_at)


def test_context_uses_settings_defaults_for_missing_profile() -> None:
    context = ContextBuilder(Settings(default_wake_time="06:45", default_bed_time="22:15")).build(
        _snapshot(), datetime(2026, 3, 4, 9, 20)
    )

    assert context.current_hour == 9
    assert context.current_minute == 20
    assert context.wake_time == "06:45"
    assert context.bed_time == "22:15"
    assert context.day_of_week == 2
    assert context.next_session is None
    assert context.last_session is None


def test_context_anchors_on_captured_at_when_now_is_omitted() -> None:
    snapshot = _snapshot(
        profile=Profile(wake_time="07:00", bed_time="23:30", goals=(" Longevity ", "")),
        captured_at=datetime(2026, 3, 2, 21, 5),
    )

    context = ContextBuilder(Settings()).build(snapshot)

    assert (context.current_hour, context.current_minute) == (21, 5)
    assert context.bed_time == "23:30"
    assert context.user_goal_tags == frozenset({"longevity"})


def test_context_picks_nearest_open_session() -> None:
    snapshot = _snapshot(
        ScheduledSession(type="strength", time_of_day="08:00", completed=False),
        ScheduledSession(type="conditioning", time_of_day="17:00", intensity="high"),
        ScheduledSession(type="yoga", time_of_day="12:30", completed=True),
        ScheduledSession(type="run", time_of_day="11:00"),
    )

    context = ContextBuilder(Settings()).build(snapshot, datetime(2026, 3, 4, 10, 0))

    assert context.next_session is not None
    assert context.next_session.type == "run"
    assert context.next_session.minutes == 60
    assert context.last_session is None


def test_context_measures_last_session_from_its_end() -> None:
    snapshot = _snapshot(
        ScheduledSession(type="strength", time_of_day="19:30", completed=True, duration_minutes=60),
        ScheduledSession(type="walk", time_of_day="07:00", completed=True, duration_minutes=30),
    )

    context = ContextBuilder(Settings()).build(snapshot, datetime(2026, 3, 2, 21, 0))

    assert context.last_session is not None
    assert context.last_session.type == "strength"
    assert context.last_session.minutes == 30


def test_context_counts_session_logged_done_before_its_planned_end() -> None:
    snapshot = _snapshot(
        ScheduledSession(type="strength", time_of_day="19:30", completed=True, duration_minutes=60),
    )

    context = ContextBuilder(Settings()).build(snapshot, datetime(2026, 3, 2, 20, 0))

    assert context.next_session is None
    assert context.last_session is not None
    assert context.last_session.type == "strength"
    assert context.last_session.minutes == 0
