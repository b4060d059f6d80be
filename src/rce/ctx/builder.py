"""Context Builder: per-cycle temporal context from a snapshot."""

from __future__ import annotations

from datetime import datetime

from rce.core.config import Settings
from rce.core.types import Context, ScheduledSession, SessionRef, Snapshot, parse_clock


class ContextBuilder:
    """Builds a fresh :class:`Context` for every evaluation."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build(self, snapshot: Snapshot, now: datetime | None = None) -> Context:
        """Anchor the snapshot at ``now`` (``captured_at`` when omitted)."""
        moment = now or snapshot.captured_at or datetime.now()
        minute_of_day = moment.hour * 60 + moment.minute
        profile = snapshot.profile
        return Context(
            current_hour=moment.hour,
            current_minute=moment.minute,
            wake_time=profile.wake_time or self._settings.default_wake_time,
            bed_time=profile.bed_time or self._settings.default_bed_time,
            day_of_week=moment.weekday(),
            next_session=self._next_session(snapshot.sessions, minute_of_day),
            last_session=self._last_session(snapshot.sessions, minute_of_day),
            user_goal_tags=frozenset(goal.strip().lower() for goal in profile.goals if goal.strip()),
        )

    @staticmethod
    def _next_session(sessions: tuple[ScheduledSession, ...], now: int) -> SessionRef | None:
        upcoming = [
            (parse_clock(session.time_of_day) - now, index, session)
            for index, session in enumerate(sessions)
            if not session.completed and parse_clock(session.time_of_day) >= now
        ]
        if not upcoming:
            return None
        minutes, _, session = min(upcoming, key=lambda item: (item[0], item[1]))
        return SessionRef(
            type=session.type,
            minutes=minutes,
            intensity=session.intensity,
            duration_minutes=session.duration_minutes,
        )

    @staticmethod
    def _last_session(sessions: tuple[ScheduledSession, ...], now: int) -> SessionRef | None:
        """Most recently started completed session, measured from its planned end.

        A session logged as done before its planned end counts as just finished.
        """
        started = []
        for index, session in enumerate(sessions):
            start = parse_clock(session.time_of_day)
            if session.completed and start <= now:
                started.append((now - start, index, session))
        if not started:
            return None
        _, _, session = min(started, key=lambda item: (item[0], item[1]))
        minutes = max(0, now - (parse_clock(session.time_of_day) + session.duration_minutes))
        return SessionRef(
            type=session.type,
            minutes=minutes,
            intensity=session.intensity,
            duration_minutes=session.duration_minutes,
        )
