"""Current and next session lookups against an explicit instant.

Nothing in this module reads the clock; callers pass ``now`` so every
lookup is deterministic.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from classweek.schemas.schedule import ScheduleNow, SessionOccurrence
from classweek.schemas.session import WEEK_LENGTH, Session, minutes_of
from classweek.services.session_store import SessionStore


def day_of_week_of(now: datetime) -> int | None:
    """Monday=1 … Saturday=6; Sunday has no sessions and maps to None."""
    weekday = now.weekday()
    if weekday >= WEEK_LENGTH:
        return None
    return weekday + 1


def _earliest(sessions: Iterable[Session]) -> Session | None:
    return min(sessions, key=lambda item: (item.start_minutes, item.id), default=None)


def current_session(sessions: Iterable[Session], now: datetime) -> Session | None:
    today = day_of_week_of(now)
    if today is None:
        return None
    minute = minutes_of(now.time())
    for session in sessions:
        if session.day_of_week == today and session.start_minutes <= minute < session.end_minutes:
            return session
    return None


def _locate_next(sessions: Iterable[Session], now: datetime) -> tuple[Session, int] | None:
    """Return the next session and how many 6-day-cycle steps ahead it is."""
    by_day: dict[int, list[Session]] = {}
    for session in sessions:
        by_day.setdefault(session.day_of_week, []).append(session)
    if not by_day:
        return None

    today = day_of_week_of(now)
    minute = minutes_of(now.time())
    if today is not None:
        later_today = [item for item in by_day.get(today, []) if item.start_minutes > minute]
        if later_today:
            return _earliest(later_today), 0

    # Sunday counts as the day before Monday.
    base = today or 0
    for step in range(1, WEEK_LENGTH + 1):
        day = (base - 1 + step) % WEEK_LENGTH + 1
        day_sessions = by_day.get(day, [])
        if day == today:
            # Wrapped back to today: a running session is current, never next.
            day_sessions = [
                item for item in day_sessions
                if not item.start_minutes <= minute < item.end_minutes
            ]
        if day_sessions:
            return _earliest(day_sessions), step
    return None


def next_session(sessions: Iterable[Session], now: datetime) -> Session | None:
    located = _locate_next(sessions, now)
    if located is None:
        return None
    return located[0]


def next_occurrence(sessions: Iterable[Session], now: datetime) -> SessionOccurrence | None:
    located = _locate_next(sessions, now)
    if located is None:
        return None
    session, step = located

    days_ahead = (session.day_of_week - 1 - now.weekday()) % 7
    if days_ahead == 0 and step > 0:
        # Same weekday, but a full cycle later.
        days_ahead = 7
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    starts_at = start_of_day + timedelta(days=days_ahead, minutes=session.start_minutes)
    minutes_until = max(0, int((starts_at - now).total_seconds() // 60))
    return SessionOccurrence(session=session, starts_at=starts_at, minutes_until_start=minutes_until)


class TemporalResolver:
    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def current_session(self, now: datetime) -> Session | None:
        return current_session(self.store.list_all(), now)

    def next_session(self, now: datetime) -> Session | None:
        return next_session(self.store.list_all(), now)

    def next_occurrence(self, now: datetime) -> SessionOccurrence | None:
        return next_occurrence(self.store.list_all(), now)

    def snapshot(self, now: datetime) -> ScheduleNow:
        sessions = self.store.list_all()
        return ScheduleNow(
            at=now,
            day_of_week=day_of_week_of(now),
            current=current_session(sessions, now),
            next=next_occurrence(sessions, now),
        )
