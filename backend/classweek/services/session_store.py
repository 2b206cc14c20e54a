from __future__ import annotations

import logging
import uuid
from threading import Lock
from typing import Iterable

from classweek.core.exceptions import ConflictError, DuplicateSessionError, InvalidIntervalError, NotFoundError
from classweek.schemas.conflict import ConflictCheckResult
from classweek.schemas.session import Session, SessionCreate, SessionPatch, parse_time_to_minutes
from classweek.services.conflicts import check_candidate, find_conflicts

logger = logging.getLogger(__name__)


def _sort_key(session: Session) -> tuple[int, int, str]:
    return session.day_of_week, session.start_minutes, session.id


def _ensure_interval(start_time: str, end_time: str) -> None:
    if parse_time_to_minutes(start_time) >= parse_time_to_minutes(end_time):
        raise InvalidIntervalError(start_time, end_time)


class SessionStore:
    """One owner's week of sessions.

    Every mutation is a whole-record insert or replace that passes the
    overlap check first; a rejected mutation leaves the store untouched.
    """

    def __init__(self, owner_id: str = "default") -> None:
        self.owner_id = owner_id
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _gate(self, candidate: SessionCreate, exclude_id: str | None = None) -> None:
        _ensure_interval(candidate.start_time, candidate.end_time)
        conflicting_ids = find_conflicts(candidate, self._sessions.values(), exclude_id)
        if conflicting_ids:
            logger.info(
                "Rejected session for owner %s on day %d: overlaps %s",
                self.owner_id,
                candidate.day_of_week,
                ", ".join(conflicting_ids),
            )
            raise ConflictError(conflicting_ids, day_of_week=candidate.day_of_week)

    def check(self, candidate: SessionCreate, exclude_id: str | None = None) -> ConflictCheckResult:
        _ensure_interval(candidate.start_time, candidate.end_time)
        with self._lock:
            return check_candidate(candidate, self._sessions.values(), exclude_id)

    def add(self, payload: SessionCreate) -> Session:
        with self._lock:
            self._gate(payload)
            session_id = uuid.uuid4().hex
            while session_id in self._sessions:
                session_id = uuid.uuid4().hex
            session = Session(id=session_id, **payload.model_dump(exclude={"id", "duration_minutes"}))
            self._sessions[session.id] = session
        logger.info("Added session %s for owner %s", session.id, self.owner_id)
        return session

    def update(self, session_id: str, patch: SessionPatch) -> Session:
        with self._lock:
            existing = self._sessions.get(session_id)
            if existing is None:
                raise NotFoundError("Session", session_id)
            merged = {**existing.record(), **patch.changes()}
            candidate = SessionCreate.model_validate(merged)
            self._gate(candidate, exclude_id=session_id)
            updated = Session.model_validate(merged)
            self._sessions[session_id] = updated
        logger.info("Updated session %s for owner %s", session_id, self.owner_id)
        return updated

    def remove(self, session_id: str) -> Session:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise NotFoundError("Session", session_id)
        logger.info("Removed session %s for owner %s", session_id, self.owner_id)
        return removed

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        return session

    def list_by_day(self, day_of_week: int) -> list[Session]:
        with self._lock:
            day_sessions = [item for item in self._sessions.values() if item.day_of_week == day_of_week]
        return sorted(day_sessions, key=_sort_key)

    def list_all(self) -> list[Session]:
        with self._lock:
            sessions = list(self._sessions.values())
        return sorted(sessions, key=_sort_key)

    def load(self, sessions: Iterable[Session]) -> list[Session]:
        """Insert a previously persisted week, keeping its ids.

        The whole batch is checked before anything is inserted.
        """
        incoming = list(sessions)
        with self._lock:
            staged = dict(self._sessions)
            for session in incoming:
                if session.id in staged:
                    raise DuplicateSessionError(session.id)
                _ensure_interval(session.start_time, session.end_time)
                conflicting_ids = find_conflicts(session, staged.values())
                if conflicting_ids:
                    raise ConflictError(conflicting_ids, day_of_week=session.day_of_week)
                staged[session.id] = session
            self._sessions = staged
        logger.info("Loaded %d session(s) for owner %s", len(incoming), self.owner_id)
        return incoming

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
