from __future__ import annotations

import asyncio
import enum
import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path
from threading import Lock
from typing import Any, Callable

from pydantic import ValidationError

from classweek.core.exceptions import ConfigurationError
from classweek.schemas.reminder import ReminderNotification, ReminderSettings
from classweek.schemas.session import Session
from classweek.services.resolver import day_of_week_of
from classweek.services.session_store import SessionStore

logger = logging.getLogger(__name__)

NotificationSink = Callable[[ReminderNotification], Any]


class ReminderState(str, enum.Enum):
    idle = "idle"
    armed = "armed"
    fired = "fired"


class ReminderSettingsStore:
    """Reads and writes the reminder settings file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> ReminderSettings:
        if not self.path.exists():
            return ReminderSettings()
        try:
            return ReminderSettings.model_validate_json(self.path.read_bytes())
        except (OSError, UnicodeDecodeError, ValidationError):
            logger.warning("Ignoring unreadable reminder settings at %s", self.path, exc_info=True)
            return ReminderSettings()

    def save(self, settings: ReminderSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(settings.model_dump_json(by_alias=True, indent=2), encoding="utf-8")


def _starts_at(session: Session, now: datetime) -> datetime:
    start = time(session.start_minutes // 60, session.start_minutes % 60)
    return datetime.combine(now.date(), start, tzinfo=now.tzinfo)


def _build_notification(session: Session, *, starts_at: datetime, now: datetime, owner_id: str | None) -> ReminderNotification:
    minutes_left = max(1, int((starts_at - now).total_seconds() // 60))
    location = f" in {session.room_label}" if session.room_label else ""
    return ReminderNotification(
        owner_id=owner_id,
        title=f"Upcoming {session.session_type}: {session.subject_name}",
        body=f"{session.subject_name} starts at {session.start_time}{location} ({minutes_left} min)",
        session=session,
        occurrence_date=now.date(),
        starts_at=starts_at,
        fired_at=now,
    )


class ReminderScheduler:
    """Decides when each of today's sessions gets its reminder.

    An occurrence is one session on one calendar date. It fires once,
    inside ``[start - lead_minutes, start)``; a tick that first sees it after
    the start suppresses it instead of sending late.
    """

    def __init__(
        self,
        store: SessionStore,
        sink: NotificationSink,
        settings: ReminderSettings | None = None,
        *,
        owner_id: str | None = None,
    ) -> None:
        self.store = store
        self.sink = sink
        self.owner_id = owner_id if owner_id is not None else store.owner_id
        self._settings = settings or ReminderSettings()
        self._fired: set[tuple[str, date]] = set()
        self._lock = Lock()

    @property
    def settings(self) -> ReminderSettings:
        return self._settings

    def set_settings(self, settings: ReminderSettings) -> None:
        # Fire records survive toggling so re-enabling never repeats a reminder.
        self._settings = settings

    def has_fired(self, session_id: str, on: date) -> bool:
        with self._lock:
            return (session_id, on) in self._fired

    def state_of(self, session: Session, now: datetime) -> ReminderState:
        if self.has_fired(session.id, now.date()):
            return ReminderState.fired
        if (
            self._settings.enabled
            and session.day_of_week == day_of_week_of(now)
            and now < _starts_at(session, now)
        ):
            return ReminderState.armed
        return ReminderState.idle

    def _prune(self, today: date) -> None:
        self._fired = {key for key in self._fired if key[1] == today}

    def tick(self, now: datetime) -> list[ReminderNotification]:
        settings = self._settings
        today = day_of_week_of(now)
        lead = timedelta(minutes=settings.lead_minutes)

        due: list[ReminderNotification] = []
        with self._lock:
            self._prune(now.date())
            if not settings.enabled or today is None:
                return due
            for session in self.store.list_by_day(today):
                key = (session.id, now.date())
                if key in self._fired:
                    continue
                starts_at = _starts_at(session, now)
                if starts_at - lead <= now < starts_at:
                    # Recorded before dispatch: a failing sink must not re-arm it.
                    self._fired.add(key)
                    due.append(
                        _build_notification(session, starts_at=starts_at, now=now, owner_id=self.owner_id)
                    )

        for notification in due:
            self._dispatch(notification)
        return due

    def _dispatch(self, notification: ReminderNotification) -> None:
        try:
            self.sink(notification)
        except Exception:
            logger.warning(
                "Reminder dispatch failed for session %s on %s",
                notification.session_id,
                notification.occurrence_date,
                exc_info=True,
            )
            return
        logger.info(
            "Reminder sent for session %s (%s) starting %s",
            notification.session_id,
            notification.session.subject_name,
            notification.starts_at.isoformat(),
        )


class ReminderPoller:
    """Cancellable periodic task that drives reminder ticks."""

    def __init__(
        self,
        tick: Callable[[datetime], Any],
        *,
        interval_seconds: float = 30.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if interval_seconds <= 0 or interval_seconds > 60:
            raise ConfigurationError("Reminder poll interval must be within (0, 60] seconds")
        self._tick = tick
        self._clock = clock
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def run_once(self) -> None:
        try:
            self._tick(self._clock())
        except Exception:
            logger.exception("Reminder tick failed")

    async def _run(self) -> None:
        while True:
            self.run_once()
            await asyncio.sleep(self.interval_seconds)
