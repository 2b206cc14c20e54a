from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock

from classweek.schemas.reminder import ReminderNotification, ReminderSettings, ReminderSettingsUpdate
from classweek.services.notification_hub import ReminderHub
from classweek.services.notifications import InboxNotificationSink, ReminderInbox
from classweek.services.reminders import NotificationSink, ReminderScheduler, ReminderSettingsStore
from classweek.services.resolver import TemporalResolver
from classweek.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class OwnerTimetable:
    def __init__(self, owner_id: str, sink: NotificationSink, settings: ReminderSettings) -> None:
        self.owner_id = owner_id
        self.store = SessionStore(owner_id)
        self.resolver = TemporalResolver(self.store)
        self.scheduler = ReminderScheduler(self.store, sink, settings, owner_id=owner_id)


class TimetableRegistry:
    """All owners served by this process, sharing one set of reminder settings."""

    def __init__(
        self,
        settings_store: ReminderSettingsStore,
        *,
        inbox: ReminderInbox | None = None,
        sink: NotificationSink | None = None,
        hub: ReminderHub | None = None,
    ) -> None:
        self.settings_store = settings_store
        self.inbox = inbox or ReminderInbox()
        self.hub = hub or ReminderHub()
        self.sink = sink or InboxNotificationSink(self.inbox, hub=self.hub)
        self._settings = settings_store.load()
        self._owners: dict[str, OwnerTimetable] = {}
        self._lock = Lock()

    @property
    def reminder_settings(self) -> ReminderSettings:
        return self._settings

    def owner(self, owner_id: str) -> OwnerTimetable:
        with self._lock:
            timetable = self._owners.get(owner_id)
            if timetable is None:
                timetable = OwnerTimetable(owner_id, self.sink, self._settings)
                self._owners[owner_id] = timetable
                logger.debug("Created timetable for owner %s", owner_id)
            return timetable

    def lookup(self, owner_id: str) -> OwnerTimetable:
        """Registered timetable for reads; unknown owners get an empty, unregistered one."""
        with self._lock:
            timetable = self._owners.get(owner_id)
            if timetable is not None:
                return timetable
            return OwnerTimetable(owner_id, self.sink, self._settings)

    def owners(self) -> list[OwnerTimetable]:
        with self._lock:
            return list(self._owners.values())

    def update_reminder_settings(self, update: ReminderSettingsUpdate) -> ReminderSettings:
        with self._lock:
            self._settings = update.apply(self._settings)
            self.settings_store.save(self._settings)
            for timetable in self._owners.values():
                timetable.scheduler.set_settings(self._settings)
        logger.info(
            "Reminder settings updated: enabled=%s lead=%d min",
            self._settings.enabled,
            self._settings.lead_minutes,
        )
        return self._settings

    def tick_all(self, now: datetime) -> list[ReminderNotification]:
        fired: list[ReminderNotification] = []
        for timetable in self.owners():
            fired.extend(timetable.scheduler.tick(now))
        return fired
