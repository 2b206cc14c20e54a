from __future__ import annotations

import asyncio
import logging
from collections import defaultdict, deque
from threading import Lock
from typing import Deque

from anyio import from_thread

from classweek.schemas.reminder import ReminderNotification
from classweek.services.notification_hub import ReminderHub

logger = logging.getLogger(__name__)

INBOX_LIMIT = 100

_pending_pushes: set[asyncio.Task] = set()


def publish_realtime_notification(notification: ReminderNotification, *, hub: ReminderHub) -> None:
    if notification.owner_id is None or not hub.listeners(notification.owner_id):
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    try:
        if loop is not None:
            task = loop.create_task(hub.push(notification))
            _pending_pushes.add(task)
            task.add_done_callback(_pending_pushes.discard)
        else:
            from_thread.run(hub.push, notification)
    except Exception:  # pragma: no cover - runtime environment dependent
        logger.debug("Unable to push realtime reminder for owner %s", notification.owner_id, exc_info=True)


class ReminderInbox:
    """Recent reminders per owner, newest last."""

    def __init__(self, limit: int = INBOX_LIMIT) -> None:
        self._items: dict[str, Deque[ReminderNotification]] = defaultdict(lambda: deque(maxlen=limit))
        self._lock = Lock()

    def add(self, notification: ReminderNotification) -> None:
        key = notification.owner_id or ""
        with self._lock:
            self._items[key].append(notification)

    def for_owner(self, owner_id: str) -> list[ReminderNotification]:
        with self._lock:
            return list(self._items.get(owner_id, ()))


class InboxNotificationSink:
    """Keeps each reminder in the inbox and, given a hub, pushes it to open websockets."""

    def __init__(self, inbox: ReminderInbox, *, hub: ReminderHub | None = None) -> None:
        self.inbox = inbox
        self.hub = hub

    def __call__(self, notification: ReminderNotification) -> None:
        self.inbox.add(notification)
        if self.hub is not None:
            publish_realtime_notification(notification, hub=self.hub)
