from __future__ import annotations

import logging
from threading import Lock

from fastapi import WebSocket

from classweek.schemas.reminder import ReminderNotification

logger = logging.getLogger(__name__)

REMINDER_FIRED = "reminder.fired"


def reminder_event(notification: ReminderNotification, event: str = REMINDER_FIRED) -> dict:
    return {
        "event": event,
        "reminder": notification.model_dump(mode="json", by_alias=True),
    }


class ReminderHub:
    """Open reminder websockets, grouped by timetable owner.

    The lock only guards the socket map; sends happen outside it on the
    event loop that owns the sockets.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, set[WebSocket]] = {}
        self._lock = Lock()

    def listeners(self, owner_id: str) -> int:
        with self._lock:
            return len(self._sockets.get(owner_id, ()))

    async def connect(self, owner_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        with self._lock:
            self._sockets.setdefault(owner_id, set()).add(websocket)
        await websocket.send_json({"event": "connected", "owner_id": owner_id})
        logger.debug("Reminder listener joined for owner %s", owner_id)

    def disconnect(self, owner_id: str, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._sockets.get(owner_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._sockets[owner_id]

    async def push(self, notification: ReminderNotification, *, event: str = REMINDER_FIRED) -> int:
        """Send one reminder to every listener of its owner; returns how many got it."""
        owner_id = notification.owner_id
        if owner_id is None:
            return 0
        with self._lock:
            sockets = list(self._sockets.get(owner_id, ()))

        payload = reminder_event(notification, event)
        delivered = 0
        for websocket in sockets:
            try:
                await websocket.send_json(payload)
            except Exception:  # pragma: no cover - network/runtime dependent
                self.disconnect(owner_id, websocket)
                logger.debug("Dropped stale reminder websocket for owner %s", owner_id, exc_info=True)
                continue
            delivered += 1
        return delivered
