from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from classweek.api.deps import get_owner, get_registry
from classweek.schemas.reminder import ReminderNotification, ReminderSettings, ReminderSettingsUpdate
from classweek.services.registry import OwnerTimetable, TimetableRegistry

router = APIRouter()


@router.get("/reminders/settings", response_model=ReminderSettings)
def get_reminder_settings(registry: TimetableRegistry = Depends(get_registry)) -> ReminderSettings:
    return registry.reminder_settings


@router.put("/reminders/settings", response_model=ReminderSettings)
def update_reminder_settings(
    payload: ReminderSettingsUpdate,
    registry: TimetableRegistry = Depends(get_registry),
) -> ReminderSettings:
    return registry.update_reminder_settings(payload)


@router.get("/owners/{owner_id}/reminders/inbox", response_model=list[ReminderNotification])
def reminder_inbox(
    timetable: OwnerTimetable = Depends(get_owner),
    registry: TimetableRegistry = Depends(get_registry),
) -> list[ReminderNotification]:
    return registry.inbox.for_owner(timetable.owner_id)


@router.websocket("/owners/{owner_id}/reminders/ws")
async def reminders_websocket(
    websocket: WebSocket,
    owner_id: str,
    registry: TimetableRegistry = Depends(get_registry),
) -> None:
    await registry.hub.connect(owner_id, websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        registry.hub.disconnect(owner_id, websocket)
