from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live(request: Request) -> dict:
    poller = getattr(request.app.state, "reminder_poller", None)
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "reminder_poller": {"running": bool(poller and poller.running)},
    }
