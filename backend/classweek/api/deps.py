from fastapi import Depends, HTTPException, Path, status
from fastapi.requests import HTTPConnection

from classweek.services.registry import OwnerTimetable, TimetableRegistry


def get_registry(connection: HTTPConnection) -> TimetableRegistry:
    registry = getattr(connection.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Timetable registry not ready")
    return registry


def get_owner(
    owner_id: str = Path(min_length=1, max_length=64),
    registry: TimetableRegistry = Depends(get_registry),
) -> OwnerTimetable:
    return registry.lookup(owner_id)


def get_or_create_owner(
    owner_id: str = Path(min_length=1, max_length=64),
    registry: TimetableRegistry = Depends(get_registry),
) -> OwnerTimetable:
    return registry.owner(owner_id)
