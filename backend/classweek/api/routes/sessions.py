from fastapi import APIRouter, Depends, Query, Response, status

from classweek.api.deps import get_or_create_owner, get_owner
from classweek.schemas.conflict import ConflictCheckResult
from classweek.schemas.session import Session, SessionCreate, SessionPatch
from classweek.services.registry import OwnerTimetable

router = APIRouter()


@router.get("", response_model=list[Session])
def list_sessions(
    day: int | None = Query(default=None, ge=1, le=6),
    timetable: OwnerTimetable = Depends(get_owner),
) -> list[Session]:
    if day is not None:
        return timetable.store.list_by_day(day)
    return timetable.store.list_all()


@router.post("", response_model=Session, status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate, timetable: OwnerTimetable = Depends(get_or_create_owner)) -> Session:
    return timetable.store.add(payload)


@router.post("/check", response_model=ConflictCheckResult)
def check_session(
    payload: SessionCreate,
    exclude_id: str | None = Query(default=None, alias="excludeId"),
    timetable: OwnerTimetable = Depends(get_owner),
) -> ConflictCheckResult:
    return timetable.store.check(payload, exclude_id=exclude_id)


@router.get("/{session_id}", response_model=Session)
def get_session(session_id: str, timetable: OwnerTimetable = Depends(get_owner)) -> Session:
    return timetable.store.get(session_id)


@router.patch("/{session_id}", response_model=Session)
def update_session(
    session_id: str,
    patch: SessionPatch,
    timetable: OwnerTimetable = Depends(get_owner),
) -> Session:
    return timetable.store.update(session_id, patch)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, timetable: OwnerTimetable = Depends(get_owner)) -> Response:
    timetable.store.remove(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
