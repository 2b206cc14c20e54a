from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from classweek.api.deps import get_owner
from classweek.core.config import get_settings
from classweek.schemas.conflict import ConflictReport
from classweek.schemas.schedule import ScheduleNow
from classweek.schemas.statistics import ScheduleStatistics
from classweek.services.conflicts import detect_week_conflicts
from classweek.services.registry import OwnerTimetable
from classweek.services.statistics import build_export, compute_statistics

router = APIRouter()


@router.get("/schedule/now", response_model=ScheduleNow)
def schedule_now(
    at: datetime | None = Query(default=None),
    timetable: OwnerTimetable = Depends(get_owner),
) -> ScheduleNow:
    return timetable.resolver.snapshot(at or datetime.now())


@router.get("/schedule/conflicts", response_model=ConflictReport)
def schedule_conflicts(timetable: OwnerTimetable = Depends(get_owner)) -> ConflictReport:
    return detect_week_conflicts(timetable.store.list_all())


@router.get("/statistics", response_model=ScheduleStatistics)
def schedule_statistics(timetable: OwnerTimetable = Depends(get_owner)) -> ScheduleStatistics:
    return compute_statistics(timetable.store.list_all())


@router.get("/export")
def export_timetable(
    owner_name: str | None = Query(default=None, alias="ownerName", max_length=200),
    timetable: OwnerTimetable = Depends(get_owner),
) -> Response:
    export = build_export(
        owner_name or get_settings().default_owner_name,
        timetable.store.list_all(),
        generated_on=date.today(),
    )
    return Response(
        content=export.to_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
