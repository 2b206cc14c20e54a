from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, Field

from classweek.schemas.session import Session


class ScheduleStatistics(BaseModel):
    total_weekly_hours: float = Field(alias="totalWeeklyHours", ge=0.0)
    total_sessions: int = Field(alias="totalSessions", ge=0)
    distinct_subjects: int = Field(alias="distinctSubjects", ge=0)
    average_participants: float = Field(alias="averageParticipants", ge=0.0)
    active_days: int = Field(alias="activeDays", ge=0, le=6)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class TimetableExport(BaseModel):
    owner: str
    generated: date
    schedule: list[Session] = Field(default_factory=list)
    statistics: ScheduleStatistics

    model_config = {
        "populate_by_name": True,
    }

    @property
    def filename(self) -> str:
        owner_slug = re.sub(r"[^\w-]", "", "_".join(self.owner.split()), flags=re.ASCII) or "timetable"
        return f"timetable_{owner_slug}_{self.generated.isoformat()}.json"

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
