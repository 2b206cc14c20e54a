from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from classweek.schemas.session import Session


class SessionOccurrence(BaseModel):
    session: Session
    starts_at: datetime = Field(alias="startsAt")
    minutes_until_start: int = Field(alias="minutesUntilStart", ge=0)

    model_config = {
        "populate_by_name": True,
    }


class ScheduleNow(BaseModel):
    at: datetime
    day_of_week: int | None = Field(default=None, alias="dayOfWeek")
    current: Session | None = None
    next: SessionOccurrence | None = None

    model_config = {
        "populate_by_name": True,
    }
