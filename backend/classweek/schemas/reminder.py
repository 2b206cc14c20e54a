from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from classweek.schemas.session import Session

LeadMinutes = Literal[5, 10, 15, 30]


class ReminderSettings(BaseModel):
    enabled: bool = True
    lead_minutes: LeadMinutes = Field(default=15, alias="leadMinutes")

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }


class ReminderSettingsUpdate(BaseModel):
    enabled: bool | None = None
    lead_minutes: LeadMinutes | None = Field(default=None, alias="leadMinutes")

    model_config = {
        "populate_by_name": True,
    }

    def apply(self, current: ReminderSettings) -> ReminderSettings:
        changes = self.model_dump(exclude_unset=True, exclude_none=True)
        return current.model_copy(update=changes)


class ReminderNotification(BaseModel):
    owner_id: str | None = Field(default=None, alias="ownerId")
    title: str
    body: str
    session: Session
    occurrence_date: date = Field(alias="occurrenceDate")
    starts_at: datetime = Field(alias="startsAt")
    fired_at: datetime = Field(alias="firedAt")

    model_config = {
        "populate_by_name": True,
    }

    @property
    def session_id(self) -> str:
        return self.session.id
