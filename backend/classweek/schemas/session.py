from __future__ import annotations

import re
from datetime import time
from typing import Literal

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}

DAY_ALIASES = {name.lower(): number for number, name in DAY_NAMES.items()} | {
    name[:3].lower(): number for number, name in DAY_NAMES.items()
}

WEEK_LENGTH = len(DAY_NAMES)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

SessionType = Literal["lecture", "practical", "tutorial", "exam"]

CLEARABLE_FIELDS = frozenset({"description"})


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_of(moment: time) -> int:
    return moment.hour * 60 + moment.minute


def _coerce_day(value):
    if isinstance(value, str):
        key = value.strip().lower()
        if key.isdigit():
            return int(key)
        if key in DAY_ALIASES:
            return DAY_ALIASES[key]
        raise ValueError(f"Invalid day value: {value}")
    return value


def _check_time(value: str) -> str:
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


class SessionCreate(BaseModel):
    day_of_week: int = Field(alias="dayOfWeek", ge=1, le=6)
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    subject_name: str = Field(alias="subjectName", min_length=1, max_length=200)
    owner_class_name: str = Field(default="", alias="ownerClassName", max_length=200)
    room_label: str = Field(default="", alias="roomLabel", max_length=100)
    participant_count: int = Field(default=0, alias="participantCount", ge=0, le=2000)
    session_type: SessionType = Field(default="lecture", alias="sessionType")
    description: str | None = Field(default=None, max_length=2000)

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("day_of_week", mode="before")
    @classmethod
    def normalize_day(cls, value):
        return _coerce_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return _check_time(value)


class SessionPatch(BaseModel):
    """Partial edit. Unset fields keep their current value; only
    ``description`` can be cleared with an explicit null."""

    day_of_week: int | None = Field(default=None, alias="dayOfWeek", ge=1, le=6)
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    subject_name: str | None = Field(default=None, alias="subjectName", min_length=1, max_length=200)
    owner_class_name: str | None = Field(default=None, alias="ownerClassName", max_length=200)
    room_label: str | None = Field(default=None, alias="roomLabel", max_length=100)
    participant_count: int | None = Field(default=None, alias="participantCount", ge=0, le=2000)
    session_type: SessionType | None = Field(default=None, alias="sessionType")
    description: str | None = Field(default=None, max_length=2000)

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("day_of_week", mode="before")
    @classmethod
    def normalize_day(cls, value):
        return _coerce_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_time(value)

    def changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        return {key: value for key, value in changes.items() if value is not None or key in CLEARABLE_FIELDS}


class Session(SessionCreate):
    id: str = Field(min_length=1, max_length=64)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    @model_validator(mode="after")
    def validate_time_order(self) -> "Session":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    @computed_field(alias="durationMinutes")
    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def record(self) -> dict:
        """Writable fields only, suitable for rebuilding the session."""
        return self.model_dump(exclude={"duration_minutes"})
