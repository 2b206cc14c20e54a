from __future__ import annotations

from datetime import date
from typing import Iterable

from classweek.schemas.session import Session
from classweek.schemas.statistics import ScheduleStatistics, TimetableExport


def compute_statistics(sessions: Iterable[Session]) -> ScheduleStatistics:
    items = list(sessions)
    total_sessions = len(items)
    total_minutes = sum(item.duration_minutes for item in items)
    total_participants = sum(item.participant_count for item in items)
    average = total_participants / total_sessions if total_sessions else 0.0

    return ScheduleStatistics(
        total_weekly_hours=round(total_minutes / 60, 1),
        total_sessions=total_sessions,
        distinct_subjects=len({item.subject_name for item in items}),
        average_participants=round(average, 1),
        active_days=len({item.day_of_week for item in items}),
    )


def build_export(owner_name: str, sessions: Iterable[Session], generated_on: date) -> TimetableExport:
    schedule = list(sessions)
    return TimetableExport(
        owner=owner_name,
        generated=generated_on,
        schedule=schedule,
        statistics=compute_statistics(schedule),
    )
