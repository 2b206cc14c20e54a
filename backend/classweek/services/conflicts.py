from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from classweek.schemas.conflict import ConflictCheckResult, ConflictDetail, ConflictReport
from classweek.schemas.session import DAY_NAMES, Session, SessionCreate, parse_time_to_minutes


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    # Half-open [start, end): touching boundaries do not overlap.
    return start1 < end2 and start2 < end1


def find_conflicts(
    candidate: SessionCreate,
    existing: Iterable[Session],
    exclude_id: Optional[str] = None,
) -> List[str]:
    start = parse_time_to_minutes(candidate.start_time)
    end = parse_time_to_minutes(candidate.end_time)

    clashes: List[Session] = []
    for session in existing:
        if session.day_of_week != candidate.day_of_week:
            continue
        if exclude_id is not None and session.id == exclude_id:
            continue
        if intervals_overlap(start, end, session.start_minutes, session.end_minutes):
            clashes.append(session)

    clashes.sort(key=lambda item: (item.start_minutes, item.id))
    return [session.id for session in clashes]


def has_conflict(
    candidate: SessionCreate,
    existing: Iterable[Session],
    exclude_id: Optional[str] = None,
) -> bool:
    return bool(find_conflicts(candidate, existing, exclude_id))


def check_candidate(
    candidate: SessionCreate,
    existing: Iterable[Session],
    exclude_id: Optional[str] = None,
) -> ConflictCheckResult:
    """Side-effect free check used while a form is still being edited."""
    conflicting_ids = find_conflicts(candidate, existing, exclude_id)
    return ConflictCheckResult(has_conflict=bool(conflicting_ids), conflicting_ids=conflicting_ids)


def detect_week_conflicts(sessions: Iterable[Session]) -> ConflictReport:
    conflicts: List[ConflictDetail] = []

    sessions_by_day: Dict[int, List[Session]] = defaultdict(list)
    for session in sessions:
        sessions_by_day[session.day_of_week].append(session)

    for day in sorted(sessions_by_day):
        day_sessions = sorted(sessions_by_day[day], key=lambda item: (item.start_minutes, item.id))
        n = len(day_sessions)
        for i in range(n):
            s1 = day_sessions[i]
            for j in range(i + 1, n):
                s2 = day_sessions[j]
                # Sorted by start, so nothing later can overlap s1 either.
                if s2.start_minutes >= s1.end_minutes:
                    break
                conflicts.append(ConflictDetail(
                    id=f"overlap-{s1.id}-{s2.id}",
                    day_of_week=day,
                    description=(
                        f"{DAY_NAMES[day]}: {s1.subject_name} ({s1.start_time}-{s1.end_time}) "
                        f"overlaps {s2.subject_name} ({s2.start_time}-{s2.end_time})"
                    ),
                    affected_sessions=[s1.id, s2.id],
                ))

    return ConflictReport(conflicts=conflicts)
