import itertools

import pytest
from pydantic import ValidationError

from classweek.core.exceptions import ConflictError, DuplicateSessionError, InvalidIntervalError, NotFoundError
from classweek.schemas.session import Session, SessionCreate, SessionPatch
from classweek.services.session_store import SessionStore
from conftest import make_session


def _assert_no_overlaps(store: SessionStore) -> None:
    for first, second in itertools.combinations(store.list_all(), 2):
        if first.day_of_week != second.day_of_week:
            continue
        assert not (first.start_minutes < second.end_minutes and second.start_minutes < first.end_minutes)


def test_add_assigns_id_and_derives_duration(store):
    session = store.add(make_session(start="09:00", end="10:30", participant_count=24))

    assert session.id
    assert session.duration_minutes == 90
    assert store.get(session.id) == session
    assert len(store) == 1


def test_add_rejects_inverted_or_empty_interval(store):
    with pytest.raises(InvalidIntervalError):
        store.add(make_session(start="10:00", end="09:00"))
    with pytest.raises(InvalidIntervalError):
        store.add(make_session(start="10:00", end="10:00"))
    assert len(store) == 0


def test_interval_is_checked_before_conflicts(store):
    store.add(make_session(start="09:00", end="10:00"))
    with pytest.raises(InvalidIntervalError):
        store.add(make_session(start="09:30", end="09:15"))


def test_conflicting_add_leaves_store_unchanged(store):
    first = store.add(make_session(start="09:00", end="10:00"))
    second = store.add(make_session(start="10:00", end="11:00"))

    with pytest.raises(ConflictError) as excinfo:
        store.add(make_session(start="09:30", end="10:30"))

    assert excinfo.value.conflicting_ids == [first.id, second.id]
    assert excinfo.value.status_code == 409
    assert excinfo.value.details["conflicting_ids"] == [first.id, second.id]
    assert store.list_all() == [first, second]


def test_back_to_back_add_is_legal(store):
    store.add(make_session(start="09:00", end="10:00"))
    store.add(make_session(start="10:00", end="11:00"))
    store.add(make_session(start="08:00", end="09:00"))
    assert len(store) == 3


def test_description_only_update_never_self_conflicts(store):
    session = store.add(make_session(start="09:00", end="10:00"))

    updated = store.update(session.id, SessionPatch(subject_name="Algebra", room_label="B-12"))

    assert updated.id == session.id
    assert updated.subject_name == "Algebra"
    assert updated.start_time == "09:00"
    assert store.get(session.id) == updated


def test_update_replaces_whole_record_and_recomputes_duration(store):
    session = store.add(make_session(start="09:00", end="10:00"))

    updated = store.update(session.id, SessionPatch(end_time="11:15"))

    assert updated.duration_minutes == 135
    assert session.duration_minutes == 60
    assert updated is not session


def test_update_into_overlap_is_rejected(store):
    keep = store.add(make_session(start="09:00", end="10:00"))
    moving = store.add(make_session(day=2, start="09:00", end="10:00"))

    with pytest.raises(ConflictError) as excinfo:
        store.update(moving.id, SessionPatch(day_of_week=1, start_time="09:45", end_time="10:45"))

    assert excinfo.value.conflicting_ids == [keep.id]
    assert store.get(moving.id) == moving


def test_update_with_inverted_times(store):
    session = store.add(make_session(start="09:00", end="10:00"))
    with pytest.raises(InvalidIntervalError):
        store.update(session.id, SessionPatch(start_time="10:30"))
    assert store.get(session.id) == session


def test_update_and_remove_unknown_id(store):
    with pytest.raises(NotFoundError):
        store.update("missing", SessionPatch(subject_name="x"))
    with pytest.raises(NotFoundError):
        store.remove("missing")
    with pytest.raises(NotFoundError):
        store.get("missing")


def test_remove_returns_removed_session(store):
    session = store.add(make_session())
    assert store.remove(session.id) == session
    assert session.id not in store
    assert store.list_all() == []


def test_list_by_day_is_sorted_by_start_time(store):
    store.add(make_session(day=3, start="13:00", end="14:00", subject="Late"))
    store.add(make_session(day=3, start="08:00", end="09:00", subject="Early"))
    store.add(make_session(day=3, start="10:30", end="11:00", subject="Middle"))
    store.add(make_session(day=4, start="07:00", end="08:00", subject="Other day"))

    assert [item.subject_name for item in store.list_by_day(3)] == ["Early", "Middle", "Late"]
    assert [item.day_of_week for item in store.list_all()] == [3, 3, 3, 4]


def test_no_overlap_invariant_after_mixed_mutations(store):
    attempts = [
        (1, "09:00", "10:00"),
        (1, "09:30", "10:30"),
        (1, "10:00", "11:00"),
        (1, "08:30", "09:01"),
        (2, "09:00", "12:00"),
        (2, "11:59", "12:30"),
        (2, "12:00", "12:30"),
    ]
    for day, start, end in attempts:
        try:
            store.add(make_session(day=day, start=start, end=end))
        except ConflictError:
            pass

    for session in store.list_all():
        try:
            store.update(session.id, SessionPatch(start_time="08:00"))
        except (ConflictError, InvalidIntervalError):
            pass

    _assert_no_overlaps(store)
    assert len(store) == 4


def test_load_keeps_ids_and_rejects_conflicting_batch(store):
    week = [
        Session(id="a", day_of_week=1, start_time="09:00", end_time="10:00", subject_name="Math"),
        Session(id="b", day_of_week=1, start_time="10:00", end_time="11:00", subject_name="Physics"),
    ]
    store.load(week)
    assert [item.id for item in store.list_all()] == ["a", "b"]

    clashing = [
        Session(id="c", day_of_week=2, start_time="09:00", end_time="10:00", subject_name="Art"),
        Session(id="d", day_of_week=1, start_time="09:30", end_time="10:30", subject_name="Music"),
    ]
    with pytest.raises(ConflictError) as excinfo:
        store.load(clashing)
    assert excinfo.value.conflicting_ids == ["a", "b"]
    assert "c" not in store


def test_session_payload_validation():
    with pytest.raises(ValidationError):
        SessionCreate(day_of_week=7, start_time="09:00", end_time="10:00", subject_name="Math")
    with pytest.raises(ValidationError):
        SessionCreate(day_of_week="Sunday", start_time="09:00", end_time="10:00", subject_name="Math")
    with pytest.raises(ValidationError):
        SessionCreate(day_of_week=1, start_time="9:00", end_time="10:00", subject_name="Math")
    with pytest.raises(ValidationError):
        SessionCreate(day_of_week=1, start_time="09:00", end_time="10:00", subject_name="Math", session_type="seminar")

    payload = SessionCreate.model_validate(
        {"dayOfWeek": "Wed", "startTime": "14:00", "endTime": "15:30", "subjectName": "Chemistry"}
    )
    assert payload.day_of_week == 3
    assert payload.session_type == "lecture"
    assert payload.participant_count == 0


def test_sessions_are_immutable(store):
    session = store.add(make_session())
    with pytest.raises(ValidationError):
        session.start_time = "08:00"


def test_clear_empties_the_week(store):
    store.add(make_session(day=1))
    store.add(make_session(day=2))
    store.clear()
    assert len(store) == 0
    assert store.list_by_day(1) == []


def test_patch_can_clear_description_but_not_required_fields(store):
    session = store.add(make_session(description="Bring calculators"))

    cleared = store.update(session.id, SessionPatch.model_validate({"description": None, "subjectName": None}))

    assert cleared.description is None
    assert cleared.subject_name == session.subject_name
    untouched = store.update(session.id, SessionPatch(room_label="B-12"))
    assert untouched.description is None


def test_load_reports_reused_id_separately_from_overlap(store):
    store.load([Session(id="a", day_of_week=1, start_time="09:00", end_time="10:00", subject_name="Math")])

    with pytest.raises(DuplicateSessionError) as excinfo:
        store.load([Session(id="a", day_of_week=4, start_time="13:00", end_time="14:00", subject_name="Art")])

    assert excinfo.value.status_code == 409
    assert excinfo.value.details == {"session_id": "a"}
    assert [item.day_of_week for item in store.list_all()] == [1]
