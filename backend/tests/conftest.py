from datetime import datetime

import pytest
from fastapi.testclient import TestClient #in-process http client, no real server needed

from classweek.core.config import Settings
from classweek.main import create_app
from classweek.schemas.session import SessionCreate
from classweek.services.registry import TimetableRegistry
from classweek.services.reminders import ReminderSettingsStore
from classweek.services.session_store import SessionStore


def make_session(day=1, start="09:00", end="10:00", subject="Mathematics", **extra) -> SessionCreate:
    return SessionCreate(
        day_of_week=day,
        start_time=start,
        end_time=end,
        subject_name=subject,
        **extra,
    )


def at(day: int, hhmm: str, second: int = 0) -> datetime:
    # 2026-10-19 is a Monday, so day 1..7 maps to Mon..Sun of that week.
    hours, minutes = map(int, hhmm.split(":"))
    return datetime(2026, 10, 18 + day, hours, minutes, second)


@pytest.fixture()
def store():
    return SessionStore("teacher-1")


@pytest.fixture()
def settings_path(tmp_path):
    return tmp_path / "reminder-settings.json"


@pytest.fixture()
def registry(settings_path):
    return TimetableRegistry(ReminderSettingsStore(settings_path))


@pytest.fixture()
def client(registry, settings_path):
    settings = Settings(
        reminder_settings_path=settings_path,
        reminder_poller_enabled=False,
        _env_file=None,
    )
    app = create_app(settings=settings, registry=registry)
    with TestClient(app) as test_client:
        yield test_client
