"""Tests for the SQLite store."""

from datetime import date, datetime

import pytest

from conftest import make_session
from focuscore.errors import StorageError
from focuscore.models import AppSettings, Goal, GoalPeriod, Reflection, SessionMode
from focuscore.storage import Storage


def test_session_round_trip(storage):
    session = make_session(datetime(2024, 3, 14, 9, 0), 25)
    storage.create_session(session)
    assert storage.get_sessions() == [session]


def test_session_filters_and_order(storage):
    focus_early = make_session(datetime(2024, 3, 14, 9, 0), 25)
    focus_late = make_session(datetime(2024, 3, 14, 15, 0), 25)
    rest = make_session(datetime(2024, 3, 14, 9, 30), 5, mode=SessionMode.BREAK)
    for s in (focus_late, rest, focus_early):
        storage.create_session(s)

    assert storage.get_sessions(mode=SessionMode.FOCUS) == [focus_late, focus_early]
    assert storage.get_sessions(mode=SessionMode.FOCUS, newest_first=False) == [focus_early, focus_late]
    assert storage.get_sessions(start_date=datetime(2024, 3, 14, 10, 0)) == [focus_late]
    assert storage.get_sessions(end_date=datetime(2024, 3, 14, 10, 0), newest_first=False) == [
        focus_early, rest]
    assert storage.get_sessions(limit=1) == [focus_late]


def test_duplicate_session_id_raises_storage_error(storage):
    session = make_session(datetime(2024, 3, 14, 9, 0), 25)
    storage.create_session(session)
    with pytest.raises(StorageError):
        storage.create_session(session)


def test_goal_round_trip_and_active_filter(storage):
    goal = Goal(period=GoalPeriod.MONTHLY, target_sessions=20,
                start_date=date(2024, 1, 31), end_date=date(2024, 2, 29))
    storage.create_goal(goal)

    assert storage.get_goals() == [goal]
    assert storage.get_goals(active_on=date(2024, 2, 29)) == [goal]
    assert storage.get_goals(active_on=date(2024, 3, 1)) == []


def test_non_positive_target_is_refused_by_schema(storage):
    goal = Goal(period=GoalPeriod.DAILY, target_sessions=0,
                start_date=date(2024, 3, 14), end_date=date(2024, 3, 15))
    with pytest.raises(StorageError):
        storage.create_goal(goal)


def test_reflection_lookup_returns_latest_for_date(storage):
    first = Reflection("morning", "ok", date(2024, 3, 14), created_at=100)
    second = Reflection("evening", "great", date(2024, 3, 14), created_at=200)
    storage.save_reflection(first)
    storage.save_reflection(second)

    assert storage.get_reflection(date(2024, 3, 14)) == second
    assert storage.get_reflection(date(2024, 3, 15)) is None


def test_settings_round_trip(storage):
    assert storage.get_settings() == AppSettings()

    storage.save_settings(AppSettings(notification_enabled=False, task_label="Taxes"))

    settings = storage.get_settings()
    assert settings.notification_enabled is False
    assert settings.task_label == "Taxes"


def test_schema_creation_is_idempotent(tmp_path):
    path = str(tmp_path / "focus.db")
    Storage(path).create_session(make_session(datetime(2024, 3, 14, 9, 0), 25))
    assert len(Storage(path).get_sessions()) == 1


def test_unopenable_database_raises_storage_error(tmp_path):
    with pytest.raises(StorageError):
        Storage(str(tmp_path / "missing-dir" / "focus.db"))


def test_unknown_stored_setting_is_ignored(storage):
    with storage._get_connection() as conn:
        conn.execute("INSERT INTO settings (key, value) VALUES ('sound_enabled', 'false')")

    assert storage.get_settings() == AppSettings()
