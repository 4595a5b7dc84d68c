"""Tests for goal creation and progress evaluation."""

from datetime import date, datetime

import pytest

from conftest import make_session
from focuscore.errors import GoalValidationError
from focuscore.goals import GoalService, create_goal, evaluate_goal, evaluate_goals
from focuscore.models import Goal, GoalPeriod, SessionMode


@pytest.mark.parametrize("now, period, expected_end", [
    (datetime(2023, 1, 31, 22, 15), GoalPeriod.MONTHLY, date(2023, 2, 28)),
    (datetime(2024, 1, 31, 8, 0), GoalPeriod.MONTHLY, date(2024, 2, 29)),
    (datetime(2024, 3, 14, 23, 59), GoalPeriod.DAILY, date(2024, 3, 15)),
    (datetime(2024, 12, 31, 0, 1), GoalPeriod.DAILY, date(2025, 1, 1)),
    (datetime(2024, 2, 26, 12, 0), GoalPeriod.WEEKLY, date(2024, 3, 4)),
])
def test_window_uses_calendar_arithmetic(now, period, expected_end):
    goal = create_goal(period, 4, now)
    assert goal.start_date == now.date()
    assert goal.end_date == expected_end


@pytest.mark.parametrize("target", [0, -3, 2.5, "8", True, None])
def test_invalid_targets_are_rejected(target):
    with pytest.raises(GoalValidationError):
        create_goal(GoalPeriod.DAILY, target, datetime(2024, 3, 14))


def test_unknown_period_is_rejected():
    with pytest.raises(GoalValidationError):
        create_goal("yearly", 3, datetime(2024, 3, 14))


def test_period_accepts_plain_string():
    goal = create_goal("weekly", 3, datetime(2024, 3, 14))
    assert goal.period is GoalPeriod.WEEKLY


def test_daily_goal_partial_progress():
    goal = create_goal(GoalPeriod.DAILY, 8, datetime(2024, 3, 14, 8, 0))
    sessions = [make_session(datetime(2024, 3, 14, 9 + i, 0), 25) for i in range(5)]

    progress = evaluate_goal(goal, sessions)

    assert progress.progress == 5
    assert progress.percentage == 62.5
    assert not progress.is_completed


def test_progress_counts_only_focus_sessions_inside_window():
    goal = Goal(period=GoalPeriod.WEEKLY, target_sessions=2,
                start_date=date(2024, 3, 10), end_date=date(2024, 3, 17))
    sessions = [
        make_session(datetime(2024, 3, 10, 0, 5), 25),          # first day
        make_session(datetime(2024, 3, 16, 23, 35), 25),        # ends at window close
        make_session(datetime(2024, 3, 17, 20, 0), 25),         # end date evening
        make_session(datetime(2024, 3, 9, 23, 0), 25),          # before
        make_session(datetime(2024, 3, 18, 9, 0), 25),          # after
        make_session(datetime(2024, 3, 12, 9, 0), 5, mode=SessionMode.BREAK),
    ]

    progress = evaluate_goal(goal, sessions)

    assert progress.progress == 2
    assert progress.is_completed
    assert progress.percentage == 100.0


def test_daily_goal_excludes_next_day_sessions():
    goal = create_goal(GoalPeriod.DAILY, 8, datetime(2024, 3, 14, 8, 0))
    sessions = [make_session(datetime(2024, 3, 14, 9, 0), 25)]
    sessions += [make_session(datetime(2024, 3, 15, 9 + i, 0), 25) for i in range(4)]

    assert evaluate_goal(goal, sessions).progress == 1


def test_daily_goal_counts_sessions_finished_before_creation():
    goal = create_goal(GoalPeriod.DAILY, 2, datetime(2024, 3, 14, 18, 0))
    sessions = [make_session(datetime(2024, 3, 14, 0, 0), 25),
                make_session(datetime(2024, 3, 13, 23, 50), 25)]

    assert evaluate_goal(goal, sessions).progress == 2


def test_percentage_is_capped():
    goal = Goal(period=GoalPeriod.DAILY, target_sessions=1,
                start_date=date(2024, 3, 14), end_date=date(2024, 3, 15))
    sessions = [make_session(datetime(2024, 3, 14, h, 0), 25) for h in (9, 10, 11)]
    assert evaluate_goal(goal, sessions).percentage == 100.0


def test_evaluate_goals_accepts_generators():
    goals = [create_goal(GoalPeriod.DAILY, 2, datetime(2024, 3, 14)),
             create_goal(GoalPeriod.WEEKLY, 2, datetime(2024, 3, 14))]
    sessions = (make_session(datetime(2024, 3, 14, 9, 0), 25) for _ in range(1))

    results = evaluate_goals(goals, sessions)

    assert [r.progress for r in results] == [1, 1]


def test_service_persists_and_filters_expired_goals(storage):
    service = GoalService(storage)
    old = service.add(GoalPeriod.DAILY, 3, datetime(2024, 3, 1, 9, 0))
    current = service.add(GoalPeriod.MONTHLY, 20, datetime(2024, 3, 10, 9, 0))

    active = service.active_goals(date(2024, 3, 14))

    assert [g.id for g in active] == [current.id]
    assert old.id in [g.id for g in storage.get_goals()]


def test_service_delete(storage):
    service = GoalService(storage)
    goal = service.add(GoalPeriod.WEEKLY, 5, datetime(2024, 3, 14))

    assert service.delete(goal.id)
    assert not service.delete(goal.id)
    assert storage.get_goals() == []


def test_rejected_goal_is_not_stored(storage):
    service = GoalService(storage)
    with pytest.raises(GoalValidationError):
        service.add(GoalPeriod.DAILY, 0, datetime(2024, 3, 14))
    assert storage.get_goals() == []
