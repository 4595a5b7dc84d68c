"""
Goal creation and progress evaluation.
"""

from datetime import date, datetime, time
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta
from loguru import logger

from .errors import GoalValidationError
from .models import Goal, GoalPeriod, GoalProgress, Session
from .storage import Storage


_WINDOW_LENGTH = {
    GoalPeriod.DAILY: relativedelta(days=1),
    GoalPeriod.WEEKLY: relativedelta(days=7),
    # Calendar month: Jan 31 -> Feb 28/29, never Mar 3
    GoalPeriod.MONTHLY: relativedelta(months=1),
}


def window_end(period: GoalPeriod, start: date) -> date:
    return start + _WINDOW_LENGTH[period]


def create_goal(period, target_sessions, now: Optional[datetime] = None) -> Goal:
    """
    Build a goal whose window starts on now's local date.

    Raises:
        GoalValidationError: If the period is unknown or the target is not
            a positive integer.
    """
    try:
        period = GoalPeriod(period)
    except ValueError:
        raise GoalValidationError(f"Unknown goal period: {period!r}") from None

    if isinstance(target_sessions, bool) or not isinstance(target_sessions, int):
        raise GoalValidationError("Target sessions must be a whole number")
    if target_sessions <= 0:
        raise GoalValidationError("Target sessions must be greater than zero")

    start = (now or datetime.now()).date()
    return Goal(
        period=period,
        target_sessions=target_sessions,
        start_date=start,
        end_date=window_end(period, start)
    )


def count_matching_sessions(goal: Goal, sessions: Iterable[Session]) -> int:
    """
    Focus sessions completed within the goal window.

    The window runs from midnight of start_date to midnight of end_date,
    both ends inclusive.
    """
    opens = datetime.combine(goal.start_date, time.min)
    closes = datetime.combine(goal.end_date, time.min)
    return sum(
        1 for s in sessions
        if s.is_focus and opens <= s.ended_at <= closes
    )


def evaluate_goal(goal: Goal, sessions: Iterable[Session]) -> GoalProgress:
    return GoalProgress(goal=goal, progress=count_matching_sessions(goal, sessions))


def evaluate_goals(goals: Iterable[Goal], sessions: Iterable[Session]) -> List[GoalProgress]:
    sessions = list(sessions)
    return [evaluate_goal(goal, sessions) for goal in goals]


class GoalService:
    """Goal store operations plus progress against a session list."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def add(self, period, target_sessions, now: Optional[datetime] = None) -> Goal:
        """Validate, then persist a new goal."""
        goal = create_goal(period, target_sessions, now)
        self.storage.create_goal(goal)
        logger.info("Created {} goal {} for {} sessions",
                    goal.period.value, goal.id, goal.target_sessions)
        return goal

    def delete(self, goal_id: str) -> bool:
        return self.storage.delete_goal(goal_id)

    def active_goals(self, today: Optional[date] = None) -> List[Goal]:
        """Goals whose window has not ended before today, newest first."""
        return self.storage.get_goals(active_on=today or date.today())

    def progress(self, sessions: Iterable[Session], today: Optional[date] = None) -> List[GoalProgress]:
        return evaluate_goals(self.active_goals(today), sessions)
