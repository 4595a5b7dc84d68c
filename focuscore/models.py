"""
Data models for the focus core.
Uses dataclasses for clean, type-annotated data structures.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional
import time
import uuid


# Fixed durations in seconds
FOCUS_DURATION = 25 * 60
BREAK_DURATION = 5 * 60

DEFAULT_TASK_LABEL = "Untitled task"


class SessionMode(Enum):
    """Timer modes. Each mode has a fixed duration."""
    FOCUS = "focus"
    BREAK = "break"

    @property
    def total_seconds(self) -> int:
        """Nominal duration of this mode."""
        return FOCUS_DURATION if self is SessionMode.FOCUS else BREAK_DURATION

    @property
    def opposite(self) -> "SessionMode":
        """The mode that follows this one."""
        return SessionMode.BREAK if self is SessionMode.FOCUS else SessionMode.FOCUS


class GoalPeriod(Enum):
    """Length of a goal's window."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReportPeriod(Enum):
    """Rolling window used by period reports."""
    WEEK = "week"
    MONTH = "month"

    @property
    def days(self) -> int:
        return 7 if self is ReportPeriod.WEEK else 30


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Session:
    """
    A completed focus or break session.
    Immutable once created; duration is always end_ts - start_ts.
    """
    mode: SessionMode
    start_ts: int  # Unix timestamp when session started
    end_ts: int    # Unix timestamp when session ended
    task_label: str = DEFAULT_TASK_LABEL
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.end_ts < self.start_ts:
            raise ValueError("Session cannot end before it starts")

    @property
    def duration_seconds(self) -> int:
        return self.end_ts - self.start_ts

    @property
    def duration_minutes(self) -> int:
        """Whole minutes, rounded down."""
        return self.duration_seconds // 60

    @property
    def is_focus(self) -> bool:
        return self.mode is SessionMode.FOCUS

    @property
    def started_at(self) -> datetime:
        """Local datetime of the session start."""
        return datetime.fromtimestamp(self.start_ts)

    @property
    def ended_at(self) -> datetime:
        """Local datetime of the session end."""
        return datetime.fromtimestamp(self.end_ts)


@dataclass(frozen=True)
class CompletedEvent:
    """Emitted once each time a running countdown reaches zero."""
    mode: SessionMode
    actual_duration: int
    completed_at: float


@dataclass
class TimerContext:
    """
    Current timer state.
    remaining_seconds stays within [0, total_seconds] and
    session_start_ts is set only while running.
    """
    mode: SessionMode = SessionMode.FOCUS
    remaining_seconds: int = FOCUS_DURATION
    running: bool = False
    session_start_ts: Optional[float] = None

    @property
    def total_seconds(self) -> int:
        return self.mode.total_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self.total_seconds - self.remaining_seconds

    @property
    def progress_percentage(self) -> float:
        """Return progress as percentage (0-100)."""
        return (self.elapsed_seconds / self.total_seconds) * 100.0

    def format_remaining(self) -> str:
        """Format remaining time as MM:SS."""
        minutes = self.remaining_seconds // 60
        seconds = self.remaining_seconds % 60
        return f"{minutes:02d}:{seconds:02d}"


@dataclass
class Goal:
    """
    A session-count quota over a date window.
    Progress is never stored; see goals.evaluate_goal.
    """
    period: GoalPeriod
    target_sessions: int
    start_date: date
    end_date: date
    id: str = field(default_factory=new_id)
    created_at: int = field(default_factory=lambda: int(time.time()))


@dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    progress: int

    @property
    def is_completed(self) -> bool:
        return self.progress >= self.goal.target_sessions

    @property
    def percentage(self) -> float:
        return min(100.0, self.progress / self.goal.target_sessions * 100.0)


@dataclass(frozen=True)
class HourlyEntry:
    hour: int
    focus_minutes: int

    @property
    def intensity(self) -> int:
        """Minutes scaled by 4, saturating at 100."""
        return min(100, self.focus_minutes * 4)


@dataclass
class FocusAnalytics:
    """Same-day focus summary."""
    total_focus_time: int
    sessions_completed: int
    hourly_distribution: List[HourlyEntry]


@dataclass(frozen=True)
class DailyTotal:
    day: date
    sessions: int
    minutes: int


@dataclass
class PeriodReport:
    """Rolling weekly or monthly rollup of focus sessions."""
    period: ReportPeriod
    total_sessions: int
    total_minutes: int
    average_sessions_per_day: float
    most_productive_day: Optional[date]
    daily: List[DailyTotal]


@dataclass
class Reflection:
    """Free-text reflection and the feedback returned for it."""
    reflection_text: str
    feedback: str
    session_date: date
    id: str = field(default_factory=new_id)
    created_at: int = field(default_factory=lambda: int(time.time()))


@dataclass
class AppSettings:
    """Application settings stored in database."""
    notification_enabled: bool = True
    task_label: str = ""
