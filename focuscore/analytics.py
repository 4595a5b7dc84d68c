"""
Derived focus statistics.

Everything here is a pure function of a session list and the current
time, so it can be recomputed on every log change.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .models import (
    DailyTotal, FocusAnalytics, HourlyEntry, PeriodReport, ReportPeriod, Session
)


HOURS_PER_DAY = 24


def todays_focus_sessions(sessions: Iterable[Session], now: datetime) -> List[Session]:
    """Focus sessions that started on now's local calendar date."""
    today = now.date()
    return [s for s in sessions if s.is_focus and s.started_at.date() == today]


def hourly_distribution(sessions: Iterable[Session]) -> List[HourlyEntry]:
    """
    Bucket whole focus minutes into the hour each session started.
    Always returns 24 entries, hours 0-23.
    """
    minutes_by_hour: Dict[int, int] = {}
    for session in sessions:
        hour = session.started_at.hour
        minutes_by_hour[hour] = minutes_by_hour.get(hour, 0) + session.duration_minutes

    return [HourlyEntry(hour=hour, focus_minutes=minutes_by_hour.get(hour, 0))
            for hour in range(HOURS_PER_DAY)]


def compute_daily_analytics(sessions: Iterable[Session], now: Optional[datetime] = None) -> FocusAnalytics:
    """Summarise today's focus sessions."""
    now = now or datetime.now()
    today = todays_focus_sessions(sessions, now)
    return FocusAnalytics(
        total_focus_time=sum(s.duration_minutes for s in today),
        sessions_completed=len(today),
        hourly_distribution=hourly_distribution(today)
    )


def compute_period_report(
    sessions: Iterable[Session],
    period: ReportPeriod,
    now: Optional[datetime] = None
) -> PeriodReport:
    """
    Roll up focus sessions completed in the last 7 or 30 days.

    The average is taken over every day of the period, including days
    without sessions. The most productive day is the first day with the
    highest minute total.
    """
    now = now or datetime.now()
    since = now - timedelta(days=period.days)
    in_period = sorted(
        (s for s in sessions if s.is_focus and s.ended_at >= since),
        key=lambda s: s.end_ts
    )

    by_day: Dict = {}
    for session in in_period:
        day = session.ended_at.date()
        count, minutes = by_day.get(day, (0, 0))
        by_day[day] = (count + 1, minutes + session.duration_minutes)

    daily = [DailyTotal(day=day, sessions=count, minutes=minutes)
             for day, (count, minutes) in sorted(by_day.items())]

    most_productive = None
    best_minutes = 0
    for entry in daily:
        if entry.minutes > best_minutes:
            best_minutes = entry.minutes
            most_productive = entry.day

    return PeriodReport(
        period=period,
        total_sessions=len(in_period),
        total_minutes=sum(s.duration_minutes for s in in_period),
        average_sessions_per_day=len(in_period) / period.days,
        most_productive_day=most_productive,
        daily=daily
    )
