# Focus timer, session log, analytics and goal tracking
from .app import FocusApp
from .models import SessionMode, GoalPeriod, ReportPeriod
from .timer_engine import TimerEngine

__all__ = ['FocusApp', 'TimerEngine', 'SessionMode', 'GoalPeriod', 'ReportPeriod']
