"""
Application wiring.

Connects the timer engine to its subscribers:

    TimerEngine.session_completed -> SessionRecorder -> SessionLog -> Storage
                                  -> ReflectionFlow (focus only)
                                  -> NotificationManager
    SessionLog.changed -> daily analytics and goal progress

Active goals are cached and re-read from the store only on load and goal
changes, so a log change never queries the store.
"""

from concurrent.futures import Executor
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger
from PySide6.QtCore import QObject, Signal

from .analytics import compute_daily_analytics, compute_period_report
from .config import AppConfig
from .errors import StorageError
from .feedback import FeedbackClient
from .goals import GoalService, evaluate_goals
from .models import FocusAnalytics, Goal, GoalProgress, PeriodReport, ReportPeriod
from .notifications import NotificationManager
from .recorder import SessionLog, SessionRecorder
from .reflection import ReflectionFlow
from .storage import Storage
from .timer_engine import TimerEngine


class FocusApp(QObject):
    """
    Owns one timer and everything derived from it.

    Signals:
        analytics_updated: Emitted with a fresh FocusAnalytics after each log change
        goals_updated: Emitted with the list of GoalProgress after each log or goal change
        store_failed: Emitted with the error text when a store operation fails
    """

    analytics_updated = Signal(FocusAnalytics)
    goals_updated = Signal(object)  # List[GoalProgress]
    store_failed = Signal(str)

    def __init__(
        self,
        config: AppConfig,
        storage: Optional[Storage] = None,
        clock: Optional[Callable[[], float]] = None,
        now: Callable[[], datetime] = datetime.now,
        store_executor: Optional[Executor] = None,
        feedback_executor: Optional[Executor] = None,
        feedback_client: Optional[FeedbackClient] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.config = config
        self._now = now
        self._active_goals: List[Goal] = []

        self.storage = storage or Storage(config.db_path)
        self.settings = self.storage.get_settings()

        self.engine = TimerEngine(clock=clock, parent=self)
        self.log = SessionLog(parent=self)
        self.recorder = SessionRecorder(
            self.storage, self.log,
            task_label=lambda: self.settings.task_label,
            executor=store_executor,
            clock=clock,
            parent=self
        )
        self.goals = GoalService(self.storage)
        self._reload_goals()
        self.reflection = ReflectionFlow(
            self.storage,
            feedback_client or FeedbackClient(config.feedback),
            executor=feedback_executor,
            today=lambda: self._now().date(),
            parent=self
        )
        self.notifications = NotificationManager(parent=self)
        self.notifications.notification_enabled = self.settings.notification_enabled

        self.engine.session_completed.connect(self.recorder.on_completed)
        self.engine.session_completed.connect(self.reflection.on_completed)
        self.engine.session_completed.connect(self.notifications.on_completed)
        self.log.changed.connect(self.refresh)

    def load(self):
        """
        Load recent sessions and active goals from the store; triggers a
        refresh. An unreadable store leaves the log empty.
        """
        self._reload_goals()
        try:
            self.log.load_from_store(self.storage)
        except StorageError as e:
            self._report_store_failure("load sessions", e)
            self.log.replace([])

    def set_task_label(self, label: str):
        self.settings.task_label = label
        try:
            self.storage.save_settings(self.settings)
        except StorageError as e:
            self._report_store_failure("save settings", e)

    def analytics(self) -> FocusAnalytics:
        return compute_daily_analytics(self.log.sessions(), self._now())

    def report(self, period: ReportPeriod) -> PeriodReport:
        return compute_period_report(self.log.sessions(), period, self._now())

    def goal_progress(self) -> List[GoalProgress]:
        """Progress of the cached active goals against the current log."""
        today = self._now().date()
        active = [g for g in self._active_goals if g.end_date >= today]
        return evaluate_goals(active, self.log.sessions())

    def add_goal(self, period, target_sessions) -> Optional[Goal]:
        """
        Create and store a goal.

        Returns:
            The new Goal, or None if the store refused it.

        Raises:
            GoalValidationError: If the period or target is invalid.
        """
        try:
            goal = self.goals.add(period, target_sessions, self._now())
        except StorageError as e:
            self._report_store_failure("save goal", e)
            return None
        self._reload_goals()
        self.goals_updated.emit(self.goal_progress())
        return goal

    def delete_goal(self, goal_id: str) -> bool:
        try:
            deleted = self.goals.delete(goal_id)
        except StorageError as e:
            self._report_store_failure("delete goal", e)
            return False
        if deleted:
            self._reload_goals()
            self.goals_updated.emit(self.goal_progress())
        return deleted

    def refresh(self):
        """Recompute every derived view from the current log."""
        self.analytics_updated.emit(self.analytics())
        self.goals_updated.emit(self.goal_progress())

    def _reload_goals(self):
        try:
            self._active_goals = self.goals.active_goals(self._now().date())
        except StorageError as e:
            self._report_store_failure("load goals", e)

    def _report_store_failure(self, action: str, error: StorageError):
        logger.warning("Could not {}: {}", action, error)
        self.store_failed.emit(f"Could not {action}: {error}")

    def shutdown(self):
        """Stop ticking and let pending store writes and feedback calls finish."""
        self.engine.cleanup()
        self.recorder.shutdown()
        self.reflection.shutdown()
        logger.info("Focus core shut down")
