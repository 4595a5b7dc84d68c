"""
Session recording.

SessionRecorder turns CompletedEvents into Session records, appends them to
the in-memory SessionLog and persists them on a worker so a slow store
never holds up the timer.
"""

import math
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from loguru import logger
from PySide6.QtCore import QObject, Signal

from .models import DEFAULT_TASK_LABEL, CompletedEvent, Session, SessionMode
from .storage import Storage


class SessionLog(QObject):
    """
    Append-only, in-memory list of completed sessions, oldest first.
    Emits changed after every mutation so derived views can recompute.
    """

    changed = Signal()

    DEFAULT_LOAD_LIMIT = 100

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._sessions: List[Session] = []

    def __len__(self) -> int:
        return len(self._sessions)

    def sessions(self) -> List[Session]:
        """Snapshot of the log, oldest first."""
        return list(self._sessions)

    def append(self, session: Session):
        self._sessions.append(session)
        self.changed.emit()

    def replace(self, sessions: List[Session]):
        """Replace the log contents, keeping them in completion order."""
        self._sessions = sorted(sessions, key=lambda s: s.end_ts)
        self.changed.emit()

    def load_from_store(self, storage: Storage, limit: int = DEFAULT_LOAD_LIMIT):
        """Replace the log with the most recent sessions in the store."""
        self.replace(storage.get_sessions(limit=limit))
        logger.info("Loaded {} sessions from store", len(self._sessions))


class SessionRecorder(QObject):
    """
    Records completed countdowns.

    The log entry is appended before the store insert is submitted, and
    is kept even when the insert fails.

    Signals:
        session_recorded: Emitted with the Session once it is in the log
        persist_failed: Emitted with the Session and error text on store failure
    """

    session_recorded = Signal(Session)
    persist_failed = Signal(Session, str)

    def __init__(
        self,
        storage: Storage,
        log: SessionLog,
        task_label: Callable[[], str] = lambda: "",
        executor: Optional[Executor] = None,
        clock: Optional[Callable[[], float]] = None,
        parent: Optional[QObject] = None
    ):
        """
        Args:
            storage: Durable store for sessions.
            log: In-memory session log.
            task_label: Returns the label of the current task.
            executor: Runs store inserts. A single worker keeps insert order.
            clock: Returns the current Unix time in seconds.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)
        self.storage = storage
        self.log = log
        self._task_label = task_label
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="session-store")
        self._clock = clock or time.time
        self._last_event: Optional[CompletedEvent] = None

    def on_completed(self, event: CompletedEvent):
        """Slot for TimerEngine.session_completed."""
        self.record(event.mode, event.actual_duration, event=event)

    def record(
        self,
        mode: SessionMode,
        actual_duration: int,
        task_label: Optional[str] = None,
        event: Optional[CompletedEvent] = None
    ) -> Optional[Future]:
        """
        Build a Session ending now and lasting actual_duration seconds.

        Returns:
            Future of the store insert, or None if the event was already recorded.
        """
        if event is not None:
            if event is self._last_event:
                logger.warning("Ignoring duplicate completion event {}", event)
                return None
            self._last_event = event

        if actual_duration < 0:
            raise ValueError("actual_duration must be non-negative")

        label = task_label if task_label is not None else self._task_label()
        end_ts = math.floor(event.completed_at if event is not None else self._clock())
        session = Session(
            mode=mode,
            start_ts=end_ts - actual_duration,
            end_ts=end_ts,
            task_label=label.strip() or DEFAULT_TASK_LABEL
        )

        self.log.append(session)
        self.session_recorded.emit(session)

        future = self._executor.submit(self.storage.create_session, session)
        future.add_done_callback(lambda f: self._on_persisted(session, f))
        return future

    def _on_persisted(self, session: Session, future: Future):
        error = future.exception()
        if error is None:
            logger.debug("Persisted session {}", session.id)
            return
        logger.warning("Could not persist session {}; keeping it locally: {}",
                       session.id, error)
        self.persist_failed.emit(session, str(error))

    def shutdown(self, wait: bool = True):
        """Let in-flight inserts finish, then release the worker."""
        self._executor.shutdown(wait=wait)
