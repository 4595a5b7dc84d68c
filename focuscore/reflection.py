"""
Post-focus reflection flow.

After a focus countdown completes the user is offered one reflection
prompt. The text is sent to the feedback service and both are saved as a
Reflection for today's date. A failed feedback call never blocks the save.
"""

import calendar
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import date
from typing import Callable, List, Optional

from loguru import logger
from PySide6.QtCore import QObject, Signal

from .errors import FeedbackServiceError, ReflectionValidationError, StorageError
from .feedback import FeedbackClient
from .models import CompletedEvent, Reflection, SessionMode
from .storage import Storage


FALLBACK_FEEDBACK = "Great effort! Keep up the good work!"


class ReflectionFlow(QObject):
    """
    Signals:
        reflection_requested: Emitted with today's date after a focus completion
        reflection_saved: Emitted with the stored Reflection
        save_failed: Emitted with the error text when the store refuses a reflection
    """

    reflection_requested = Signal(object)  # date
    reflection_saved = Signal(Reflection)
    save_failed = Signal(str)

    def __init__(
        self,
        storage: Storage,
        client: FeedbackClient,
        executor: Optional[Executor] = None,
        today: Callable[[], date] = date.today,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.storage = storage
        self.client = client
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="reflection")
        self._today = today
        self._pending = False

    @property
    def pending(self) -> bool:
        """True while a prompt offered after a focus completion is open."""
        return self._pending

    def on_completed(self, event: CompletedEvent):
        """Slot for TimerEngine.session_completed. Breaks are ignored."""
        if event.mode is not SessionMode.FOCUS:
            return
        self._pending = True
        self.reflection_requested.emit(self._today())

    def dismiss(self):
        self._pending = False

    def request_feedback(self, reflection_text: str) -> str:
        """
        Ask the feedback service about the reflection.

        Returns:
            The service's feedback, or FALLBACK_FEEDBACK if the call failed.

        Raises:
            ReflectionValidationError: If the text is blank.
        """
        text = self._validate(reflection_text)
        try:
            return self.client.get_feedback(text)
        except FeedbackServiceError as e:
            logger.warning("Using fallback feedback: {}", e)
            return FALLBACK_FEEDBACK

    def save(self, reflection_text: str, feedback: str) -> Optional[Reflection]:
        """
        Persist the reflection for today and close the prompt.

        Returns:
            The stored Reflection, or None if the store refused it. The
            prompt stays open in that case.
        """
        reflection = Reflection(
            reflection_text=self._validate(reflection_text),
            feedback=feedback,
            session_date=self._today()
        )
        try:
            self.storage.save_reflection(reflection)
        except StorageError as e:
            logger.warning("Could not save reflection: {}", e)
            self.save_failed.emit(str(e))
            return None
        self._pending = False
        logger.info("Saved reflection for {}", reflection.session_date.isoformat())
        self.reflection_saved.emit(reflection)
        return reflection

    def submit(self, reflection_text: str) -> Optional[Reflection]:
        """Fetch feedback, then save both."""
        feedback = self.request_feedback(reflection_text)
        return self.save(reflection_text, feedback)

    def submit_async(self, reflection_text: str) -> Future:
        """
        Validate now, then run submit on the worker.

        Raises:
            ReflectionValidationError: If the text is blank.
        """
        self._validate(reflection_text)
        return self._executor.submit(self.submit, reflection_text)

    def reflections_for_month(self, year: int, month: int) -> List[Reflection]:
        """Reflections saved in the given calendar month, newest first."""
        last_day = calendar.monthrange(year, month)[1]
        return self.storage.get_reflections_between(
            date(year, month, 1), date(year, month, last_day))

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _validate(reflection_text: str) -> str:
        text = (reflection_text or "").strip()
        if not text:
            raise ReflectionValidationError("Reflection text is required")
        return text
