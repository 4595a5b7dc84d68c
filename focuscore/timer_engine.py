"""
Timer engine for the focus core.
Drives the countdown state machine from a one-second Qt tick source and
publishes every change as a Qt signal.
"""

import time
from typing import Callable, Optional

from loguru import logger
from PySide6.QtCore import QObject, QTimer, Signal

from . import timer_state
from .models import CompletedEvent, SessionMode, TimerContext


Clock = Callable[[], float]


class TimerEngine(QObject):
    """
    Owns a single TimerContext and the QTimer that ticks it.

    All commands and ticks run on the thread that owns the engine, so
    every transition is applied in order without locking.

    Signals:
        tick: Emitted after every decrement with the current TimerContext
        mode_changed: Emitted when the mode changes (old_mode, new_mode)
        running_changed: Emitted when the timer starts or stops
        session_completed: Emitted exactly once per countdown reaching zero
    """

    # Signals
    tick = Signal(TimerContext)
    mode_changed = Signal(SessionMode, SessionMode)  # old_mode, new_mode
    running_changed = Signal(bool)
    session_completed = Signal(CompletedEvent)

    TICK_INTERVAL_MS = 1000

    def __init__(self, clock: Optional[Clock] = None, parent: Optional[QObject] = None):
        """
        Initialize the timer engine.

        Args:
            clock: Returns the current Unix time in seconds. Defaults to time.time.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)

        self._clock = clock or time.time
        self._context = TimerContext()

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(self.TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

    @property
    def context(self) -> TimerContext:
        """Get current timer context."""
        return self._context

    @property
    def mode(self) -> SessionMode:
        return self._context.mode

    @property
    def is_running(self) -> bool:
        return self._context.running

    @property
    def remaining_seconds(self) -> int:
        return self._context.remaining_seconds

    def start(self):
        """Start or resume the countdown. No-op if already running."""
        if not timer_state.start(self._context, self._clock()):
            return

        self._qt_timer.start()
        logger.debug("Timer started in {} mode with {}s remaining",
                     self._context.mode.value, self._context.remaining_seconds)
        self.running_changed.emit(True)
        self.tick.emit(self._context)

    def pause(self):
        """Pause the countdown, keeping the remaining time."""
        if not timer_state.pause(self._context):
            return

        self._qt_timer.stop()
        self.running_changed.emit(False)
        self.tick.emit(self._context)

    def toggle(self):
        """Start when stopped, pause when running."""
        if self.is_running:
            self.pause()
        else:
            self.start()

    def reset(self):
        """Stop and restore the full duration of the current mode."""
        was_running = self._context.running
        self._qt_timer.stop()
        timer_state.reset(self._context)

        if was_running:
            self.running_changed.emit(False)
        self.tick.emit(self._context)

    def switch_mode(self, mode: SessionMode):
        """
        Switch to the given mode at full duration.

        Switching while running stops the countdown first; the interrupted
        countdown is discarded and nothing is recorded for it.
        """
        old_mode = self._context.mode
        was_running = self._context.running
        self._qt_timer.stop()
        timer_state.switch_mode(self._context, mode)

        if was_running:
            logger.info("Discarded running {} countdown on mode switch", old_mode.value)
            self.running_changed.emit(False)
        if old_mode is not mode:
            self.mode_changed.emit(old_mode, mode)
        self.tick.emit(self._context)

    def advance(self):
        """
        Apply one tick. Called by the Qt timer once per second; tests may
        call it directly to drive the countdown.
        """
        old_mode = self._context.mode
        event = timer_state.tick(self._context, self._clock())

        if event is None:
            self.tick.emit(self._context)
            return

        self._qt_timer.stop()
        logger.info("{} countdown completed after {}s",
                    event.mode.value.capitalize(), event.actual_duration)
        self.session_completed.emit(event)
        self.mode_changed.emit(old_mode, self._context.mode)
        self.running_changed.emit(False)
        self.tick.emit(self._context)

    def _on_tick(self):
        # A timeout already queued before stop() is dropped here
        if not self._context.running:
            return
        self.advance()

    def cleanup(self):
        """Cleanup resources. Call before application exit."""
        self._qt_timer.stop()
