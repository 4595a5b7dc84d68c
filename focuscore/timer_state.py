"""
Transition functions for the countdown state machine.

States:
    Stopped(mode, remaining)
    Running(mode, remaining, started_at)

Each function takes the owned TimerContext and the current clock reading,
mutates the context in place and never performs I/O. The only event
produced is a CompletedEvent when a tick reaches zero.
"""

import math
from typing import Optional

from .errors import TimerInvariantError
from .models import CompletedEvent, SessionMode, TimerContext


def start(ctx: TimerContext, now: float) -> bool:
    """
    Stopped -> Running. Records the start timestamp.

    Returns:
        True if the timer was started, False if it was already running.
    """
    if ctx.running:
        return False
    if ctx.remaining_seconds <= 0:
        raise TimerInvariantError("Cannot start a countdown with no time remaining")
    ctx.running = True
    ctx.session_start_ts = now
    return True


def tick(ctx: TimerContext, now: float) -> Optional[CompletedEvent]:
    """
    Decrement the countdown by one second.

    When the countdown reaches zero the elapsed wall-clock time since the
    start is measured, the mode flips and the timer stops.

    Returns:
        The CompletedEvent for the finished countdown, or None.
    """
    if not ctx.running or ctx.session_start_ts is None:
        raise TimerInvariantError("tick while stopped")
    if ctx.remaining_seconds <= 0:
        raise TimerInvariantError("tick with no time remaining")

    ctx.remaining_seconds -= 1
    if ctx.remaining_seconds > 0:
        return None

    # Measured, not nominal: pauses and clock drift are reflected here
    actual = max(0, math.floor(now - ctx.session_start_ts))
    event = CompletedEvent(mode=ctx.mode, actual_duration=actual, completed_at=now)
    _stop_in_mode(ctx, ctx.mode.opposite)
    return event


def pause(ctx: TimerContext) -> bool:
    """Running -> Stopped, keeping the remaining time."""
    if not ctx.running:
        return False
    ctx.running = False
    ctx.session_start_ts = None
    return True


def reset(ctx: TimerContext):
    """Stop and restore the full duration of the current mode."""
    _stop_in_mode(ctx, ctx.mode)


def switch_mode(ctx: TimerContext, mode: SessionMode):
    """
    Stop and switch to the given mode at full duration.
    A running countdown is discarded without producing a CompletedEvent.
    """
    _stop_in_mode(ctx, mode)


def _stop_in_mode(ctx: TimerContext, mode: SessionMode):
    ctx.mode = mode
    ctx.remaining_seconds = mode.total_seconds
    ctx.running = False
    ctx.session_start_ts = None
