#!/usr/bin/env python3
"""
Focus Core - headless console runner.

Runs one countdown on a Qt event loop, records it, and prints today's
focus summary and goal progress when it completes.

Usage:
    pip install -e .
    python main.py [focus|break] [task label]
"""

import sys
import signal

from loguru import logger
from PySide6.QtCore import QCoreApplication

from focuscore import FocusApp, SessionMode
from focuscore.config import load_config
from focuscore.logging_setup import setup_logging


def setup_exception_handling():
    """Log unhandled exceptions before the default hook prints them."""
    def exception_hook(exctype, value, traceback):
        logger.opt(exception=(exctype, value, traceback)).error(
            "Unhandled exception: {}: {}", exctype.__name__, value)

    sys.excepthook = exception_hook


def setup_signal_handlers(app: QCoreApplication):
    """Set up signal handlers for graceful shutdown."""
    def signal_handler(signum, frame):
        logger.info("Received signal {}, shutting down...", signum)
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def print_summary(focus_app: FocusApp):
    analytics = focus_app.analytics()
    print(f"Today: {analytics.total_focus_time} min over {analytics.sessions_completed} sessions")
    for entry in analytics.hourly_distribution:
        if entry.focus_minutes:
            print(f"  {entry.hour:02d}:00  {entry.focus_minutes:3d} min  {entry.intensity:3d}%")
    for goal in focus_app.goal_progress():
        print(f"  {goal.goal.period.value} goal: {goal.progress}/{goal.goal.target_sessions}"
              f" ({goal.percentage:.0f}%)")


def main():
    """Main entry point for the console runner."""
    config = load_config()
    setup_logging(config.log_level, config.log_file)
    setup_exception_handling()

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Focus Core")
    setup_signal_handlers(app)

    mode = SessionMode(sys.argv[1]) if len(sys.argv) > 1 else SessionMode.FOCUS

    focus_app = FocusApp(config)
    focus_app.load()
    if len(sys.argv) > 2:
        focus_app.set_task_label(" ".join(sys.argv[2:]))

    focus_app.engine.tick.connect(
        lambda ctx: print(f"\r{ctx.mode.value:>5} {ctx.format_remaining()}", end="", flush=True))
    focus_app.engine.session_completed.connect(lambda event: print())
    focus_app.recorder.session_recorded.connect(lambda session: print_summary(focus_app))
    focus_app.reflection.reflection_requested.connect(
        lambda day: logger.info("Reflection prompt opened for {}", day.isoformat()))
    focus_app.engine.running_changed.connect(lambda running: running or app.quit())

    focus_app.engine.switch_mode(mode)
    focus_app.engine.start()

    exit_code = app.exec()
    focus_app.shutdown()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
