"""Shared fixtures for the focus core tests."""

from concurrent.futures import Executor, Future
from datetime import datetime

import pytest
from loguru import logger
from PySide6.QtCore import QCoreApplication

from focuscore.models import Session, SessionMode
from focuscore.storage import Storage


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


def make_session(start: datetime, minutes: int, mode: SessionMode = SessionMode.FOCUS,
                 seconds: int = 0) -> Session:
    """Build a session starting at a local datetime."""
    start_ts = int(start.timestamp())
    return Session(mode=mode, start_ts=start_ts, end_ts=start_ts + minutes * 60 + seconds)


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """QTimer needs a core application instance; the event loop is never run."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 14, 9, 0, 0).timestamp())


@pytest.fixture
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def storage(tmp_path) -> Storage:
    return Storage(str(tmp_path / "focus.db"))


@pytest.fixture
def log_messages():
    """Capture loguru output as a list of formatted messages."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
