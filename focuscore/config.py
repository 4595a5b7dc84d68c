"""
Runtime configuration read from environment variables.
Timer durations are fixed constants in models and are not configurable.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class FeedbackConfig:
    """Feedback service endpoint."""
    url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = 15.0

    @property
    def enabled(self) -> bool:
        return bool(self.url)


@dataclass
class AppConfig:
    """Top-level configuration."""
    db_path: Optional[str] = None  # None uses the app data directory
    feedback: FeedbackConfig = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.feedback is None:
            self.feedback = FeedbackConfig()


def load_config(environ=None) -> AppConfig:
    """
    Build the configuration from FOCUSCORE_* environment variables.

    Raises:
        ValueError: If a numeric variable cannot be parsed or is not positive.
    """
    env = os.environ if environ is None else environ

    timeout_raw = env.get('FOCUSCORE_FEEDBACK_TIMEOUT', '15')
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(f"FOCUSCORE_FEEDBACK_TIMEOUT must be a number, got {timeout_raw!r}") from None
    if timeout <= 0:
        raise ValueError("FOCUSCORE_FEEDBACK_TIMEOUT must be positive")

    return AppConfig(
        db_path=env.get('FOCUSCORE_DB_PATH') or None,
        feedback=FeedbackConfig(
            url=env.get('FOCUSCORE_FEEDBACK_URL') or None,
            api_key=env.get('FOCUSCORE_FEEDBACK_API_KEY') or None,
            timeout_seconds=timeout
        ),
        log_level=env.get('FOCUSCORE_LOG_LEVEL', 'INFO').upper(),
        log_file=env.get('FOCUSCORE_LOG_FILE') or None
    )
