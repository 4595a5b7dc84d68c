"""
Exception hierarchy for the focus core.
"""


class FocusCoreError(Exception):
    """Base class for all errors raised by the focus core."""


class TimerInvariantError(FocusCoreError):
    """
    A timer transition was requested that the state machine forbids,
    such as ticking while stopped. Indicates a programming error.
    """


class ValidationError(FocusCoreError):
    """User input was rejected before any side effect took place."""


class GoalValidationError(ValidationError):
    """Goal target or period is invalid."""


class ReflectionValidationError(ValidationError):
    """Reflection text is empty."""


class StorageError(FocusCoreError):
    """A store operation failed."""


class FeedbackServiceError(FocusCoreError):
    """The feedback service could not produce a usable response."""
