"""Exception hierarchy for cms-gc-analyze."""

from __future__ import annotations


class GcAnalyzeError(Exception):
    """Base class for every error raised by this package."""


class UnknownEventTypeError(GcAnalyzeError):
    """A line matched the grammar but maps to no log type."""

    def __init__(self, event_type: str, detail: str | None = None) -> None:
        self.event_type = event_type
        self.detail = detail
        super().__init__(
            f"Log type must be specified for event type={event_type!r} detail={detail!r}. "
            "Check the log."
        )


class StatisticsError(GcAnalyzeError, ValueError):
    """A statistic was requested outside of its preconditions."""


class InsufficientDataError(StatisticsError):
    def __init__(self, required: int, actual: int) -> None:
        self.required = required
        self.actual = actual
        super().__init__(f"Not enough data: need at least {required} samples, got {actual}")


class LevelOutOfRangeError(StatisticsError):
    def __init__(self, level: float) -> None:
        self.level = level
        super().__init__(f"Level is out of range (0, 1]: {level}")


class LogReadError(GcAnalyzeError):
    """A GC log could not be opened or read."""
