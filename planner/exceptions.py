"""Exceptions raised by the planner services."""

from __future__ import annotations


class PlannerError(Exception):
    """Base exception for all planner errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class CalendarApiError(PlannerError):
    """Raised when the remote calendar service rejects a request or is unreachable."""


class TranscriptionError(PlannerError):
    """Raised when audio cannot be transcribed."""


class TimeParseError(PlannerError, ValueError):
    """Raised when clock text such as ``"2:30 PM"`` cannot be parsed."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid clock time {raw!r}: {reason}")
