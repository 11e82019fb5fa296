"""Domain models for the calendar planner."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, field_serializer, model_validator

WIRE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _check_ordered(start: datetime, end: datetime, message: str) -> None:
    if (start.tzinfo is None) != (end.tzinfo is None):
        raise ValueError("start and end must both be timezone-aware or both naive")
    if end <= start:
        raise ValueError(message)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class TimeInterval(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _end_after_start(self) -> TimeInterval:
        _check_ordered(self.start, self.end, "end must be after start")
        return self

    @property
    def day(self) -> date:
        """Civil date the interval starts on."""
        return self.start.date()

    def buffered(self, minutes: int) -> TimeInterval:
        """Return the interval widened by *minutes* on both ends."""
        pad = timedelta(minutes=minutes)
        return TimeInterval(start=self.start - pad, end=self.end + pad)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Strict overlap: touching endpoints do not count."""
        return self.start < end and self.end > start


class CalendarEvent(BaseModel):
    """An event as returned by the remote calendar service.

    ``start_time`` and ``end_time`` are 12-hour clock text (``"2:30 PM"``);
    the civil date is implied by the day the event was listed for.
    """

    title: str
    start_time: str | None = None
    end_time: str | None = None
    calendar: str | None = None
    calendar_id: str | None = None
    event_id: str | None = None
    description: str | None = None
    location: str | None = None
    status: str | None = None


class TimeParseFailure(BaseModel):
    event_id: str | None = None
    title: str
    raw: str
    reason: str


class ConflictResult(BaseModel):
    has_conflict: bool = False
    conflicting_events: list[CalendarEvent] = Field(default_factory=list)
    skipped: list[TimeParseFailure] = Field(default_factory=list)


class ProposedEvent(BaseModel):
    title: str
    start_time: datetime
    end_time: datetime
    notes: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ProposedEvent:
        _check_ordered(self.start_time, self.end_time, "end_time must be after start_time")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)


class RescheduleProposal(BaseModel):
    title: str
    current_start: datetime
    new_interval: TimeInterval


class RescheduleResult(BaseModel):
    success: bool
    new_time: str | None = None
    message: str


# ---------------------------------------------------------------------------
# Calendar service payloads
# ---------------------------------------------------------------------------


class CreateEventData(BaseModel):
    title: str
    start_datetime: datetime
    end_datetime: datetime
    description: str | None = None
    calendar_id: str | None = None

    @field_serializer("start_datetime", "end_datetime")
    def _wire_datetime(self, value: datetime) -> str:
        return value.strftime(WIRE_DATETIME_FORMAT)


class MoveEventData(BaseModel):
    title: str
    current_start_datetime: datetime
    new_start_datetime: datetime
    new_end_datetime: datetime
    calendar_id: str | None = None

    @field_serializer(
        "current_start_datetime", "new_start_datetime", "new_end_datetime"
    )
    def _wire_datetime(self, value: datetime) -> str:
        return value.strftime(WIRE_DATETIME_FORMAT)


class ApiResponse(BaseModel):
    message: str = ""
    data: Any = None
    events: list[CalendarEvent] | None = None
    total_events: int | None = None


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class ConflictCheckRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    events: list[CalendarEvent] = Field(default_factory=list)
    exclude_event_id: str | None = None
    exclude_title: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> ConflictCheckRequest:
        _check_ordered(self.start_time, self.end_time, "end_time must be after start_time")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)


class SlotCheckRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    exclude_event_id: str | None = None
    exclude_title: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> SlotCheckRequest:
        _check_ordered(self.start_time, self.end_time, "end_time must be after start_time")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)


class RescheduleRequest(BaseModel):
    title: str
    current_start_time: datetime
    calendar_id: str | None = None


class PlanRequest(BaseModel):
    text: str


class PlanResponse(BaseModel):
    proposed_event: ProposedEvent
    conflicts: ConflictResult


class TranscriptionResponse(BaseModel):
    text: str
