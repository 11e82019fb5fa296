"""Service for detecting scheduling conflicts between a slot and existing events."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta

from planner.domain.models import (
    CalendarEvent,
    ConflictResult,
    TimeInterval,
    TimeParseFailure,
)
from planner.exceptions import TimeParseError
from planner.repos.calendar_api import CalendarApiClient
from planner.services.clock import combine_on_day

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_MINUTES = 30


def _is_excluded(
    event: CalendarEvent, exclude_event_id: str | None, exclude_title: str | None
) -> bool:
    if exclude_event_id is not None and event.event_id == exclude_event_id:
        return True
    return exclude_title is not None and event.title == exclude_title


def find_conflicts(
    target: TimeInterval,
    existing_events: Iterable[CalendarEvent] | None,
    *,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    exclude_event_id: str | None = None,
    exclude_title: str | None = None,
) -> ConflictResult:
    """Return the existing events that come within *buffer_minutes* of *target*.

    Overlap rule: conflict if buffered.start < event.end AND buffered.end > event.start,
    where buffered is *target* widened by the buffer on both sides.
    Exact boundary touches are NOT considered conflicts.

    Event clock times are placed on the target's civil day. Events whose time
    text does not parse are left out and reported in ``skipped``.
    """
    if buffer_minutes < 0:
        raise ValueError("buffer_minutes must be non-negative")

    buffered = target.buffered(buffer_minutes)
    conflicting: list[CalendarEvent] = []
    skipped: list[TimeParseFailure] = []

    for event in existing_events or ():
        if _is_excluded(event, exclude_event_id, exclude_title):
            continue

        try:
            event_start = combine_on_day(target.day, event.start_time, target.start.tzinfo)
            event_end = combine_on_day(target.day, event.end_time, target.start.tzinfo)
        except TimeParseError as exc:
            logger.warning("Skipping %r: %s", event.title, exc)
            skipped.append(
                TimeParseFailure(
                    event_id=event.event_id,
                    title=event.title,
                    raw=exc.raw,
                    reason=exc.reason,
                )
            )
            continue

        # "11:00 PM" - "12:30 AM" runs past midnight
        if event_end < event_start:
            event_end += timedelta(days=1)

        if buffered.overlaps(event_start, event_end):
            logger.info(
                "Conflict with %r (%s - %s)", event.title, event.start_time, event.end_time
            )
            conflicting.append(event)

    logger.info(
        "Slot %s - %s: %d conflict(s)",
        target.start.isoformat(),
        target.end.isoformat(),
        len(conflicting),
    )
    return ConflictResult(
        has_conflict=bool(conflicting),
        conflicting_events=conflicting,
        skipped=skipped,
    )


def check_time_slot(
    calendar_api: CalendarApiClient,
    target: TimeInterval,
    access_token: str,
    *,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    exclude_event_id: str | None = None,
    exclude_title: str | None = None,
) -> ConflictResult:
    """Fetch the events on the target's day and check the slot against them.

    ``CalendarApiError`` from the fetch propagates to the caller.
    """
    events = calendar_api.find_events_by_date(target.day, access_token)
    return find_conflicts(
        target,
        events,
        buffer_minutes=buffer_minutes,
        exclude_event_id=exclude_event_id,
        exclude_title=exclude_title,
    )
