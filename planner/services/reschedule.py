"""Service for moving an event to the same time on the next day."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from planner.domain.models import (
    MoveEventData,
    RescheduleProposal,
    RescheduleResult,
    TimeInterval,
)
from planner.exceptions import CalendarApiError
from planner.repos.calendar_api import CalendarApiClient
from planner.services.clock import format_clock_time

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60


def propose_next_day(
    title: str,
    current_start: datetime,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> RescheduleProposal:
    """Propose a slot exactly 24 elapsed hours after *current_start*.

    The new slot always lasts *duration_minutes*, whatever the original
    length was. It is not checked against the next day's events.
    """
    if current_start.tzinfo is None:
        new_start = current_start + timedelta(hours=24)
    else:
        # Absolute 24 hours, so a DST change shifts the wall-clock time
        new_start = (
            current_start.astimezone(timezone.utc) + timedelta(hours=24)
        ).astimezone(current_start.tzinfo)
    return RescheduleProposal(
        title=title,
        current_start=current_start,
        new_interval=TimeInterval(
            start=new_start, end=new_start + timedelta(minutes=duration_minutes)
        ),
    )


def reschedule_to_next_day(
    calendar_api: CalendarApiClient,
    title: str,
    current_start: datetime,
    access_token: str,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
    calendar_id: str | None = None,
) -> RescheduleResult:
    """Move the event to tomorrow at the same time through the calendar service."""
    proposal = propose_next_day(title, current_start, duration_minutes)
    logger.info(
        "Rescheduling %r from %s to %s",
        title,
        current_start.isoformat(),
        proposal.new_interval.start.isoformat(),
    )

    try:
        calendar_api.move_event(
            MoveEventData(
                title=title,
                current_start_datetime=current_start,
                new_start_datetime=proposal.new_interval.start,
                new_end_datetime=proposal.new_interval.end,
                calendar_id=calendar_id,
            ),
            access_token,
        )
    except CalendarApiError as exc:
        logger.error("Reschedule of %r failed: %s", title, exc.message)
        return RescheduleResult(
            success=False, message=f"Reschedule failed: {exc.message}"
        )

    new_time = format_clock_time(proposal.new_interval.start)
    return RescheduleResult(
        success=True,
        new_time=new_time,
        message=f"Moved to tomorrow at {new_time}",
    )
