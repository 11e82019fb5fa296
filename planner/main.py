"""FastAPI application: entry point for the calendar planner service."""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile

from planner.config import PlannerConfig
from planner.domain.models import (
    ApiResponse,
    CalendarEvent,
    ConflictCheckRequest,
    ConflictResult,
    CreateEventData,
    MoveEventData,
    PlanRequest,
    PlanResponse,
    RescheduleRequest,
    RescheduleResult,
    SlotCheckRequest,
    TranscriptionResponse,
)
from planner.exceptions import CalendarApiError, PlannerError, TranscriptionError
from planner.repos.calendar_api import CalendarApiClient
from planner.services.conflicts import check_time_slot, find_conflicts
from planner.services.parser import parse_plan_request
from planner.services.reschedule import reschedule_to_next_day
from planner.services.transcription import transcribe_audio

config = PlannerConfig.from_env()
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Calendar Planner Service")

# ── Singletons (created at import time for simplicity) ────────────────
calendar_api = CalendarApiClient(config)


def access_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the caller's calendar token from ``Authorization: Bearer ...``."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Expected a Bearer token")
    return token.strip()


def _upstream_error(exc: CalendarApiError) -> HTTPException:
    logger.warning("Calendar service error: %s", exc.message)
    return HTTPException(status_code=502, detail=exc.message)


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/conflicts/check", response_model=ConflictResult)
def check_conflicts(payload: ConflictCheckRequest) -> ConflictResult:
    """Check a slot against a caller-supplied list of the day's events."""
    return find_conflicts(
        payload.interval,
        payload.events,
        buffer_minutes=config.buffer_minutes,
        exclude_event_id=payload.exclude_event_id,
        exclude_title=payload.exclude_title,
    )


@app.post("/conflicts/check-slot", response_model=ConflictResult)
def check_slot(
    payload: SlotCheckRequest, token: str = Depends(access_token)
) -> ConflictResult:
    """Fetch the slot's day from the calendar service and check for conflicts."""
    try:
        return check_time_slot(
            calendar_api,
            payload.interval,
            token,
            buffer_minutes=config.buffer_minutes,
            exclude_event_id=payload.exclude_event_id,
            exclude_title=payload.exclude_title,
        )
    except CalendarApiError as exc:
        raise _upstream_error(exc) from exc


@app.get("/events", response_model=list[CalendarEvent])
def list_events(
    day: date | None = Query(default=None, alias="date"),
    token: str = Depends(access_token),
) -> list[CalendarEvent]:
    """Return the events on the given date (today when omitted)."""
    try:
        if day is None:
            return calendar_api.get_todays_events(token)
        return calendar_api.find_events_by_date(day, token)
    except CalendarApiError as exc:
        raise _upstream_error(exc) from exc


@app.post("/events", response_model=ApiResponse)
def create_event(
    payload: CreateEventData, token: str = Depends(access_token)
) -> ApiResponse:
    try:
        return calendar_api.create_event(payload, token)
    except CalendarApiError as exc:
        raise _upstream_error(exc) from exc


@app.post("/events/move", response_model=ApiResponse)
def move_event(payload: MoveEventData, token: str = Depends(access_token)) -> ApiResponse:
    try:
        return calendar_api.move_event(payload, token)
    except CalendarApiError as exc:
        raise _upstream_error(exc) from exc


@app.post("/events/reschedule", response_model=RescheduleResult)
def reschedule_event(
    payload: RescheduleRequest, token: str = Depends(access_token)
) -> RescheduleResult:
    """Move an event to the same time tomorrow.

    The new slot is not checked for conflicts.
    """
    return reschedule_to_next_day(
        calendar_api,
        payload.title,
        payload.current_start_time,
        token,
        duration_minutes=config.event_duration_minutes,
        calendar_id=payload.calendar_id,
    )


@app.post("/transcribe", response_model=TranscriptionResponse)
def transcribe(file: UploadFile = File(...)) -> TranscriptionResponse:
    """Transcribe an uploaded voice recording."""
    try:
        text = transcribe_audio(
            file.file,
            config=config,
            filename=file.filename or "speech.m4a",
            content_type=file.content_type or "audio/m4a",
        )
    except TranscriptionError as exc:
        raise HTTPException(status_code=exc.status_code or 502, detail=exc.message) from exc
    return TranscriptionResponse(text=text)


@app.post("/plan", response_model=PlanResponse)
def plan_event(payload: PlanRequest, token: str = Depends(access_token)) -> PlanResponse:
    """Turn a free-text request into a proposed event and check its slot."""
    try:
        proposed = parse_plan_request(payload.text, datetime.now(), config=config)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except PlannerError as exc:
        raise HTTPException(status_code=exc.status_code or 502, detail=exc.message) from exc

    try:
        conflicts = check_time_slot(
            calendar_api,
            proposed.interval,
            token,
            buffer_minutes=config.buffer_minutes,
        )
    except CalendarApiError as exc:
        raise _upstream_error(exc) from exc

    return PlanResponse(proposed_event=proposed, conflicts=conflicts)
