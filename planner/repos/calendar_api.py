"""HTTP client for the remote calendar service."""

from __future__ import annotations

import logging
from datetime import date, datetime

import httpx
from pydantic import ValidationError

from planner.config import PlannerConfig
from planner.domain.models import (
    ApiResponse,
    CalendarEvent,
    CreateEventData,
    MoveEventData,
)
from planner.exceptions import CalendarApiError

logger = logging.getLogger(__name__)


def local_date_string(now: datetime | None = None) -> str:
    """Return the local civil date as ``YYYY-MM-DD``."""
    return (now or datetime.now()).date().isoformat()


class CalendarApiClient:
    """Thin wrapper around the calendar service's JSON endpoints.

    Every call carries the caller's access token as a bearer token. Requests
    are not retried.
    """

    def __init__(
        self,
        config: PlannerConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, payload: dict, access_token: str, failure: str) -> dict:
        logger.debug("POST %s%s", self.config.base_url, path)
        try:
            response = self._client.post(
                path,
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("%s: %s", failure, exc)
            raise CalendarApiError(f"{failure}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            detail = body.get("detail") if isinstance(body, dict) else None
            message = str(detail) if detail else failure
            logger.error("%s (HTTP %d): %s", path, response.status_code, message)
            raise CalendarApiError(message, status_code=response.status_code)

        if not isinstance(body, dict):
            raise CalendarApiError(f"{failure}: malformed response body")
        return body

    @staticmethod
    def _parse(body: dict, failure: str) -> ApiResponse:
        try:
            return ApiResponse.model_validate(body)
        except ValidationError as exc:
            logger.error("%s: malformed response body: %s", failure, exc)
            raise CalendarApiError(f"{failure}: malformed response body") from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def find_events_by_date(
        self, day: date | str, access_token: str
    ) -> list[CalendarEvent]:
        """Return all events on *day* across the user's calendars."""
        day_str = day.isoformat() if isinstance(day, date) else day
        body = self._post(
            "/events/find", {"date": day_str}, access_token, "Failed to find events"
        )
        result = self._parse(body, "Failed to find events")
        events = result.events or []
        logger.info("Found %d events on %s", len(events), day_str)
        return events

    def create_event(self, data: CreateEventData, access_token: str) -> ApiResponse:
        body = self._post(
            "/event/create",
            data.model_dump(mode="json", exclude_none=True),
            access_token,
            "Failed to create event",
        )
        return self._parse(body, "Failed to create event")

    def move_event(self, data: MoveEventData, access_token: str) -> ApiResponse:
        body = self._post(
            "/event/move",
            data.model_dump(mode="json", exclude_none=True),
            access_token,
            "Failed to move event",
        )
        return self._parse(body, "Failed to move event")

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    def get_todays_events(
        self, access_token: str, today: datetime | None = None
    ) -> list[CalendarEvent]:
        return self.find_events_by_date(local_date_string(today), access_token)

    def create_simple_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        access_token: str,
        description: str | None = None,
    ) -> ApiResponse:
        return self.create_event(
            CreateEventData(
                title=title,
                start_datetime=start,
                end_datetime=end,
                description=description or "",
            ),
            access_token,
        )
