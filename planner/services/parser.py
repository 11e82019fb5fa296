"""Service for turning a spoken or typed planning request into a ProposedEvent."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta

import dateparser

from planner.config import PlannerConfig
from planner.domain.models import ProposedEvent
from planner.exceptions import PlannerError

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """\
You are a calendar planning assistant. Given a short request such as \
"schedule a run tomorrow at 7am for 45 minutes", extract the following \
fields as JSON:

{
  "title": "<concise event title, without time details>",
  "start_time": "<raw time substring from the text, or null if none>",
  "end_time": "<raw end-time substring from the text, or null if none>"
}

Rules:
- For title, extract ONLY what the event is about (e.g. "Morning run", \
"Lunch with Sam"). Strip time phrases.
- For start_time and end_time, extract the EXACT substring from the input \
that describes the time. Do NOT interpret or reformat it.
- Return null for any field that is not present in the text.
- Respond with ONLY the JSON object, no other text.
"""


def _extract_with_llm(text: str, config: PlannerConfig) -> dict:
    """Call OpenAI to extract structured fields from free text."""
    from openai import OpenAI, OpenAIError

    if not config.openai_api_key:
        raise PlannerError("OPENAI_API_KEY is not set", status_code=503)

    client = OpenAI(api_key=config.openai_api_key)
    try:
        response = client.chat.completions.create(
            model=config.planner_model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            temperature=0,
            response_format={"type": "json_object"},
        )
    except OpenAIError as exc:
        logger.error("Plan extraction failed: %s", exc)
        raise PlannerError(f"Plan extraction failed: {exc}", status_code=502) from exc
    return json.loads(response.choices[0].message.content)


def _parse_time(raw: str | None, now: datetime) -> datetime | None:
    """Parse a raw time string using dateparser, returning a naive local datetime."""
    if not raw:
        return None
    settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": now.replace(tzinfo=None),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    return dateparser.parse(raw, settings=settings)


def parse_plan_request(
    text: str, now: datetime, *, config: PlannerConfig
) -> ProposedEvent:
    """Parse free text into a ProposedEvent.

    Uses OpenAI to pull out the title and raw time phrases, then resolves the
    times with ``dateparser``. Raises ``ValueError`` if no date/time is found.
    """
    extracted = _extract_with_llm(text, config)

    start_time = _parse_time(extracted.get("start_time"), now)
    if start_time is None:
        raise ValueError("No date/time found in text")

    end_time = _parse_time(extracted.get("end_time"), now)
    if end_time is None or end_time <= start_time:
        end_time = start_time + timedelta(minutes=config.event_duration_minutes)

    title = extracted.get("title") or text
    logger.info("Planned %r at %s", title, start_time.isoformat())

    return ProposedEvent(
        title=title,
        start_time=start_time,
        end_time=end_time,
        notes=text,
    )
