"""Runtime configuration for the planner service."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

# Environment variable -> PlannerConfig field
_ENV_FIELDS = {
    "PLANNER_BASE_URL": "base_url",
    "PLANNER_BUFFER_MINUTES": "buffer_minutes",
    "PLANNER_EVENT_DURATION_MINUTES": "event_duration_minutes",
    "PLANNER_REQUEST_TIMEOUT": "request_timeout",
    "OPENAI_API_KEY": "openai_api_key",
    "PLANNER_TRANSCRIPTION_MODEL": "transcription_model",
    "PLANNER_LLM_MODEL": "planner_model",
    "PLANNER_LOG_LEVEL": "log_level",
}


class PlannerConfig(BaseModel):
    """Configuration for the planner service.

    Attributes:
        base_url: Base URL of the remote calendar service.
        buffer_minutes: Minimum spacing kept around a slot when checking conflicts.
        event_duration_minutes: Duration given to events that have no explicit end.
        request_timeout: Timeout in seconds for calls to the calendar service.
        openai_api_key: Key used for transcription and planning. Read from the
            environment, never hard-coded.
        transcription_model: OpenAI model used for speech-to-text.
        planner_model: OpenAI model used to extract events from free text.
        log_level: Root logging level.
    """

    base_url: str = "http://localhost:8000"
    buffer_minutes: int = Field(default=30, ge=0)
    event_duration_minutes: int = Field(default=60, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    openai_api_key: str | None = Field(default=None, repr=False)
    transcription_model: str = "whisper-1"
    planner_model: str = "gpt-4o-mini"
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PlannerConfig:
        """Build a config from ``PLANNER_*`` / ``OPENAI_API_KEY`` variables.

        Unset or empty variables fall back to the field defaults.
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var]
            for var, field in _ENV_FIELDS.items()
            if environ.get(var)
        }
        return cls(**values)
