"""Service for turning recorded speech into text."""

from __future__ import annotations

import logging
from typing import IO

from planner.config import PlannerConfig
from planner.exceptions import TranscriptionError

logger = logging.getLogger(__name__)


def _create_client(api_key: str):
    from openai import OpenAI

    return OpenAI(api_key=api_key)


def transcribe_audio(
    audio: bytes | IO[bytes],
    *,
    config: PlannerConfig,
    filename: str = "speech.m4a",
    content_type: str = "audio/m4a",
) -> str:
    """Send *audio* to the OpenAI transcription endpoint and return the text.

    Raises ``TranscriptionError`` if no API key is configured or the call fails.
    """
    if not config.openai_api_key:
        raise TranscriptionError(
            "Transcription failed: OPENAI_API_KEY is not set", status_code=503
        )

    from openai import OpenAIError

    client = _create_client(config.openai_api_key)
    logger.info("Transcribing %s with %s", filename, config.transcription_model)
    try:
        result = client.audio.transcriptions.create(
            model=config.transcription_model,
            file=(filename, audio, content_type),
        )
    except OpenAIError as exc:
        logger.error("Transcription of %s failed: %s", filename, exc)
        raise TranscriptionError(f"Transcription failed: {exc}", status_code=502) from exc

    return result.text
