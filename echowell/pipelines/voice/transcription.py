"""Transcription stage of the voice pipeline."""

from __future__ import annotations

import logging

from echowell.services.transcribe import (
    TranscribeService,
    TranscriptionError,
    get_transcribe_service,
)

logger = logging.getLogger("echowell.pipelines.voice")
transcript_logger = logging.getLogger("echowell.logs.transcript")


async def transcribe_pcm(pcm_bytes: bytes, service: TranscribeService | None = None) -> str:
    """Return the transcript for decoded audio, or an empty string on failure."""

    if not pcm_bytes:
        return ""

    transcriber = service or get_transcribe_service()
    try:
        result = await transcriber.transcribe_pcm(pcm_bytes)
    except TranscriptionError as exc:
        logger.warning("Transcription failed; continuing with empty transcript: %s", exc)
        return ""

    transcript_logger.info("%s", result.transcript)
    return result.transcript


__all__ = ["transcribe_pcm"]
