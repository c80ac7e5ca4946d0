"""Request ingestion helpers (first stage of the voice pipeline)."""

from __future__ import annotations

import mimetypes
from typing import Final

from fastapi import HTTPException, UploadFile, status

from echowell.config.settings import settings

_ALLOWED_CONTENT_TYPES: Final[set[str]] = {
    "audio/webm",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/ogg",
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/x-m4a",
    "audio/m4a",
    "video/webm",
}


def resolve_content_type(audio_file: UploadFile) -> str:
    """Accept browser recordings and common audio files, guessing from the name if needed."""

    content_type = (audio_file.content_type or "").split(";", 1)[0].strip().lower()
    if (not content_type or content_type == "application/octet-stream") and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type

    # MediaRecorder uploads without a type are webm/opus.
    content_type = content_type or "audio/webm"

    if content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported audio format. Use webm, wav, ogg, mp3 or m4a.",
        )
    return content_type


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int | None = None) -> bytes:
    """Load the upload fully into memory, rejecting empty and oversized payloads."""

    limit = max_bytes or settings.voice.max_upload_bytes
    audio_bytes = await audio_file.read(limit + 1)
    await audio_file.close()

    if not audio_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded audio file is empty",
        )
    if len(audio_bytes) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded audio file is too large",
        )
    return audio_bytes


__all__ = ["resolve_content_type", "read_audio_bytes"]
