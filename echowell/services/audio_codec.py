"""ffmpeg-backed decoding of uploaded recordings into mono 16-bit PCM."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile

import numpy as np
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class AudioDecodingError(RuntimeError):
    """Raised when ffmpeg cannot turn the upload into PCM samples."""


def convert_to_pcm_sync(audio_bytes: bytes, sample_rate: int) -> bytes:
    """Decode any ffmpeg-readable container to raw s16le mono at ``sample_rate``.

    A temporary file is used instead of stdin because MP4/M4A demuxing needs to seek.
    """

    if not audio_bytes:
        raise AudioDecodingError("The uploaded audio file is empty.")

    with tempfile.NamedTemporaryFile(delete=False, suffix=".tmp") as tmp_file:
        tmp_file.write(audio_bytes)
        tmp_path = tmp_file.name

    try:
        process = subprocess.run(
            [
                "ffmpeg",
                "-y",
                "-i", tmp_path,
                "-f", "s16le",
                "-ac", "1",
                "-ar", str(sample_rate),
                "pipe:1",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except FileNotFoundError as exc:
        raise AudioDecodingError("ffmpeg is not installed on this host.") from exc
    except subprocess.CalledProcessError as exc:
        error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
        logger.error("ffmpeg failed. stderr: %s", error_msg)
        raise AudioDecodingError(f"ffmpeg failed to convert audio to PCM: {error_msg}") from exc
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    if not process.stdout:
        logger.warning(
            "ffmpeg produced empty output. stderr: %s",
            process.stderr.decode("utf-8", errors="replace"),
        )
    return process.stdout


async def convert_to_pcm(audio_bytes: bytes, sample_rate: int) -> bytes:
    """Run :func:`convert_to_pcm_sync` in a worker thread."""

    return await run_in_threadpool(convert_to_pcm_sync, audio_bytes, sample_rate)


def pcm16_to_float(pcm_bytes: bytes) -> np.ndarray:
    """Map little-endian int16 samples into float32 values in [-1, 1)."""

    usable = len(pcm_bytes) - (len(pcm_bytes) % 2)
    return np.frombuffer(pcm_bytes[:usable], dtype="<i2").astype(np.float32) / 32768.0


__all__ = [
    "AudioDecodingError",
    "convert_to_pcm",
    "convert_to_pcm_sync",
    "pcm16_to_float",
]
