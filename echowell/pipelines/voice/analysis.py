"""End-to-end voice tone analysis."""

from __future__ import annotations

import logging
import time

from echowell.config.settings import settings
from echowell.services.audio_codec import AudioDecodingError, convert_to_pcm
from echowell.services.transcribe import TranscribeService
from echowell.telemetry import observe_voice_analysis

from .classification import combine_analysis
from .emotion import rate_transcript
from .features import extract_features_from_pcm
from .transcription import transcribe_pcm
from .types import VoiceToneResult

logger = logging.getLogger("echowell.pipelines.voice")


async def analyze_voice_tone(
    audio_bytes: bytes,
    *,
    transcribe_service: TranscribeService | None = None,
) -> VoiceToneResult:
    """Run every stage over one recording; each stage degrades independently."""

    started = time.perf_counter()
    sample_rate = settings.voice.sample_rate

    try:
        pcm_bytes = await convert_to_pcm(audio_bytes, sample_rate)
    except AudioDecodingError as exc:
        logger.warning("Audio decoding failed; using default features: %s", exc)
        pcm_bytes = b""

    transcript = await transcribe_pcm(pcm_bytes, transcribe_service)
    rating = await rate_transcript(transcript)
    features = await extract_features_from_pcm(pcm_bytes, sample_rate)
    result = combine_analysis(rating, features, transcript)

    elapsed = time.perf_counter() - started
    observe_voice_analysis(result.tone, elapsed)
    logger.info(
        "Voice tone analysed tone=%s confidence=%.2f energy=%s transcript_chars=%s elapsed=%.2fs",
        result.tone,
        result.confidence,
        result.energy_level,
        len(transcript),
        elapsed,
    )
    return result


__all__ = ["analyze_voice_tone"]
