"""High-level orchestration map for the voice tone pipeline.

``analysis.analyze_voice_tone`` ties the stages together; this module
documents the canonical execution order:

1. ``ingestion`` - validate the upload and read the raw audio bytes.
2. ``decoding`` - ffmpeg turns the container into 16 kHz mono PCM.
3. ``transcription`` - stream the PCM to Amazon Transcribe.
4. ``emotion`` - ask Bedrock for tone, valence, arousal and dominance.
5. ``features`` - compute volume, pauses, speech rate, pitch, jitter and shimmer.
6. ``classification`` - merge both reads into a ``VoiceToneResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the voice pipeline."""

    order: int
    name: str
    module: str
    summary: str


class VoiceAnalysisPipeline:
    """Utility wrapper for documenting the `/voice/analyze-tone` flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Ingestion",
            "echowell.pipelines.voice.ingestion",
            "Resolve content type, enforce the size limit and read the upload into memory.",
        ),
        PipelineStage(
            2,
            "Decoding",
            "echowell.services.audio_codec",
            "Convert the recording to 16-bit mono PCM at the analysis sample rate.",
        ),
        PipelineStage(
            3,
            "Transcription",
            "echowell.pipelines.voice.transcription",
            "Stream PCM to Amazon Transcribe; failures yield an empty transcript.",
        ),
        PipelineStage(
            4,
            "Emotional Read",
            "echowell.pipelines.voice.emotion",
            "Rate the transcript with Bedrock and validate the JSON contract.",
        ),
        PipelineStage(
            5,
            "Acoustic Features",
            "echowell.pipelines.voice.features",
            "Measure volume, pauses, speech rate, pitch, jitter and shimmer.",
        ),
        PipelineStage(
            6,
            "Classification",
            "echowell.pipelines.voice.classification",
            "Combine both reads into tone, confidence and recommendations.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["PipelineStage", "VoiceAnalysisPipeline"]
