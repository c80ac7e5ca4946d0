"""Typed containers shared across the voice tone pipeline.

Kept in their own module so the stages (`features`, `emotion`,
`classification`, `analysis`) can import them without circular imports.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class AudioFeatures:
    """Acoustic measurements computed from the decoded waveform."""

    pitch: float
    speech_rate: float
    energy_level: str
    average_volume: float
    volume_variation: float
    pause_frequency: int
    jitter: float
    shimmer: float
    duration: float

    @classmethod
    def default(cls) -> "AudioFeatures":
        """Values used when the recording cannot be decoded."""

        return cls(
            pitch=150.0,
            speech_rate=140.0,
            energy_level="medium",
            average_volume=0.1,
            volume_variation=0.05,
            pause_frequency=5,
            jitter=0.05,
            shimmer=0.1,
            duration=10.0,
        )

    def summary(self) -> dict[str, Any]:
        """Subset persisted alongside a voice tone log."""

        return {
            "average_volume": self.average_volume,
            "volume_variation": self.volume_variation,
            "pause_frequency": self.pause_frequency,
            "jitter": self.jitter,
            "shimmer": self.shimmer,
        }


@dataclass(frozen=True)
class EmotionalState:
    valence: float = 0.0
    arousal: float = 0.5
    dominance: float = 0.5


@dataclass(frozen=True)
class VoiceToneResult:
    """Merged outcome of transcription, emotional read and acoustic analysis."""

    tone: str
    confidence: float
    pitch: float
    speech_rate: float
    energy_level: str
    emotional_state: EmotionalState
    recommendations: list[str]
    audio_features: AudioFeatures
    transcript: str = ""
    urgency: float | None = None
    indicators: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["AudioFeatures", "EmotionalState", "VoiceToneResult"]
