"""Schemas for voice tone analysis and speech endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmotionalStateView(BaseModel):
    valence: float
    arousal: float
    dominance: float

    model_config = ConfigDict(from_attributes=True)


class AudioFeaturesView(BaseModel):
    pitch: float
    speech_rate: float
    energy_level: str
    average_volume: float
    volume_variation: float
    pause_frequency: int
    jitter: float
    shimmer: float
    duration: float

    model_config = ConfigDict(from_attributes=True)


class VoiceToneResultView(BaseModel):
    tone: str
    confidence: float
    pitch: float
    speech_rate: float
    energy_level: str
    emotional_state: EmotionalStateView
    recommendations: list[str]
    audio_features: AudioFeaturesView
    transcript: str = ""
    urgency: Optional[float] = None
    indicators: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class ToneAnalysisResponse(BaseModel):
    success: bool = True
    tone_result: VoiceToneResultView


class VoiceToneLogResponse(BaseModel):
    id: int
    conversation_id: Optional[int] = None
    tone_detected: str
    confidence_score: float
    pitch_average: Optional[float] = None
    speech_rate: Optional[float] = None
    energy_level: Optional[str] = None
    emotional_state: dict[str, Any]
    audio_features: Optional[dict[str, Any]] = None
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SpeechToTextResponse(BaseModel):
    text: str
    language_code: Optional[str] = None


class TextToSpeechRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=3000)
    voice_id: Optional[str] = None
    tone: Optional[str] = None
    speed: Optional[float] = Field(None, ge=0.6, le=1.4)


class VoiceConversationResponse(BaseModel):
    user_text: str
    ai_response: str
    audio_url: str = ""
    tone_detected: str
    tone_confidence: float
    recommendations: list[str]
    emotional_state: EmotionalStateView
    conversation_id: Optional[int] = None
    crisis: bool = False


__all__ = [
    "AudioFeaturesView",
    "EmotionalStateView",
    "SpeechToTextResponse",
    "TextToSpeechRequest",
    "ToneAnalysisResponse",
    "VoiceConversationResponse",
    "VoiceToneLogResponse",
    "VoiceToneResultView",
]
