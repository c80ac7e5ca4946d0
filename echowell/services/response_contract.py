"""Pydantic models for validating LLM JSON responses.

The voice pipeline and the summary generators ask the model for JSON; these
schemas turn whatever comes back into normalized, range-checked objects.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TONES: tuple[str, ...] = ("calm", "anxious", "sad", "happy", "stressed", "angry", "neutral")

ContractT = TypeVar("ContractT", bound="JsonContract")


class ResponseContractError(RuntimeError):
    """Raised when the LLM response contract cannot be validated."""


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, float(value)))


class JsonContract(BaseModel):
    """Base class adding tolerant JSON parsing to response schemas."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_json(cls: type[ContractT], payload: str) -> ContractT:
        """Parse a raw model reply, tolerating Markdown fences and chatter.

        Raises ``ResponseContractError`` when no JSON object can be decoded and
        ``pydantic.ValidationError`` when the object does not fit the schema.
        """

        cleaned = _clean_json_payload(payload)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ResponseContractError(f"Response is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ResponseContractError("Response JSON must be an object.")
        return cls.model_validate(data)


class EmotionRating(JsonContract):
    """Emotional read of a transcript: tone label plus valence/arousal/dominance."""

    tone: str = "neutral"
    confidence: Optional[float] = None
    valence: Optional[float] = None
    arousal: Optional[float] = None
    dominance: Optional[float] = None
    indicators: list[str] = Field(default_factory=list)
    urgency: Optional[float] = None

    @field_validator("tone", mode="before")
    @classmethod
    def normalize_tone(cls, value: Any) -> str:
        tone = str(value or "").strip().lower()
        return tone if tone in TONES else "neutral"

    @field_validator("indicators", mode="before")
    @classmethod
    def coerce_indicators(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(item) for item in value]

    @model_validator(mode="after")
    def clamp_ranges(self) -> "EmotionRating":
        if self.confidence is not None:
            self.confidence = _clamp(self.confidence, 0.0, 1.0)
        if self.valence is not None:
            self.valence = _clamp(self.valence, -1.0, 1.0)
        for name in ("arousal", "dominance", "urgency"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, _clamp(value, 0.0, 1.0))
        return self

    NEUTRAL_CONFIDENCE: ClassVar[float] = 0.5

    @classmethod
    def neutral(cls) -> "EmotionRating":
        """Rating used when no transcript or no usable model answer is available."""

        return cls(tone="neutral", confidence=cls.NEUTRAL_CONFIDENCE)


class DailyInsights(JsonContract):
    summary: str = ""
    topics: list[str] = Field(default_factory=list)
    patterns: str = ""
    encouragement: str = ""

    def as_text(self) -> str:
        return "\n\n".join(part for part in (self.summary, self.patterns, self.encouragement) if part)


class WeeklyOverview(JsonContract):
    overview: str = ""
    patterns: str = ""
    growth: str = ""
    recommendations: list[str] = Field(default_factory=list)
    celebration: str = ""


class WeeklyProgress(JsonContract):
    progress_areas: list[str] = Field(default_factory=list, alias="progressAreas")
    achievements: list[str] = Field(default_factory=list)
    insights: str = ""


class MonthlyProgress(JsonContract):
    goals_achieved: int = Field(default=0, alias="goalsAchieved", ge=0)
    insights: str = ""
    recommendations: list[str] = Field(default_factory=list)


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and keep the outermost JSON object."""

    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "TONES",
    "JsonContract",
    "EmotionRating",
    "DailyInsights",
    "WeeklyOverview",
    "WeeklyProgress",
    "MonthlyProgress",
    "ResponseContractError",
]
