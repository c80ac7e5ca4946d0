"""Merge the emotional read with the acoustic features."""

from __future__ import annotations

from echowell.services.response_contract import EmotionRating

from .types import AudioFeatures, EmotionalState, VoiceToneResult

DEFAULT_CONFIDENCE = 0.7

_TONE_RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "anxious": (
        "Use calming language and reassurance",
        "Suggest breathing exercises",
        "Speak slowly and clearly",
        "Acknowledge their feelings",
    ),
    "sad": (
        "Express empathy and validation",
        "Use gentle, supportive tone",
        "Avoid toxic positivity",
        "Offer comfort and understanding",
    ),
    "stressed": (
        "Provide grounding techniques",
        "Break down problems into steps",
        "Suggest relaxation methods",
        "Be patient and supportive",
    ),
    "angry": (
        "Stay calm and non-defensive",
        "Validate their frustration",
        "Use de-escalation techniques",
        "Give them space to express",
    ),
    "happy": (
        "Match their positive energy",
        "Celebrate their mood",
        "Encourage positive momentum",
        "Build on optimism",
    ),
    "calm": (
        "Maintain peaceful atmosphere",
        "Encourage reflection",
        "Support current state",
        "Explore deeper topics",
    ),
}

_GENERIC_RECOMMENDATIONS: tuple[str, ...] = (
    "Respond with empathy and understanding",
    "Be supportive and non-judgmental",
    "Listen actively",
)

_TONE_PREFIXES: dict[str, str] = {
    "anxious": "(Speaking in a calm, reassuring tone) ",
    "sad": "(Speaking gently and compassionately) ",
    "stressed": "(Speaking slowly and supportively) ",
    "angry": "(Speaking calmly and non-defensively) ",
    "happy": "(Matching your positive energy) ",
    "calm": "(Speaking peacefully) ",
}


def tone_recommendations(tone: str) -> list[str]:
    return list(_TONE_RECOMMENDATIONS.get(tone, _GENERIC_RECOMMENDATIONS))


def calculate_confidence(rating: EmotionRating, features: AudioFeatures) -> float:
    """Discount the LLM confidence when the voice itself is unstable or halting."""

    confidence = rating.confidence if rating.confidence is not None else DEFAULT_CONFIDENCE
    if features.jitter > 0.1 or features.shimmer > 0.2:
        confidence *= 0.9
    if features.pause_frequency > 10:
        confidence *= 0.95
    return min(confidence, 1.0)


def generate_recommendations(tone: str, features: AudioFeatures) -> list[str]:
    recommendations = tone_recommendations(tone)
    if features.jitter > 0.15:
        recommendations.append("Voice shows stress indicators - use extra calming techniques")
    if features.pause_frequency > 15:
        recommendations.append("Frequent pauses suggest hesitation - be patient and encouraging")
    if features.energy_level == "low" and tone != "calm":
        recommendations.append("Low energy detected - consider gentle encouragement")
    if features.speech_rate > 180:
        recommendations.append("Fast speech rate - suggest slowing down for clarity")
    return recommendations


def combine_analysis(
    rating: EmotionRating,
    features: AudioFeatures,
    transcript: str = "",
) -> VoiceToneResult:
    return VoiceToneResult(
        tone=rating.tone,
        confidence=calculate_confidence(rating, features),
        pitch=features.pitch,
        speech_rate=features.speech_rate,
        energy_level=features.energy_level,
        emotional_state=EmotionalState(
            valence=rating.valence if rating.valence is not None else 0.0,
            arousal=rating.arousal if rating.arousal is not None else 0.5,
            dominance=rating.dominance if rating.dominance is not None else 0.5,
        ),
        recommendations=generate_recommendations(rating.tone, features),
        audio_features=features,
        transcript=transcript,
        urgency=rating.urgency,
        indicators=list(rating.indicators),
    )


def adjust_response_for_tone(response: str, result: VoiceToneResult) -> str:
    """Prefix a stage direction for the tone and append pacing cues from the voice."""

    prefix = _TONE_PREFIXES.get(result.tone, "")
    suffix = ""
    if result.audio_features.jitter > 0.15:
        suffix += " (Using extra gentle, steady voice)"
    if result.audio_features.pause_frequency > 15:
        suffix += " (Speaking slowly to match your pace)"
    return prefix + response + suffix


__all__ = [
    "adjust_response_for_tone",
    "calculate_confidence",
    "combine_analysis",
    "generate_recommendations",
    "tone_recommendations",
]
