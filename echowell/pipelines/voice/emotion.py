"""Emotional read of the transcript via the hosted LLM."""

from __future__ import annotations

import logging

from echowell.services.llm_client import LlmInvocationError, invoke_contract
from echowell.services.response_contract import EmotionRating, ResponseContractError

logger = logging.getLogger("echowell.pipelines.voice")

EMOTION_SYSTEM_PROMPT = (
    "You are a mental health AI assistant that rates the emotional tone of "
    "speech transcriptions. Respond ONLY with valid JSON."
)

_EMOTION_PROMPT_TEMPLATE = """Analyze the emotional tone of this speech transcription. Consider:
1. Word choice and emotional language
2. Sentence structure and flow
3. Implied emotional states
4. Therapeutic context

Return a JSON object with:
- tone: one of [calm, anxious, sad, happy, stressed, angry, neutral]
- confidence: 0-1 (how certain you are)
- valence: -1 to 1 (negative to positive emotional state)
- arousal: 0 to 1 (calm to excited energy level)
- dominance: 0 to 1 (submissive to dominant emotional position)
- indicators: array of specific emotional indicators found
- urgency: 0-1 (how urgent/immediate the emotional need seems)

Text: "{text}"

Respond ONLY with valid JSON."""


def build_emotion_prompt(transcript: str) -> str:
    return _EMOTION_PROMPT_TEMPLATE.format(text=transcript.replace('"', "'"))


async def rate_transcript(transcript: str) -> EmotionRating:
    """Ask the LLM for an emotion rating; degrade to neutral when unavailable."""

    if not transcript.strip():
        return EmotionRating.neutral()

    try:
        rating = await invoke_contract(
            EmotionRating,
            system_prompt=EMOTION_SYSTEM_PROMPT,
            user_prompt=build_emotion_prompt(transcript),
            temperature=0.2,
            max_tokens=400,
        )
    except (LlmInvocationError, ResponseContractError) as exc:
        logger.warning("Emotion rating unavailable; using neutral rating: %s", exc)
        return EmotionRating.neutral()

    logger.info(
        "Emotion rating tone=%s confidence=%s valence=%s arousal=%s",
        rating.tone,
        rating.confidence,
        rating.valence,
        rating.arousal,
    )
    return rating


__all__ = ["EMOTION_SYSTEM_PROMPT", "build_emotion_prompt", "rate_transcript"]
