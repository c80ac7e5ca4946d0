"""Tone-aware companion replies backed by Bedrock with canned fallbacks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from echowell.services.crisis import CRISIS_RESPONSE, detect_crisis
from echowell.services.llm_client import BedrockLlmClient, LlmInvocationError, get_llm_client
from echowell.telemetry import increment_llm_fallback

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 10
TONE_GUIDANCE_THRESHOLD = 0.6

BASE_SYSTEM_PROMPT = """You are EchoWell, a compassionate AI mental health companion. Your role is to provide emotional support and guidance.

Core Principles:
- ALWAYS be polite, kind, and understanding
- Listen empathetically without judgment
- Validate emotions before offering solutions
- Use evidence-based techniques from CBT and DBT
- Recognize your limitations - you're not a replacement for therapy
- Be warm, supportive, and conversational

Response Guidelines:
- Keep responses concise (2-4 paragraphs)
- Ask ONE thoughtful question at a time
- Use "I" statements for empathy
- Offer coping strategies when appropriate
- Encourage professional help for serious issues

Crisis Detection:
- If you detect suicide, self-harm, or crisis keywords, immediately provide crisis resources
- National Suicide Prevention Lifeline: 988
- Crisis Text Line: Text HOME to 741741

Remember: You provide support, not diagnosis or treatment."""

_NEUTRAL_GUIDANCE = "\n\nRespond naturally with empathy and care."

_TONE_GUIDELINES: dict[str, tuple[str, ...]] = {
    "anxious": (
        "Use calm, reassuring language",
        "Speak slowly and clearly (short sentences)",
        "Offer grounding techniques immediately if severe",
        "Validate their anxiety: \"It's completely understandable to feel anxious about this\"",
        "Suggest breathing exercises: \"Let's take a moment to breathe together\"",
        "Avoid overwhelming them with too much information",
        "Be a stable, calming presence",
    ),
    "sad": (
        "Express genuine empathy and compassion",
        "Use gentle, supportive language",
        "Avoid toxic positivity or minimizing feelings",
        "Validate their pain: \"I hear how much you're hurting right now\"",
        "Sit with them in their sadness - don't rush to fix it",
        "Offer comfort and understanding",
        "Remind them that feelings are temporary",
    ),
    "stressed": (
        "Help them break down overwhelming situations",
        "Speak clearly and provide structure",
        "Offer practical coping strategies",
        "Suggest stress-relief techniques (breathing, progressive relaxation)",
        "Encourage prioritization: \"Let's identify what's most urgent\"",
        "Be patient and supportive",
        "Help them regain sense of control",
    ),
    "angry": (
        "Stay calm and non-defensive",
        "Validate their frustration without judgment",
        "Give them space to express fully",
        "Use de-escalation techniques",
        "Acknowledge: \"I can hear how frustrated you are, and that's valid\"",
        "Don't take it personally or argue",
        "Help them process the anger constructively",
    ),
    "happy": (
        "Match their positive energy appropriately",
        "Celebrate their good mood with them",
        "Encourage this positive momentum",
        "Ask what's contributing to their happiness",
        "Help them savor positive moments",
        "Build on their optimism",
        "Still be ready to support if mood shifts",
    ),
    "calm": (
        "Maintain the peaceful atmosphere",
        "Encourage deeper reflection and insight",
        "Explore topics more thoroughly",
        "Support their current balanced state",
        "This is a good time for goal-setting or processing past events",
        "Use their calmness productively",
    ),
}

_CLOSING_INSTRUCTION = (
    "Please respond as the compassionate AI mental health companion. "
    "Keep your response supportive, empathetic, and helpful."
)

TOPIC_KEYWORDS: tuple[str, ...] = (
    "anxiety",
    "depression",
    "stress",
    "sleep",
    "work",
    "relationships",
    "family",
    "health",
    "goals",
    "meditation",
    "exercise",
    "therapy",
    "emotions",
    "feelings",
    "worry",
    "sadness",
    "happiness",
    "anger",
)

_FALLBACK_OVERWHELMED = """I hear that you're feeling overwhelmed. That's a completely valid feeling, and I want you to know that you're not alone in this.

Here are some gentle coping strategies that might help:

• Take slow, deep breaths - try the 4-7-8 technique
• Break tasks into smaller, manageable steps
• Practice self-compassion - you're doing your best
• Consider talking to a trusted friend or professional

Remember, it's okay to ask for help when you need it. What's one small thing you could do right now to take care of yourself?"""

_FALLBACK_SAD = """I can hear the sadness in your message, and I want you to know that your feelings are completely valid. Feeling sad is a natural part of being human, even though it can be incredibly difficult.

Some gentle suggestions:

• Allow yourself to feel these emotions without judgment
• Try to maintain basic self-care routines
• Connect with people who care about you
• Consider speaking with a mental health professional

You don't have to go through this alone. Is there someone in your life you could reach out to today?"""

_FALLBACK_ANXIOUS = """I understand that anxiety can feel overwhelming and exhausting. You're not alone in experiencing these feelings.

Here are some calming techniques you might try:

• Ground yourself with the 5-4-3-2-1 technique
• Practice mindful breathing
• Try progressive muscle relaxation
• Challenge anxious thoughts with gentle questioning

Remember, anxiety doesn't define you, and these feelings will pass. What's one thing that usually helps you feel more grounded?"""

_FALLBACK_HAPPY = """That's wonderful to hear! I'm genuinely happy that you're experiencing positive feelings right now. It's important to acknowledge and celebrate these moments.

To help maintain this positive energy:

• Take note of what contributed to these good feelings
• Practice gratitude for the positive aspects of your day
• Share your joy with others if you feel comfortable
• Remember this feeling when you face challenges later

What's something specific that's bringing you joy today?"""

_FALLBACK_DEFAULT = """Thank you for sharing with me. I want you to know that I'm here to listen and support you. Your feelings are valid, and it takes courage to reach out.

While I'm currently experiencing some technical limitations, I still want to offer you some gentle support:

• Your feelings matter and are completely valid
• It's okay to not have all the answers right now
• Consider reaching out to trusted friends, family, or professionals
• Practice self-compassion - you're doing the best you can

Is there a specific way you'd like to be supported right now? I'm here to listen."""

_FALLBACK_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("overwhelmed", "stress"), _FALLBACK_OVERWHELMED),
    (("sad", "depressed"), _FALLBACK_SAD),
    (("anxious", "worried"), _FALLBACK_ANXIOUS),
    (("happy", "good"), _FALLBACK_HAPPY),
)


class CompanionError(RuntimeError):
    """Raised when a chat request cannot be answered at all."""


@dataclass(frozen=True)
class ConversationMetrics:
    message_count: int
    topics_covered: list[str]
    depth_score: int
    engagement_score: int


def system_prompt_for_tone(tone: Optional[str] = None, confidence: Optional[float] = None) -> str:
    """Return the companion system prompt, adding tone guidance when confident."""

    if not tone or confidence is None or confidence < TONE_GUIDANCE_THRESHOLD:
        return BASE_SYSTEM_PROMPT + _NEUTRAL_GUIDANCE

    guidelines = _TONE_GUIDELINES.get(tone)
    if not guidelines:
        return BASE_SYSTEM_PROMPT

    bullet_list = "\n".join(f"- {line}" for line in guidelines)
    return (
        f"{BASE_SYSTEM_PROMPT}\n\n"
        f"DETECTED TONE: {tone.capitalize()} ({confidence * 100:.0f}% confidence)\n\n"
        f"Adjust your response:\n{bullet_list}"
    )


def render_history(messages: Sequence[Mapping[str, str]]) -> str:
    """Render the trailing chat window as ``User:``/``Assistant:`` lines."""

    lines = []
    for message in messages[-HISTORY_WINDOW:]:
        speaker = "Assistant" if message.get("role") == "assistant" else "User"
        lines.append(f"{speaker}: {message.get('content', '')}")
    return "\n".join(lines)


def fallback_response(user_message: str) -> str:
    """Pick a canned supportive reply by keyword when the LLM is unavailable."""

    if detect_crisis(user_message):
        return CRISIS_RESPONSE

    lowered = (user_message or "").lower()
    for keywords, reply in _FALLBACK_RULES:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return _FALLBACK_DEFAULT


async def get_chat_response(
    messages: Sequence[Mapping[str, str]],
    *,
    tone: Optional[str] = None,
    tone_confidence: Optional[float] = None,
    llm_client: BedrockLlmClient | None = None,
) -> str:
    """Generate the companion reply for a conversation ending in a user turn."""

    if not messages or messages[-1].get("role") != "user":
        raise CompanionError("No user message found")

    last_user_message = messages[-1].get("content", "")
    client = llm_client or get_llm_client()
    system_prompt = system_prompt_for_tone(tone, tone_confidence)
    user_prompt = (
        f"Conversation History:\n{render_history(messages)}\n\n{_CLOSING_INSTRUCTION}"
    )

    try:
        reply = await client.invoke(system_prompt=system_prompt, user_prompt=user_prompt)
    except LlmInvocationError as exc:
        logger.warning("Companion LLM call failed, using fallback reply: %s", exc)
        reply = None

    if not reply:
        increment_llm_fallback("chat")
        return fallback_response(last_user_message)
    return reply


def extract_topics(text: str) -> list[str]:
    lowered = (text or "").lower()
    return [topic for topic in TOPIC_KEYWORDS if topic in lowered]


def compute_conversation_metrics(messages: Iterable[Mapping[str, str]]) -> ConversationMetrics:
    """Score a conversation by topic coverage, depth and engagement."""

    turns = list(messages)
    user_texts = [m.get("content", "") for m in turns if m.get("role") == "user"]
    joined = " ".join(user_texts)
    average_length = len(joined) / len(user_texts) if user_texts else 0
    return ConversationMetrics(
        message_count=len(turns),
        topics_covered=extract_topics(joined),
        depth_score=min(10, int(average_length // 50) + len(turns)),
        engagement_score=min(10, len(turns)),
    )


__all__ = [
    "BASE_SYSTEM_PROMPT",
    "CompanionError",
    "ConversationMetrics",
    "compute_conversation_metrics",
    "extract_topics",
    "fallback_response",
    "get_chat_response",
    "render_history",
    "system_prompt_for_tone",
]
