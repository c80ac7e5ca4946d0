"""Companion prompting, fallbacks and crisis screening."""

from __future__ import annotations

import asyncio

import pytest

from echowell.services.companion import (
    BASE_SYSTEM_PROMPT,
    CompanionError,
    compute_conversation_metrics,
    extract_topics,
    fallback_response,
    get_chat_response,
    render_history,
    system_prompt_for_tone,
)
from echowell.services.conversation_store import conversation_title
from echowell.services.crisis import CRISIS_RESPONSE, detect_crisis, extract_mood_from_message
from echowell.services.llm_client import LlmInvocationError


@pytest.mark.parametrize(
    "message",
    [
        "Sometimes I think about suicide",
        "I just want to END MY LIFE",
        "I've been trying not to hurt myself",
    ],
)
def test_detect_crisis_matches_keywords_case_insensitively(message: str) -> None:
    assert detect_crisis(message)


def test_detect_crisis_ignores_ordinary_sadness() -> None:
    assert not detect_crisis("I feel a bit down about work today")
    assert not detect_crisis("")


def test_crisis_response_lists_hotlines() -> None:
    assert "988" in CRISIS_RESPONSE
    assert "741741" in CRISIS_RESPONSE


def test_extract_mood_from_message_counts_sentiment_words() -> None:
    assert extract_mood_from_message("Today was good, even great!") == 7
    assert extract_mood_from_message("sad, anxious, worried and awful, terrible, bad, depressed") == 1
    assert extract_mood_from_message("just a day") == 5


def test_system_prompt_without_confident_tone_is_neutral() -> None:
    assert system_prompt_for_tone() == BASE_SYSTEM_PROMPT + "\n\nRespond naturally with empathy and care."
    assert system_prompt_for_tone("sad", 0.4).endswith("Respond naturally with empathy and care.")


def test_system_prompt_includes_tone_guidance() -> None:
    prompt = system_prompt_for_tone("anxious", 0.82)

    assert "DETECTED TONE: Anxious (82% confidence)" in prompt
    assert "- Use calm, reassuring language" in prompt


def test_render_history_keeps_last_ten_turns() -> None:
    messages = [{"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}"} for i in range(14)]

    rendered = render_history(messages).splitlines()

    assert len(rendered) == 10
    assert rendered[0] == "User: m4"
    assert rendered[-1] == "Assistant: m13"


@pytest.mark.parametrize(
    ("message", "expected_fragment"),
    [
        ("I'm so overwhelmed with everything", "feeling overwhelmed"),
        ("I feel really sad tonight", "sadness in your message"),
        ("I'm worried about tomorrow", "anxiety can feel overwhelming"),
        ("Had a good day!", "That's wonderful to hear"),
        ("Hello there", "Thank you for sharing with me"),
    ],
)
def test_fallback_response_by_keyword(message: str, expected_fragment: str) -> None:
    assert expected_fragment in fallback_response(message)


def test_fallback_response_prefers_crisis_resources() -> None:
    assert fallback_response("I am sad and want to die") == CRISIS_RESPONSE


def test_get_chat_response_uses_llm_reply(fake_llm) -> None:
    fake_llm.replies = ["I'm here with you."]
    messages = [{"role": "user", "content": "I had a rough day"}]

    reply = asyncio.run(get_chat_response(messages, tone="sad", tone_confidence=0.9))

    assert reply == "I'm here with you."
    assert "DETECTED TONE: Sad (90% confidence)" in fake_llm.calls[0]["system_prompt"]
    assert fake_llm.calls[0]["user_prompt"].startswith("Conversation History:\nUser: I had a rough day")


def test_get_chat_response_falls_back_when_llm_fails() -> None:
    class BrokenClient:
        async def invoke(self, **kwargs):
            raise LlmInvocationError("throttled")

    messages = [{"role": "user", "content": "I'm anxious about my exam"}]

    reply = asyncio.run(get_chat_response(messages, llm_client=BrokenClient()))

    assert reply == fallback_response("I'm anxious about my exam")


def test_get_chat_response_requires_trailing_user_turn() -> None:
    with pytest.raises(CompanionError):
        asyncio.run(get_chat_response([{"role": "assistant", "content": "Hi!"}]))


def test_conversation_metrics() -> None:
    messages = [
        {"role": "user", "content": "Work stress keeps me up, my sleep is terrible " * 3},
        {"role": "assistant", "content": "That sounds exhausting."},
        {"role": "user", "content": "Therapy helped before"},
    ]

    metrics = compute_conversation_metrics(messages)

    assert metrics.message_count == 3
    assert metrics.topics_covered == ["stress", "sleep", "work", "therapy"]
    assert metrics.engagement_score == 3
    assert metrics.depth_score == 4


def test_extract_topics_and_title() -> None:
    assert extract_topics("My family and my goals") == ["family", "goals"]
    assert conversation_title("x" * 80) == "x" * 50 + "..."
