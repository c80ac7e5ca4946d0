"""Crisis keyword screening and lightweight mood heuristics for chat text."""

from __future__ import annotations

CRISIS_KEYWORDS: tuple[str, ...] = (
    "suicide",
    "suicidal",
    "kill myself",
    "end my life",
    "want to die",
    "better off dead",
    "no reason to live",
    "self harm",
    "hurt myself",
    "cut myself",
    "overdose",
    "end it all",
)

CRISIS_RESPONSE = """I'm really concerned about what you're sharing. Your safety is the most important thing right now.

🆘 **Please reach out for immediate help:**

- **National Suicide Prevention Lifeline:** Call or text 988
- **Crisis Text Line:** Text HOME to 741741
- **International Association for Suicide Prevention:** https://www.iasp.info/resources/Crisis_Centres/

These services are available 24/7 with trained professionals who care about you.

I'm here to support you, but I want to make sure you have access to immediate professional help. Would you like me to help you find other resources?"""

_POSITIVE_WORDS = ("happy", "good", "great", "better", "excited", "joy", "wonderful")
_NEGATIVE_WORDS = ("sad", "depressed", "anxious", "worried", "terrible", "awful", "bad")


def detect_crisis(message: str) -> bool:
    """Return True when the message contains any crisis keyword."""

    lowered = (message or "").lower()
    return any(keyword in lowered for keyword in CRISIS_KEYWORDS)


def extract_mood_from_message(message: str) -> int:
    """Estimate a 1..10 mood score from positive and negative words."""

    lowered = (message or "").lower()
    score = 5
    score += sum(1 for word in _POSITIVE_WORDS if word in lowered)
    score -= sum(1 for word in _NEGATIVE_WORDS if word in lowered)
    return max(1, min(10, score))


__all__ = [
    "CRISIS_KEYWORDS",
    "CRISIS_RESPONSE",
    "detect_crisis",
    "extract_mood_from_message",
]
