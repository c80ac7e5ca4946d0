"""Daily, weekly and analytics summary endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient

from echowell.services.summaries import BRIEF_CONVERSATION_TEXT, WEEKLY_EMPTY_MESSAGE


def _talk(client: TestClient, headers: dict, *contents: str) -> None:
    for content in contents:
        response = client.post(
            "/chat/", json={"messages": [{"role": "user", "content": content}]}, headers=headers
        )
        assert response.status_code == 200


def test_daily_summary_is_null_without_conversations(client: TestClient, auth_headers: dict) -> None:
    response = client.get("/daily-summary", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"summary": None}


def test_daily_summary_for_brief_day(client: TestClient, auth_headers: dict) -> None:
    _talk(client, auth_headers, "Hi", "Quick check-in")
    client.post("/mood/log", json={"mood_score": 6, "emotions": ["calm"]}, headers=auth_headers)

    summary = client.get("/daily-summary", headers=auth_headers).json()["summary"]

    assert summary["date"] == datetime.utcnow().date().isoformat()
    assert summary["conversation_count"] == 2
    assert summary["total_messages"] == 4
    assert summary["avg_mood_score"] == 6
    assert summary["dominant_emotions"] == {"calm": 1}
    assert summary["conversation_quality"] == "short"
    assert summary["ai_insights"] == BRIEF_CONVERSATION_TEXT
    assert summary["voice_tone_analysis"] == {
        "avg_tone": "neutral",
        "tone_variations": {},
        "emotional_stability": 0.5,
    }


def test_daily_summary_regeneration_upserts(client: TestClient, auth_headers: dict, fake_llm) -> None:
    _talk(client, auth_headers, "I have been anxious about work and my sleep has been poor all week long.")
    first = client.get("/daily-summary", headers=auth_headers).json()["summary"]
    assert first["topics_discussed"] == ["sleep", "work"]

    fake_llm.replies = [
        '{"summary": "You named what is hard.", "topics": ["work stress"], '
        '"patterns": "", "encouragement": "Rest tonight."}'
    ]
    regenerated = client.post("/daily-summary", headers=auth_headers).json()["summary"]

    assert regenerated["id"] == first["id"]
    assert regenerated["topics_discussed"] == ["work stress"]
    assert regenerated["ai_insights"] == "You named what is hard.\n\nRest tonight."


def test_weekly_summary(client: TestClient, auth_headers: dict) -> None:
    empty = client.get("/weekly-summary", headers=auth_headers).json()
    assert empty == {"summary": None, "message": WEEKLY_EMPTY_MESSAGE}

    _talk(client, auth_headers, "Hello")
    client.post("/mood/log", json={"mood_score": 8}, headers=auth_headers)
    client.post("/daily-summary", headers=auth_headers)

    summary = client.get("/weekly-summary", headers=auth_headers).json()["summary"]

    assert summary["metrics"]["days_active"] == 1
    assert summary["metrics"]["avg_mood"] == 8.0
    assert summary["insights"]["overview"]
    assert summary["insights"]["recommendations"]


def test_analytics_empty_periods(client: TestClient, auth_headers: dict) -> None:
    weekly = client.get("/analytics/summaries?type=weekly&date=2024-03-06", headers=auth_headers).json()
    monthly = client.get("/analytics/summaries?type=monthly&date=2024-03-06", headers=auth_headers).json()

    assert weekly["summaries"]["week_start"] == "2024-03-03"
    assert weekly["summaries"]["total_conversations"] == 0
    assert monthly["summaries"]["month"] == "2024-03"
    assert monthly["summaries"]["mood_trend"] == "stable"
    assert monthly["summaries"]["total_sessions"] == 0


def test_analytics_with_activity_uses_fallback_insights(client: TestClient, auth_headers: dict) -> None:
    _talk(client, auth_headers, "Hello")
    client.post("/mood/log", json={"mood_score": 7}, headers=auth_headers)
    client.post("/daily-summary", headers=auth_headers)

    weekly = client.get("/analytics/summaries?type=weekly", headers=auth_headers).json()["summaries"]
    monthly = client.get("/analytics/summaries?type=monthly", headers=auth_headers).json()["summaries"]

    assert weekly["total_conversations"] == 1
    assert weekly["avg_daily_mood"] == 7.0
    assert weekly["emotional_growth"] == 7.0
    assert weekly["progress_areas"] == ["emotional awareness", "communication"]
    assert monthly["total_sessions"] == 1
    assert monthly["emotional_stability_score"] == 1.0
    assert monthly["goals_achieved"] == 2


def test_analytics_rejects_unknown_type(client: TestClient, auth_headers: dict) -> None:
    response = client.get("/analytics/summaries?type=yearly", headers=auth_headers)

    assert response.status_code == 422
