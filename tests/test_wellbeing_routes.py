"""Mood, goal and music session endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import login_headers, register


def test_mood_log_and_history_stats(client: TestClient, auth_headers: dict) -> None:
    for score, emotions in [(4, ["anxious", "tired"]), (7, ["anxious"]), (8, ["hopeful"])]:
        response = client.post(
            "/mood/log",
            json={"mood_score": score, "emotions": emotions, "notes": "checking in"},
            headers=auth_headers,
        )
        assert response.status_code == 201

    history = client.get("/mood/history", headers=auth_headers).json()

    assert [log["mood_score"] for log in history["logs"]] == [4, 7, 8]
    assert history["stats"]["avgMood"] == 6.3
    assert history["stats"]["totalLogs"] == 3
    assert history["stats"]["topEmotions"][0] == {"emotion": "anxious", "count": 2}


def test_mood_score_out_of_range_is_bad_request(client: TestClient, auth_headers: dict) -> None:
    for score in (0, 11):
        response = client.post("/mood/log", json={"mood_score": score}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid mood score. Must be between 1-10"


def test_empty_mood_history(client: TestClient, auth_headers: dict) -> None:
    history = client.get("/mood/history?days=7", headers=auth_headers).json()

    assert history["logs"] == []
    assert history["stats"] == {"avgMood": 0, "totalLogs": 0, "topEmotions": []}


def test_goal_lifecycle(client: TestClient, auth_headers: dict) -> None:
    created = client.post(
        "/goals/", json={"goal_text": "  Journal every evening  "}, headers=auth_headers
    ).json()
    assert created["goal_text"] == "Journal every evening"
    assert created["status"] == "active"
    assert created["progress"] == 0

    progressed = client.patch(
        f"/goals/{created['id']}", json={"progress": 40}, headers=auth_headers
    ).json()
    assert progressed["progress"] == 40

    completed = client.patch(
        f"/goals/{created['id']}", json={"status": "completed"}, headers=auth_headers
    ).json()
    assert completed["progress"] == 100
    assert completed["completed_at"] is not None

    reopened = client.patch(
        f"/goals/{created['id']}", json={"status": "active"}, headers=auth_headers
    ).json()
    assert reopened["completed_at"] is None

    client.post("/goals/", json={"goal_text": "Sleep by 11"}, headers=auth_headers)
    active = client.get("/goals/?status=active", headers=auth_headers).json()
    assert [goal["goal_text"] for goal in active] == ["Sleep by 11", "Journal every evening"]

    assert client.delete(f"/goals/{created['id']}", headers=auth_headers).status_code == 204
    assert client.patch(f"/goals/{created['id']}", json={"progress": 1}, headers=auth_headers).status_code == 404


def test_goals_are_private(client: TestClient, auth_headers: dict) -> None:
    goal = client.post("/goals/", json={"goal_text": "Mine"}, headers=auth_headers).json()

    register(client, email="other@example.com", name="Other")
    other_headers = login_headers(client, "other@example.com")

    assert client.get("/goals/", headers=other_headers).json() == []
    assert client.delete(f"/goals/{goal['id']}", headers=other_headers).status_code == 404


def test_music_sessions(client: TestClient, auth_headers: dict) -> None:
    response = client.post(
        "/music/session",
        json={
            "mood_before": 3,
            "mood_after": 6,
            "track_ids": ["t1", "t2"],
            "duration": 25,
            "session_type": "relaxation",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201

    invalid = client.post(
        "/music/session",
        json={"mood_before": 12, "duration": 10, "session_type": "focus"},
        headers=auth_headers,
    )
    assert invalid.status_code == 422

    sessions = client.get("/music/session", headers=auth_headers).json()
    assert len(sessions) == 1
    assert sessions[0]["track_ids"] == ["t1", "t2"]
    assert sessions[0]["duration"] == 25
