"""Registration, login and profile management."""

from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import DEFAULT_PASSWORD, login_headers, register


def test_register_and_login_issue_bearer_token(client: TestClient) -> None:
    created = register(client, email="Alex@Example.com", name="Alex")

    assert created["email"] == "alex@example.com"
    assert created["subscriptionTier"] == "free"

    response = client.post(
        "/auth/login", json={"email": "alex@example.com", "password": DEFAULT_PASSWORD}
    )
    body = response.json()

    assert response.status_code == 200
    assert body["tokenType"] == "bearer"
    assert body["userId"] == created["id"]
    assert body["name"] == "Alex"


def test_duplicate_email_conflicts(client: TestClient) -> None:
    register(client)

    response = client.post(
        "/users/",
        json={"email": "sam@example.com", "name": "Other", "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 409


def test_weak_password_rejected(client: TestClient) -> None:
    response = client.post("/users/", json={"email": "weak@example.com", "password": "password"})

    assert response.status_code == 422


def test_login_with_wrong_password(client: TestClient) -> None:
    register(client)

    response = client.post("/auth/login", json={"email": "sam@example.com", "password": "Wr0ngPassword"})

    assert response.status_code == 401


def test_form_token_endpoint(client: TestClient) -> None:
    register(client)

    response = client.post(
        "/auth/token", data={"username": "sam@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["accessToken"]


def test_protected_routes_require_token(client: TestClient) -> None:
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_profile_update_and_password_change(client: TestClient, auth_headers: dict) -> None:
    response = client.patch("/users/me", json={"name": "Samantha"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Samantha"

    wrong = client.post(
        "/users/me/password",
        json={"currentPassword": "N0tMyPassword", "newPassword": "An0therSecret"},
        headers=auth_headers,
    )
    assert wrong.status_code == 400

    changed = client.post(
        "/users/me/password",
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "An0therSecret"},
        headers=auth_headers,
    )
    assert changed.status_code == 200

    relogin = client.post(
        "/auth/login", json={"email": "sam@example.com", "password": "An0therSecret"}
    )
    assert relogin.status_code == 200


def test_delete_account_removes_user_data(client: TestClient, auth_headers: dict) -> None:
    client.post("/mood/log", json={"mood_score": 6, "emotions": ["calm"]}, headers=auth_headers)
    client.post("/goals/", json={"goal_text": "Walk daily"}, headers=auth_headers)
    client.post("/chat/", json={"messages": [{"role": "user", "content": "Hello"}]}, headers=auth_headers)

    response = client.delete("/users/me", headers=auth_headers)

    assert response.status_code == 204
    assert client.get("/users/me", headers=auth_headers).status_code == 401

    register(client)
    headers = login_headers(client)
    assert client.get("/mood/history", headers=headers).json()["logs"] == []
    assert client.get("/goals/", headers=headers).json() == []
    assert client.get("/conversations/", headers=headers).json() == []


def test_health_and_metrics(client: TestClient) -> None:
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["checks"]["database"] == "ok"

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text
