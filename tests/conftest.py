"""Shared fixtures: a throwaway SQLite database and a scripted LLM."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
import sys
import tempfile
from typing import Any, Iterable

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_TMP_DIR = Path(tempfile.mkdtemp(prefix="echowell-tests-"))
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["DB_SERVERLESS"] = "true"
os.environ["LOG_FILE"] = str(_TMP_DIR / "app.log")
os.environ["VOICE_LOG_FILE"] = str(_TMP_DIR / "voice.log")
os.environ["TRANSCRIPT_LOG_FILE"] = str(_TMP_DIR / "transcripts.log")
os.environ["JWT_SECRET"] = "test-secret"

from fastapi.testclient import TestClient  # noqa: E402

from echowell.database import engine  # noqa: E402
from echowell.main import app  # noqa: E402
from echowell.models import Base  # noqa: E402
from echowell.services.rate_limiter import ai_rate_limiter  # noqa: E402

DEFAULT_PASSWORD = "Sup3rSecret"


class FakeLlmClient:
    """Stands in for Bedrock; replays scripted replies then returns None."""

    def __init__(self, replies: Iterable[str | None] = ()) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def invoke(self, **kwargs: Any) -> str | None:
        self.calls.append(kwargs)
        if self.replies:
            return self.replies.pop(0)
        return None


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_database() -> None:
    asyncio.run(_reset_schema())
    ai_rate_limiter.clear()
    yield
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_llm(monkeypatch: pytest.MonkeyPatch) -> FakeLlmClient:
    client = FakeLlmClient()
    monkeypatch.setattr("echowell.services.llm_client._DEFAULT_CLIENT", client)
    return client


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def register(client: TestClient, email: str = "sam@example.com", name: str = "Sam") -> dict:
    response = client.post(
        "/users/",
        json={"email": email, "name": name, "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login_headers(client: TestClient, email: str = "sam@example.com") -> dict[str, str]:
    response = client.post("/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    register(client)
    return login_headers(client)
