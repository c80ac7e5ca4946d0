"""Voice endpoints with the analysis pipeline and AWS services stubbed out."""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from echowell.main import app
from echowell.pipelines.voice import AudioFeatures, combine_analysis
from echowell.services.crisis import CRISIS_RESPONSE
from echowell.services.response_contract import EmotionRating
from echowell.services.speech import SpeechResult, SpeechSynthesisError, get_speech_service
from echowell.services.transcribe import (
    TranscriptionError,
    TranscriptionResult,
    get_transcribe_service,
)

AUDIO = {"audio_file": ("recording.webm", b"\x1aE\xdf\xa3fake-webm", "audio/webm")}


class FakeTranscribeService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def transcribe_audio(self, audio_bytes: bytes) -> TranscriptionResult:
        if self.error:
            raise self.error
        return TranscriptionResult(transcript="Hello from the microphone", language_code="en-US")


class FakeSpeechService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[tuple] = []

    async def synthesize(self, text, *, voice_id=None, speed=1.0) -> SpeechResult:
        self.requests.append((text, voice_id, speed))
        if self.error:
            raise self.error
        return SpeechResult(audio_bytes=b"ID3-mp3", media_type="audio/mpeg", voice_id=voice_id or "Joanna")

    async def synthesize_for_tone(self, text, tone) -> SpeechResult:
        return await self.synthesize(text, voice_id=f"voice-for-{tone}", speed=1.0)


@pytest.fixture
def speech_service() -> FakeSpeechService:
    service = FakeSpeechService()
    app.dependency_overrides[get_speech_service] = lambda: service
    app.dependency_overrides[get_transcribe_service] = lambda: FakeTranscribeService()
    return service


@pytest.fixture
def tone_result(monkeypatch: pytest.MonkeyPatch):
    state = {"transcript": "I keep worrying about my exams", "tone": "anxious"}

    async def fake_analyze(audio_bytes: bytes, *, transcribe_service=None):
        rating = EmotionRating(tone=state["tone"], confidence=0.8, valence=-0.4, arousal=0.7)
        return combine_analysis(rating, AudioFeatures.default(), state["transcript"])

    monkeypatch.setattr("echowell.controllers.voice.analyze_voice_tone", fake_analyze)
    return state


def test_analyze_tone_returns_result_and_logs(
    client: TestClient, auth_headers: dict, speech_service, tone_result
) -> None:
    response = client.post("/voice/analyze-tone", files=AUDIO, headers=auth_headers)
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["tone_result"]["tone"] == "anxious"
    assert body["tone_result"]["confidence"] == pytest.approx(0.8)
    assert body["tone_result"]["emotional_state"]["valence"] == pytest.approx(-0.4)
    assert "Suggest breathing exercises" in body["tone_result"]["recommendations"]

    logs = client.get("/voice/tone-logs", headers=auth_headers).json()
    assert len(logs) == 1
    assert logs[0]["tone_detected"] == "anxious"
    assert logs[0]["audio_features"]["pause_frequency"] == 5
    assert logs[0]["conversation_id"] is None


def test_analyze_tone_rejects_unsupported_and_empty_uploads(
    client: TestClient, auth_headers: dict, speech_service, tone_result
) -> None:
    text_file = {"audio_file": ("notes.txt", b"hello", "text/plain")}
    empty = {"audio_file": ("empty.webm", b"", "audio/webm")}

    assert client.post("/voice/analyze-tone", files=text_file, headers=auth_headers).status_code == 400
    assert client.post("/voice/analyze-tone", files=empty, headers=auth_headers).status_code == 400


def test_speech_to_text(client: TestClient, auth_headers: dict, speech_service) -> None:
    response = client.post("/voice/speech-to-text", files=AUDIO, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"text": "Hello from the microphone", "language_code": "en-US"}


def test_speech_to_text_failure_is_bad_gateway(client: TestClient, auth_headers: dict) -> None:
    app.dependency_overrides[get_transcribe_service] = lambda: FakeTranscribeService(
        TranscriptionError("boom")
    )

    response = client.post("/voice/speech-to-text", files=AUDIO, headers=auth_headers)

    assert response.status_code == 502


def test_text_to_speech_uses_tone_voice(client: TestClient, auth_headers: dict, speech_service) -> None:
    response = client.post(
        "/voice/text-to-speech",
        json={"text": "Take a slow breath with me.", "tone": "happy"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3-mp3"
    assert speech_service.requests == [("Take a slow breath with me.", "Salli", 1.05)]


def test_text_to_speech_failure_is_bad_gateway(client: TestClient, auth_headers: dict) -> None:
    app.dependency_overrides[get_speech_service] = lambda: FakeSpeechService(
        SpeechSynthesisError("throttled")
    )

    response = client.post("/voice/text-to-speech", json={"text": "Hello"}, headers=auth_headers)

    assert response.status_code == 502


def test_voice_conversation_round_trip(
    client: TestClient, auth_headers: dict, speech_service, tone_result, fake_llm
) -> None:
    fake_llm.replies = ["Exams can feel huge. What subject worries you most?"]

    response = client.post(
        "/voice/conversation",
        files=AUDIO,
        data={"messages": '[{"role": "assistant", "content": "Hi there"}]'},
        headers=auth_headers,
    )
    body = response.json()

    assert response.status_code == 200
    assert body["user_text"] == "I keep worrying about my exams"
    assert body["ai_response"] == (
        "(Speaking in a calm, reassuring tone) Exams can feel huge. What subject worries you most?"
    )
    assert body["tone_detected"] == "anxious"
    assert body["audio_url"] == "data:audio/mpeg;base64," + base64.b64encode(b"ID3-mp3").decode()
    assert body["crisis"] is False
    assert "DETECTED TONE: Anxious (80% confidence)" in fake_llm.calls[0]["system_prompt"]
    assert "Assistant: Hi there" in fake_llm.calls[0]["user_prompt"]

    detail = client.get(f"/conversations/{body['conversation_id']}", headers=auth_headers).json()
    assert [m["content"] for m in detail["messages"]] == [body["user_text"], body["ai_response"]]


def test_voice_conversation_without_transcript_or_speech(
    client: TestClient, auth_headers: dict, tone_result
) -> None:
    tone_result["transcript"] = ""
    app.dependency_overrides[get_transcribe_service] = lambda: FakeTranscribeService()
    app.dependency_overrides[get_speech_service] = lambda: FakeSpeechService(
        SpeechSynthesisError("no voice")
    )

    body = client.post("/voice/conversation", files=AUDIO, headers=auth_headers).json()

    assert body["user_text"] == "I had trouble understanding your voice message."
    assert body["audio_url"] == ""
    assert body["ai_response"].startswith("(Speaking in a calm, reassuring tone) ")


def test_voice_conversation_crisis(
    client: TestClient, auth_headers: dict, speech_service, tone_result, fake_llm
) -> None:
    tone_result["transcript"] = "I want to end it all"

    body = client.post("/voice/conversation", files=AUDIO, headers=auth_headers).json()

    assert body["crisis"] is True
    assert body["ai_response"] == CRISIS_RESPONSE
    assert fake_llm.calls == []


def test_voice_conversation_rejects_bad_messages(
    client: TestClient, auth_headers: dict, speech_service, tone_result
) -> None:
    response = client.post(
        "/voice/conversation",
        files=AUDIO,
        data={"messages": "not-json"},
        headers=auth_headers,
    )

    assert response.status_code == 400
