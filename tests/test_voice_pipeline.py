"""Classification rules and the end-to-end voice tone analysis."""

from __future__ import annotations

import asyncio
from dataclasses import replace

import numpy as np
import pytest

from echowell.pipelines.voice import (
    AudioFeatures,
    VoiceAnalysisPipeline,
    adjust_response_for_tone,
    analyze_voice_tone,
    calculate_confidence,
    combine_analysis,
    generate_recommendations,
    rate_transcript,
)
from echowell.services.audio_codec import AudioDecodingError
from echowell.services.response_contract import EmotionRating
from echowell.services.transcribe import TranscriptionError, TranscriptionResult

SAMPLE_RATE = 16000


class FakeTranscriber:
    def __init__(self, transcript: str = "", error: Exception | None = None) -> None:
        self.transcript = transcript
        self.error = error
        self.received: list[bytes] = []

    async def transcribe_pcm(self, pcm_data: bytes) -> TranscriptionResult:
        self.received.append(pcm_data)
        if self.error:
            raise self.error
        return TranscriptionResult(transcript=self.transcript, language_code="en-US")


def _sine_pcm(seconds: float = 1.0) -> bytes:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return (0.4 * np.sin(2 * np.pi * 180 * t) * 32767).astype("<i2").tobytes()


def test_confidence_defaults_when_rating_has_none() -> None:
    rating = EmotionRating(tone="calm")

    assert calculate_confidence(rating, AudioFeatures.default()) == pytest.approx(0.7)


def test_confidence_discounted_for_unstable_halting_voice() -> None:
    rating = EmotionRating(tone="sad", confidence=0.8)
    features = replace(AudioFeatures.default(), jitter=0.2, pause_frequency=12)

    assert calculate_confidence(rating, features) == pytest.approx(0.8 * 0.9 * 0.95)


def test_recommendations_add_voice_cues() -> None:
    features = replace(
        AudioFeatures.default(),
        jitter=0.2,
        pause_frequency=16,
        energy_level="low",
        speech_rate=190,
    )

    recommendations = generate_recommendations("sad", features)

    assert recommendations[0] == "Express empathy and validation"
    assert "Voice shows stress indicators - use extra calming techniques" in recommendations
    assert "Frequent pauses suggest hesitation - be patient and encouraging" in recommendations
    assert "Low energy detected - consider gentle encouragement" in recommendations
    assert "Fast speech rate - suggest slowing down for clarity" in recommendations


def test_low_energy_is_expected_when_calm() -> None:
    features = replace(AudioFeatures.default(), energy_level="low")

    assert "Low energy detected - consider gentle encouragement" not in generate_recommendations(
        "calm", features
    )


def test_combine_analysis_fills_emotional_state_defaults() -> None:
    result = combine_analysis(EmotionRating.neutral(), AudioFeatures.default())

    assert result.tone == "neutral"
    assert result.confidence == pytest.approx(0.5)
    assert (result.emotional_state.valence, result.emotional_state.arousal) == (0.0, 0.5)
    assert result.recommendations == [
        "Respond with empathy and understanding",
        "Be supportive and non-judgmental",
        "Listen actively",
    ]


def test_adjust_response_for_tone_adds_prefix_and_pacing() -> None:
    features = replace(AudioFeatures.default(), jitter=0.2, pause_frequency=20)
    result = combine_analysis(EmotionRating(tone="anxious", confidence=0.9), features)

    adjusted = adjust_response_for_tone("Let's breathe together.", result)

    assert adjusted == (
        "(Speaking in a calm, reassuring tone) Let's breathe together."
        " (Using extra gentle, steady voice) (Speaking slowly to match your pace)"
    )


def test_neutral_tone_response_is_unchanged() -> None:
    result = combine_analysis(EmotionRating.neutral(), AudioFeatures.default())

    assert adjust_response_for_tone("Hello.", result) == "Hello."


def test_rate_transcript_skips_llm_for_empty_text(fake_llm) -> None:
    rating = asyncio.run(rate_transcript("   "))

    assert rating == EmotionRating.neutral()
    assert fake_llm.calls == []


def test_rate_transcript_retries_invalid_json(fake_llm) -> None:
    fake_llm.replies = ["not json", '```json\n{"tone": "Anxious", "confidence": 0.85, "valence": -2}\n```']

    rating = asyncio.run(rate_transcript("I can't stop worrying about the exam"))

    assert rating.tone == "anxious"
    assert rating.confidence == pytest.approx(0.85)
    assert rating.valence == -1.0
    assert len(fake_llm.calls) == 2
    assert fake_llm.calls[0]["temperature"] == 0.2


def test_rate_transcript_gives_up_after_retries(fake_llm) -> None:
    fake_llm.replies = ["nope", "still nope", "never json", '{"tone": "sad"}']

    rating = asyncio.run(rate_transcript("Everything feels heavy"))

    assert rating == EmotionRating.neutral()
    assert len(fake_llm.calls) == 3


def test_analyze_voice_tone_combines_all_stages(monkeypatch: pytest.MonkeyPatch, fake_llm) -> None:
    pcm = _sine_pcm()

    async def fake_convert(audio_bytes: bytes, sample_rate: int) -> bytes:
        assert sample_rate == SAMPLE_RATE
        return pcm

    monkeypatch.setattr("echowell.pipelines.voice.analysis.convert_to_pcm", fake_convert)
    fake_llm.replies = ['{"tone": "stressed", "confidence": 0.9, "arousal": 0.8, "urgency": 0.3}']
    transcriber = FakeTranscriber("There is too much on my plate this week")

    result = asyncio.run(analyze_voice_tone(b"webm-bytes", transcribe_service=transcriber))

    assert transcriber.received == [pcm]
    assert result.tone == "stressed"
    assert result.transcript == "There is too much on my plate this week"
    assert result.emotional_state.arousal == pytest.approx(0.8)
    assert result.urgency == pytest.approx(0.3)
    assert result.audio_features.duration == pytest.approx(1.0)
    assert result.pitch == pytest.approx(180, rel=0.03)
    assert "Provide grounding techniques" in result.recommendations


def test_analyze_voice_tone_degrades_when_decoding_fails(monkeypatch: pytest.MonkeyPatch, fake_llm) -> None:
    async def failing_convert(audio_bytes: bytes, sample_rate: int) -> bytes:
        raise AudioDecodingError("ffmpeg missing")

    monkeypatch.setattr("echowell.pipelines.voice.analysis.convert_to_pcm", failing_convert)
    transcriber = FakeTranscriber("unused")

    result = asyncio.run(analyze_voice_tone(b"garbage", transcribe_service=transcriber))

    assert transcriber.received == []
    assert fake_llm.calls == []
    assert result.tone == "neutral"
    assert result.confidence == pytest.approx(0.5)
    assert result.audio_features == AudioFeatures.default()


def test_analyze_voice_tone_survives_transcription_failure(monkeypatch: pytest.MonkeyPatch, fake_llm) -> None:
    async def fake_convert(audio_bytes: bytes, sample_rate: int) -> bytes:
        return _sine_pcm(0.5)

    monkeypatch.setattr("echowell.pipelines.voice.analysis.convert_to_pcm", fake_convert)
    transcriber = FakeTranscriber(error=TranscriptionError("stream closed"))

    result = asyncio.run(analyze_voice_tone(b"webm", transcribe_service=transcriber))

    assert result.transcript == ""
    assert result.tone == "neutral"
    assert result.audio_features.duration == pytest.approx(0.5)


def test_pipeline_description_lists_stages_in_order() -> None:
    stages = VoiceAnalysisPipeline.describe()

    assert [stage.order for stage in stages] == [1, 2, 3, 4, 5, 6]
    assert stages[0].module == "echowell.pipelines.voice.ingestion"
