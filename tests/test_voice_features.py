"""Acoustic feature extraction over synthetic waveforms."""

from __future__ import annotations

import numpy as np
import pytest

from echowell.pipelines.voice import AudioFeatures, extract_features
from echowell.pipelines.voice.features import (
    _frames,
    average_volume,
    energy_level,
    estimate_pitch,
    jitter,
    pause_frequency,
    shimmer,
    speech_rate,
)
from echowell.services.audio_codec import pcm16_to_float

SAMPLE_RATE = 16000


def _tone(frequency: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds), dtype=np.float32)


def test_pcm16_to_float_scales_into_unit_range() -> None:
    pcm = np.array([0, 16384, -32768], dtype="<i2").tobytes() + b"\x01"

    samples = pcm16_to_float(pcm)

    assert samples.tolist() == [0.0, 0.5, -1.0]


def test_average_volume_is_rms() -> None:
    assert average_volume(_tone(200, 1.0)) == pytest.approx(0.5 / np.sqrt(2), rel=1e-3)
    assert average_volume(_silence(0.5)) == 0.0


def test_estimate_pitch_finds_fundamental() -> None:
    assert estimate_pitch(_tone(200, 0.5), SAMPLE_RATE) == pytest.approx(200, rel=0.02)


def test_estimate_pitch_defaults_without_periodicity() -> None:
    assert estimate_pitch(_silence(0.5), SAMPLE_RATE) == 150.0


def test_pause_frequency_counts_gaps_between_speech() -> None:
    samples = np.concatenate([_tone(200, 0.2), _silence(0.3), _tone(200, 0.2)])

    assert pause_frequency(samples, SAMPLE_RATE) == 1


def test_pause_frequency_ignores_trailing_and_short_silence() -> None:
    trailing = np.concatenate([_tone(200, 0.2), _silence(0.5)])
    short_gap = np.concatenate([_tone(200, 0.2), _silence(0.05), _tone(200, 0.2)])

    assert pause_frequency(trailing, SAMPLE_RATE) == 0
    assert pause_frequency(short_gap, SAMPLE_RATE) == 0


def test_speech_rate_scales_with_voiced_fraction() -> None:
    half_voiced = np.concatenate([_tone(200, 0.5), _silence(0.5)])

    rate = speech_rate(half_voiced, 1.0)

    assert 90 < rate <= 100
    assert speech_rate(half_voiced, 0.0) == 0.0


def test_steady_tone_has_no_jitter_or_shimmer() -> None:
    samples = _tone(200, 1.0)

    assert jitter(samples, SAMPLE_RATE) == pytest.approx(0.0, abs=1e-3)
    assert shimmer(samples, SAMPLE_RATE) == pytest.approx(0.0, abs=1e-2)


def test_amplitude_wobble_raises_jitter() -> None:
    samples = np.concatenate([_tone(200, 0.1, 0.1), _tone(200, 0.1, 0.8)] * 5)

    assert jitter(samples, SAMPLE_RATE) > 0.3
    assert shimmer(samples, SAMPLE_RATE) > 0.3


def test_clip_shorter_than_one_window_has_no_jitter_or_shimmer() -> None:
    samples = _tone(200, 100 / SAMPLE_RATE)

    assert jitter(samples, SAMPLE_RATE) == 0.0
    assert shimmer(samples, SAMPLE_RATE) == 0.0


def test_silence_has_no_jitter_or_shimmer() -> None:
    samples = _silence(1.0)

    assert jitter(samples, SAMPLE_RATE) == 0.0
    assert shimmer(samples, SAMPLE_RATE) == 0.0


@pytest.mark.parametrize(("extra", "expected"), [(0, 1), (1, 2)])
def test_windows_start_strictly_before_last_full_window(extra: int, expected: int) -> None:
    window = int(SAMPLE_RATE * 0.02)
    samples = np.ones(2 * window + extra, dtype=np.float32)

    frames = _frames(samples, SAMPLE_RATE, 0.02)

    assert frames.shape == (expected, window)


@pytest.mark.parametrize(
    ("volume", "variation", "rate", "expected"),
    [
        (1.0, 1.0, 200.0, "high"),
        (0.5, 0.5, 100.0, "medium"),
        (0.1, 0.05, 20.0, "low"),
    ],
)
def test_energy_level_bands(volume: float, variation: float, rate: float, expected: str) -> None:
    assert energy_level(volume, variation, rate) == expected


def test_extract_features_on_empty_audio_returns_defaults() -> None:
    assert extract_features(np.array([], dtype=np.float32), SAMPLE_RATE) == AudioFeatures.default()


def test_extract_features_reports_duration_and_pitch() -> None:
    features = extract_features(_tone(220, 2.0), SAMPLE_RATE)

    assert features.duration == pytest.approx(2.0)
    assert features.pitch == pytest.approx(220, rel=0.03)
    assert features.pause_frequency == 0
    assert features.energy_level in {"low", "medium", "high"}
