"""Acoustic feature extraction stage of the voice pipeline.

All measurements operate on mono float samples in [-1, 1]:

* ``average_volume`` is the RMS of the signal and ``volume_variation`` the
  root-mean-square deviation of the samples from that RMS value.
* ``pause_frequency`` counts silent runs longer than the minimum pause that
  end in speech; a trailing silence is not a pause.
* ``speech_rate`` approximates words per minute from the voiced fraction.
* ``pitch`` is the autocorrelation peak over 80-400 Hz lags.
* ``jitter`` and ``shimmer`` are coefficients of variation of the per-window
  RMS and peak amplitude over 20 ms windows.
"""

from __future__ import annotations

import logging

import numpy as np
from fastapi.concurrency import run_in_threadpool

from echowell.config.settings import settings
from echowell.services.audio_codec import pcm16_to_float

from .types import AudioFeatures

logger = logging.getLogger("echowell.pipelines.voice")

DEFAULT_PITCH_HZ = 150.0
_MIN_PITCH_HZ = 80
_MAX_PITCH_HZ = 400


def average_volume(samples: np.ndarray) -> float:
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def volume_variation(samples: np.ndarray) -> float:
    mean = average_volume(samples)
    return float(np.sqrt(np.mean(np.square(samples - mean, dtype=np.float64))))


def pause_frequency(
    samples: np.ndarray,
    sample_rate: int,
    *,
    threshold: float = 0.01,
    min_pause_seconds: float = 0.1,
) -> int:
    silent = np.abs(samples) < threshold
    edges = np.diff(np.concatenate(([0], silent.astype(np.int8), [0])))
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    lengths = ends - starts
    closed = ends < len(samples)
    return int(np.count_nonzero((lengths > sample_rate * min_pause_seconds) & closed))


def speech_rate(samples: np.ndarray, duration: float, *, threshold: float = 0.01) -> float:
    if duration <= 0:
        return 0.0
    voiced_ratio = np.count_nonzero(np.abs(samples) > threshold) / len(samples)
    return float(voiced_ratio * 200 / duration)


def estimate_pitch(samples: np.ndarray, sample_rate: int) -> float:
    """Return ``sample_rate / lag`` for the lag with the strongest positive autocorrelation."""

    min_lag = int(sample_rate / _MAX_PITCH_HZ)
    max_lag = int(sample_rate / _MIN_PITCH_HZ)
    signal = samples.astype(np.float64)

    best_lag = 0
    best_correlation = 0.0
    for lag in range(max(1, min_lag), min(max_lag, len(signal))):
        correlation = float(np.dot(signal[:-lag], signal[lag:]))
        if correlation > best_correlation:
            best_correlation = correlation
            best_lag = lag

    return sample_rate / best_lag if best_lag > 0 else DEFAULT_PITCH_HZ


def _frames(samples: np.ndarray, sample_rate: int, window_seconds: float) -> np.ndarray:
    """Non-overlapping windows whose start lies strictly before ``len - window``."""

    window = int(sample_rate * window_seconds)
    if window <= 0 or len(samples) <= window:
        return np.empty((0, max(window, 1)), dtype=np.float64)
    count = -(-(len(samples) - window) // window)
    return samples[: count * window].astype(np.float64).reshape(count, window)


def _coefficient_of_variation(values: np.ndarray) -> float:
    if values.size == 0:
        return 0.0
    mean = float(np.mean(values))
    if mean == 0:
        return 0.0
    return float(np.std(values) / mean)


def jitter(samples: np.ndarray, sample_rate: int, window_seconds: float = 0.02) -> float:
    frames = _frames(samples, sample_rate, window_seconds)
    return _coefficient_of_variation(np.sqrt(np.mean(np.square(frames), axis=1)))


def shimmer(samples: np.ndarray, sample_rate: int, window_seconds: float = 0.02) -> float:
    frames = _frames(samples, sample_rate, window_seconds)
    return _coefficient_of_variation(np.max(np.abs(frames), axis=1))


def energy_level(volume: float, variation: float, rate: float) -> str:
    score = volume * 0.4 + variation * 0.3 + (rate / 200) * 0.3
    if score > 0.7:
        return "high"
    if score > 0.4:
        return "medium"
    return "low"


def extract_features(samples: np.ndarray, sample_rate: int | None = None) -> AudioFeatures:
    """Compute every acoustic feature for a decoded waveform."""

    sample_rate = sample_rate or settings.voice.sample_rate
    if samples.size == 0:
        return AudioFeatures.default()

    threshold = settings.voice.silence_threshold
    window_seconds = settings.voice.window_seconds
    duration = len(samples) / sample_rate

    volume = average_volume(samples)
    variation = volume_variation(samples)
    rate = speech_rate(samples, duration, threshold=threshold)

    return AudioFeatures(
        pitch=float(estimate_pitch(samples, sample_rate)),
        speech_rate=rate,
        energy_level=energy_level(volume, variation, rate),
        average_volume=volume,
        volume_variation=variation,
        pause_frequency=pause_frequency(
            samples,
            sample_rate,
            threshold=threshold,
            min_pause_seconds=settings.voice.min_pause_seconds,
        ),
        jitter=jitter(samples, sample_rate, window_seconds),
        shimmer=shimmer(samples, sample_rate, window_seconds),
        duration=duration,
    )


async def extract_features_from_pcm(pcm_bytes: bytes, sample_rate: int) -> AudioFeatures:
    """Run feature extraction off the event loop; empty audio yields defaults."""

    if not pcm_bytes:
        logger.warning("No decoded samples available; using default audio features")
        return AudioFeatures.default()

    samples = pcm16_to_float(pcm_bytes)
    features = await run_in_threadpool(extract_features, samples, sample_rate)
    logger.info(
        "Audio features duration=%.2fs pitch=%.1fHz rate=%.1f energy=%s pauses=%s jitter=%.3f shimmer=%.3f",
        features.duration,
        features.pitch,
        features.speech_rate,
        features.energy_level,
        features.pause_frequency,
        features.jitter,
        features.shimmer,
    )
    return features


__all__ = [
    "average_volume",
    "energy_level",
    "estimate_pitch",
    "extract_features",
    "extract_features_from_pcm",
    "jitter",
    "pause_frequency",
    "shimmer",
    "speech_rate",
    "volume_variation",
]
