from __future__ import annotations

import numpy as np
import pytest

from tuner_pro.frames import AudioFrame
from tuner_pro.pitch import (
    UNDETECTED,
    PitchEstimator,
    PitchEstimatorConfig,
    _pick_lag,
    estimate_pitch,
)

SAMPLE_RATE = 44_100


@pytest.mark.parametrize("period", [100, 200, 535, 1000, 2000])
def test_estimator_detects_stable_tone(tone, period: int) -> None:
    freq = SAMPLE_RATE / period
    hz = estimate_pitch(tone(period), SAMPLE_RATE)
    assert hz != UNDETECTED
    assert abs(hz - freq) / freq < 0.01


def test_estimator_uses_frame_sample_rate(tone) -> None:
    estimator = PitchEstimator()
    hz = estimator.process(AudioFrame(tone(40, size=2048), 8_000))
    assert hz == pytest.approx(200.0)


@pytest.mark.parametrize("size", [16, 1024, 4096])
def test_silence_is_undetected(size: int) -> None:
    assert estimate_pitch(np.zeros(size, dtype=np.float32), SAMPLE_RATE) == UNDETECTED


def test_quiet_tone_below_gate_is_undetected(tone) -> None:
    quiet = tone(100, amplitude=0.005)
    assert estimate_pitch(quiet, SAMPLE_RATE) == UNDETECTED


def test_noise_gate_is_configurable(tone) -> None:
    cfg = PitchEstimatorConfig(silence_rms=0.5)
    assert estimate_pitch(tone(100, amplitude=0.3), SAMPLE_RATE, cfg) == UNDETECTED


def test_white_noise_is_undetected() -> None:
    rng = np.random.default_rng(7)
    noise = rng.normal(0.0, 0.5, size=4096).astype(np.float32)
    assert estimate_pitch(noise, SAMPLE_RATE) == UNDETECTED


def test_degenerate_frames_are_undetected() -> None:
    assert estimate_pitch(np.zeros(0, dtype=np.float32), SAMPLE_RATE) == UNDETECTED
    assert estimate_pitch(np.array([0.5, -0.5, 0.5]), SAMPLE_RATE) == UNDETECTED
    bad = np.full(1024, 0.5, dtype=np.float32)
    bad[10] = np.nan
    assert estimate_pitch(bad, SAMPLE_RATE) == UNDETECTED


def test_non_positive_sample_rate_is_rejected(tone) -> None:
    with pytest.raises(ValueError):
        estimate_pitch(tone(100), 0)


def test_estimate_is_positive_or_sentinel(tone) -> None:
    rng = np.random.default_rng(3)
    frames = [tone(p) for p in (64, 150, 733)] + [rng.normal(0, 0.2, 2048) for _ in range(3)]
    for frame in frames:
        hz = estimate_pitch(frame, SAMPLE_RATE)
        assert hz == UNDETECTED or hz > 0.0
        assert not np.isnan(hz)


def test_pick_lag_requires_rising_edge() -> None:
    # Lag 1 is never picked, even when it scores above the threshold.
    scores = np.array([0.0, 0.99, 0.95, 0.97, 0.96, 0.2])
    assert _pick_lag(scores, 0.9) == (3, 0.97)


def test_pick_lag_ignores_falling_scores() -> None:
    scores = np.array([0.0, 0.98, 0.96, 0.94, 0.92])
    assert _pick_lag(scores, 0.9) == (-1, 0.0)


def test_pick_lag_keeps_first_of_equal_peaks() -> None:
    scores = np.array([0.0, 0.1, 1.0, 0.1, 0.2, 1.0, 0.3])
    assert _pick_lag(scores, 0.9) == (2, 1.0)


def test_non_integer_period_can_lock_onto_subharmonic() -> None:
    # 440 Hz has a period of 100.23 samples at 44.1 kHz. A later multiple of
    # the period lines up more closely than the first one and wins the scan,
    # so the rising-edge rule reports a subharmonic instead of 440 Hz.
    t = np.arange(4096, dtype=np.float64) / SAMPLE_RATE
    sine = (0.5 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
    hz = estimate_pitch(sine, SAMPLE_RATE)
    assert hz != UNDETECTED
    assert hz < 440.0 * 0.99
    ratio = 440.0 / hz
    assert round(ratio) >= 2
    assert abs(ratio - round(ratio)) < 0.1
