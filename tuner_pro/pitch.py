from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tuner_pro.frames import AudioFrame

UNDETECTED = -1.0


@dataclass(frozen=True)
class PitchEstimatorConfig:
    silence_rms: float = 0.01
    correlation_threshold: float = 0.9
    min_correlation: float = 0.01


class PitchEstimator:
    """
    Time-domain autocorrelation pitch estimator.

    Strategy:
    - Gate by RMS (near-silence has no pitch).
    - Score every lag up to half the frame by the mean absolute difference
      between the frame and its lagged copy.
    - Keep the best score found on a rising edge above the threshold.
    - Frequency is sample_rate / best lag.
    """

    def __init__(self, config: PitchEstimatorConfig | None = None) -> None:
        self._cfg = config or PitchEstimatorConfig()

    def process(self, frame: AudioFrame) -> float:
        return estimate_pitch(frame.samples, frame.sample_rate, self._cfg)


def estimate_pitch(
    samples: np.ndarray, sample_rate: int, config: PitchEstimatorConfig | None = None
) -> float:
    """Return the fundamental frequency of ``samples`` in Hz, or ``UNDETECTED``."""
    cfg = config or PitchEstimatorConfig()
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate!r}")

    x = np.asarray(samples, dtype=np.float64).reshape(-1)
    if x.size == 0 or not np.all(np.isfinite(x)):
        return UNDETECTED

    rms = float(np.sqrt(np.mean(np.square(x))))
    if rms < cfg.silence_rms:
        return UNDETECTED

    scores = _lag_scores(x)
    best_lag, best_score = _pick_lag(scores, cfg.correlation_threshold)
    if best_lag <= 0 or best_score <= cfg.min_correlation:
        return UNDETECTED
    return float(sample_rate) / float(best_lag)


def _lag_scores(x: np.ndarray) -> np.ndarray:
    # scores[lag] for lag in [0, M); scores[0] is never considered.
    m = int(x.size) // 2
    scores = np.zeros(max(m, 1), dtype=np.float64)
    if m < 2:
        return scores
    head = x[:m]
    for lag in range(1, m):
        scores[lag] = 1.0 - float(np.sum(np.abs(head - x[lag : lag + m]))) / m
    return scores


def _pick_lag(scores: np.ndarray, threshold: float) -> tuple[int, float]:
    best_lag = -1
    best_score = 0.0
    # Baseline of 1 means lag 1 can never be on a rising edge.
    last = 1.0
    for lag in range(1, int(scores.size)):
        score = float(scores[lag])
        if score > threshold and score > last and score > best_score:
            best_score = score
            best_lag = lag
        last = score
    return best_lag, best_score
