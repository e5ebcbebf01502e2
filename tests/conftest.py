from __future__ import annotations

from typing import Callable

import numpy as np
import pytest


def _periodic_tone(period: int, size: int = 4096, amplitude: float = 0.5) -> np.ndarray:
    # Tiling one cycle keeps the signal exactly periodic at an integer lag.
    k = np.arange(period, dtype=np.float64)
    cycle = amplitude * np.sin(2.0 * np.pi * k / period)
    reps = -(-size // period)
    return np.tile(cycle, reps)[:size].astype(np.float32)


@pytest.fixture
def tone() -> Callable[..., np.ndarray]:
    return _periodic_tone
