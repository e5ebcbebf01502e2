from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np

from tuner_pro.errors import FrameSourceError

DEFAULT_FRAME_SIZE = 4096


@dataclass(frozen=True, eq=False)
class AudioFrame:
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate!r}")
        samples = np.asarray(self.samples, dtype=np.float32).reshape(-1)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def size(self) -> int:
        return int(self.samples.size)


class AudioFrameSource(Protocol):
    def start(self) -> Any: ...

    def current_frame(self, handle: Any) -> AudioFrame: ...

    def stop(self, handle: Any) -> None: ...


class BufferedFrameSource:
    """
    Frame source fed by pushed sample blocks.

    current_frame() always returns the most recent frame_size samples, zero
    padded at the front until enough audio has arrived, the way a browser
    analyser node exposes its time-domain window.
    """

    def __init__(self, sample_rate: int, frame_size: int = DEFAULT_FRAME_SIZE) -> None:
        if frame_size < 2:
            raise ValueError(f"frame_size must be at least 2, got {frame_size!r}")
        self.sample_rate = int(sample_rate)
        self.frame_size = int(frame_size)
        self._lock = threading.Lock()
        self._buffer = np.zeros(self.frame_size, dtype=np.float32)
        self._generation = 0
        self._active = False

    @property
    def is_running(self) -> bool:
        return self._active

    def start(self) -> int:
        with self._lock:
            self._generation += 1
            self._active = True
            self._buffer[:] = 0.0
            return self._generation

    def current_frame(self, handle: int) -> AudioFrame:
        with self._lock:
            if not self._active or handle != self._generation:
                raise FrameSourceError("frame source is not running")
            samples = self._buffer.copy()
        return AudioFrame(samples, self.sample_rate)

    def stop(self, handle: int) -> None:
        with self._lock:
            if handle == self._generation:
                self._active = False

    def push(self, block: np.ndarray) -> None:
        x = np.asarray(block, dtype=np.float32).reshape(-1)
        n = int(x.size)
        if n == 0:
            return
        with self._lock:
            if n >= self.frame_size:
                self._buffer[:] = x[-self.frame_size :]
                return
            self._buffer[:-n] = self._buffer[n:]
            self._buffer[-n:] = x


class SignalFrameSource:
    """Replays a finite recording, one frame per call, hop_size samples apart."""

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        *,
        frame_size: int = DEFAULT_FRAME_SIZE,
        hop_size: int = 1024,
    ) -> None:
        if hop_size <= 0:
            raise ValueError(f"hop_size must be positive, got {hop_size!r}")
        self._samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        self.sample_rate = int(sample_rate)
        self.frame_size = int(frame_size)
        self.hop_size = int(hop_size)
        self._pos = 0
        self._active = False

    @property
    def exhausted(self) -> bool:
        if self._samples.size == 0:
            return True
        if self._samples.size <= self.frame_size:
            return self._pos > 0
        return self._pos + self.frame_size > self._samples.size

    def start(self) -> SignalFrameSource:
        self._pos = 0
        self._active = True
        return self

    def current_frame(self, handle: SignalFrameSource) -> AudioFrame:
        if not self._active or handle is not self:
            raise FrameSourceError("signal source is not running")
        if self.exhausted:
            raise FrameSourceError("signal source is exhausted")
        frame = self._samples[self._pos : self._pos + self.frame_size]
        self._pos += self.hop_size
        return AudioFrame(frame, self.sample_rate)

    def stop(self, handle: SignalFrameSource) -> None:  # noqa: ARG002
        self._active = False
