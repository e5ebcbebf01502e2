from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import numpy as np
import sounddevice as sd

from tuner_pro.errors import DeviceUnavailable, FrameSourceError, PermissionDenied
from tuner_pro.frames import DEFAULT_FRAME_SIZE, AudioFrame

logger = logging.getLogger(__name__)

_PERMISSION_HINTS = ("permission", "access denied", "not authorized", "not permitted")


@dataclass(frozen=True)
class AudioInputConfig:
    sample_rate: int = 44100
    channels: int = 1
    block_size: int = 1024
    frame_size: int = DEFAULT_FRAME_SIZE
    device: int | str | None = None


class MicrophoneFrameSource:
    """Microphone input; current_frame() returns the last frame_size samples."""

    def __init__(self, config: AudioInputConfig | None = None) -> None:
        self._cfg = config or AudioInputConfig()
        self._lock = threading.Lock()
        self._buffer = np.zeros(self._cfg.frame_size, dtype=np.float32)
        self._stream: sd.InputStream | None = None

    @property
    def sample_rate(self) -> int:
        return self._cfg.sample_rate

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    def start(self) -> sd.InputStream:
        if self._stream is not None:
            return self._stream

        def callback(indata, frames, time_info, status) -> None:  # noqa: ARG001
            if status:
                # Drop blocks on over/underflow; the previous window stays valid.
                return
            self._push(np.asarray(indata[:, 0], dtype=np.float32))

        with self._lock:
            self._buffer[:] = 0.0
        stream: sd.InputStream | None = None
        try:
            stream = sd.InputStream(
                samplerate=self._cfg.sample_rate,
                channels=self._cfg.channels,
                blocksize=self._cfg.block_size,
                device=self._cfg.device,
                dtype="float32",
                callback=callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            # ValueError comes from sounddevice for unknown devices or settings.
            if stream is not None:
                stream.close()
            raise _acquisition_error(exc) from exc

        logger.info(
            "Opened input device %s at %d Hz",
            self._cfg.device if self._cfg.device is not None else "default",
            self._cfg.sample_rate,
        )
        self._stream = stream
        return stream

    def current_frame(self, handle: sd.InputStream) -> AudioFrame:
        if handle is None or handle is not self._stream or not handle.active:
            raise FrameSourceError("input stream is not active")
        with self._lock:
            samples = self._buffer.copy()
        return AudioFrame(samples, self._cfg.sample_rate)

    def stop(self, handle: sd.InputStream | None = None) -> None:  # noqa: ARG002
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None
            logger.info("Closed input device")

    def _push(self, x: np.ndarray) -> None:
        n = int(x.size)
        with self._lock:
            if n >= self._buffer.size:
                self._buffer[:] = x[-self._buffer.size :]
                return
            self._buffer[:-n] = self._buffer[n:]
            self._buffer[-n:] = x


def list_input_devices() -> list[tuple[int, str]]:
    devices = []
    for index, info in enumerate(sd.query_devices()):
        if int(info.get("max_input_channels", 0)) > 0:
            devices.append((index, str(info.get("name", ""))))
    return devices


def _acquisition_error(exc: Exception) -> Exception:
    text = str(exc).lower()
    if any(hint in text for hint in _PERMISSION_HINTS):
        return PermissionDenied(str(exc))
    return DeviceUnavailable(str(exc))
