from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass

import numpy as np

from tuner_pro.frames import DEFAULT_FRAME_SIZE, BufferedFrameSource
from tuner_pro.scheduling import ManualScheduler
from tuner_pro.session import TunerSession, TunerState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    sample_rate: int = 44_100
    frame_size: int = DEFAULT_FRAME_SIZE


class RealtimeSession:
    """
    One websocket client: audio chunks are pushed in, and each chunk advances
    the tuner by one cycle.
    """

    def __init__(self, session_id: str, config: SessionConfig | None = None) -> None:
        self.session_id = session_id
        self._events: list[dict[str, object]] = []
        self._build(config or SessionConfig())

    def _build(self, config: SessionConfig) -> None:
        self.config = config
        self.source = BufferedFrameSource(config.sample_rate, config.frame_size)
        self.scheduler = ManualScheduler()
        self.tuner = TunerSession(self.source, self.scheduler, on_state=self._on_state)

    @property
    def is_listening(self) -> bool:
        return self.tuner.is_listening

    def init(self, *, sample_rate: int, frame_size: int = DEFAULT_FRAME_SIZE) -> None:
        if self.tuner.is_listening:
            raise RuntimeError("cannot reconfigure a listening session")
        self._build(SessionConfig(sample_rate=int(sample_rate), frame_size=int(frame_size)))

    def start(self) -> list[dict[str, object]]:
        self.tuner.start()
        return self._drain()

    def stop(self) -> list[dict[str, object]]:
        self.tuner.stop()
        return self._drain()

    def process_audio_bytes(self, payload: bytes) -> list[dict[str, object]]:
        if not payload or len(payload) % 4:
            return []

        frame = np.frombuffer(payload, dtype=np.float32)
        if frame.size == 0:
            return []

        self.source.push(frame)
        self.scheduler.run_pending()
        return self._drain()

    def _on_state(self, state: TunerState) -> None:
        self._events.append(state.to_event())

    def _drain(self) -> list[dict[str, object]]:
        events, self._events = self._events, []
        return events


class SessionManager:
    def __init__(self) -> None:
        self._sessions: dict[str, RealtimeSession] = {}
        self._lock = threading.Lock()

    def create(self) -> RealtimeSession:
        session_id = uuid.uuid4().hex
        session = RealtimeSession(session_id)
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Opened realtime session %s", session_id)
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.stop()
            logger.info("Closed realtime session %s", session_id)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)
