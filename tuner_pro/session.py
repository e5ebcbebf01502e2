from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from tuner_pro.catalog import TuningEntry
from tuner_pro.errors import AcquisitionError, FrameSourceError
from tuner_pro.frames import AudioFrame, AudioFrameSource
from tuner_pro.matcher import match_tuning
from tuner_pro.notes import EMPTY_NOTE, NoteIdentifier, frequency_to_note
from tuner_pro.pitch import PitchEstimator
from tuner_pro.scheduling import Scheduler

logger = logging.getLogger(__name__)

IN_TUNE_CENTS = 5
NEEDLE_SCALE = 0.8
NEEDLE_LIMIT = 50.0

StateCallback = Callable[["TunerState"], None]


@dataclass(frozen=True)
class TunerState:
    frequency: float = 0.0
    note: NoteIdentifier = EMPTY_NOTE
    cents: int = 0
    entry: TuningEntry | None = None
    confidence: int = 0
    listening: bool = False

    @property
    def in_tune(self) -> bool:
        return self.entry is not None and abs(self.cents) < IN_TUNE_CENTS

    @property
    def tune_direction(self) -> str | None:
        # Only meaningful against a known string target.
        if self.entry is None or self.cents == 0:
            return None
        return "sharp" if self.cents > 0 else "flat"

    @property
    def needle_rotation(self) -> float:
        return float(max(-NEEDLE_LIMIT, min(NEEDLE_LIMIT, self.cents * NEEDLE_SCALE)))

    def instruments_summary(self, limit: int = 3) -> str:
        if self.entry is None:
            return ""
        names = self.entry.instruments
        text = ", ".join(names[:limit])
        if len(names) > limit:
            text += f" +{len(names) - limit} more"
        return text

    def to_event(self) -> dict[str, object]:
        return {
            "type": "tuner_state",
            "frequency": float(self.frequency),
            "note": self.note.name,
            "cents": int(self.cents),
            "confidence": int(self.confidence),
            "listening": bool(self.listening),
            "target": None
            if self.entry is None
            else {
                "note": self.entry.note,
                "frequency": self.entry.frequency,
                "instruments": list(self.entry.instruments),
            },
            "inTune": self.in_tune,
            "direction": self.tune_direction,
            "needle": self.needle_rotation,
        }


IDLE_STATE = TunerState()


def analyze_frame(frame: AudioFrame, estimator: PitchEstimator) -> TunerState:
    hz = estimator.process(frame)
    if hz <= 0:
        return TunerState(listening=True)

    note = frequency_to_note(hz)
    match = match_tuning(note, hz)
    return TunerState(
        frequency=hz,
        note=note,
        cents=match.cents,
        entry=match.entry,
        confidence=match.confidence,
        listening=True,
    )


class TunerSession:
    """
    Idle/Listening state machine driving the per-frame tuning pipeline.

    Cycles are chained through the injected scheduler: a cycle schedules its
    successor only after it has published, and never once stop() has run.
    """

    def __init__(
        self,
        source: AudioFrameSource,
        scheduler: Scheduler,
        *,
        estimator: PitchEstimator | None = None,
        on_state: StateCallback | None = None,
    ) -> None:
        self._source = source
        self._scheduler = scheduler
        self._estimator = estimator or PitchEstimator()
        self._subscribers: list[StateCallback] = []
        if on_state is not None:
            self._subscribers.append(on_state)
        self._state = IDLE_STATE
        self._handle: Any = None
        self._pending: Any = None
        self._listening = False

    @property
    def state(self) -> TunerState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._listening

    def subscribe(self, callback: StateCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: StateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def start(self) -> None:
        if self._listening:
            return
        try:
            self._handle = self._source.start()
        except AcquisitionError as exc:
            logger.warning("Audio source acquisition failed: %s", exc)
            self._handle = None
            raise
        self._listening = True
        logger.info("Tuner session listening")
        self._schedule_next()

    def stop(self) -> None:
        if not self._listening:
            return
        self._listening = False
        pending, self._pending = self._pending, None
        handle, self._handle = self._handle, None
        try:
            if pending is not None:
                self._scheduler.cancel(pending)
        finally:
            try:
                self._source.stop(handle)
            finally:
                logger.info("Tuner session stopped")
                self._publish(IDLE_STATE)

    def __enter__(self) -> TunerSession:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _schedule_next(self) -> None:
        self._pending = self._scheduler.schedule(self._run_cycle)

    def _run_cycle(self) -> None:
        self._pending = None
        if not self._listening:
            return
        try:
            frame = self._source.current_frame(self._handle)
        except FrameSourceError as exc:
            logger.warning("Audio source became invalid, stopping: %s", exc)
            self.stop()
            return

        try:
            self._publish(analyze_frame(frame, self._estimator))
        except Exception:
            self.stop()
            raise

        if self._listening:
            self._schedule_next()

    def _publish(self, state: TunerState) -> None:
        self._state = state
        logger.debug("Tuner state: %.2f Hz %s %+d cents", state.frequency, state.note.name, state.cents)
        for callback in list(self._subscribers):
            callback(state)
