from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tuner_pro.frames import DEFAULT_FRAME_SIZE, SignalFrameSource
from tuner_pro.matcher import match_tuning
from tuner_pro.notes import frequency_to_note
from tuner_pro.pitch import PitchEstimator
from tuner_pro.scheduling import ManualScheduler
from tuner_pro.session import TunerSession, TunerState


@dataclass(frozen=True)
class RecordingAnalysis:
    frames: int
    voiced_frames: int
    state: TunerState

    def to_dict(self) -> dict[str, object]:
        event = self.state.to_event()
        event["type"] = "recording_analysis"
        event["frames"] = self.frames
        event["voicedFrames"] = self.voiced_frames
        return event


def analyze_recording(
    audio: np.ndarray,
    sample_rate: int,
    *,
    frame_size: int = DEFAULT_FRAME_SIZE,
    hop_size: int = 1024,
    estimator: PitchEstimator | None = None,
) -> RecordingAnalysis:
    """Replay a recording through a tuner session and summarize it by its median pitch."""
    source = SignalFrameSource(audio, sample_rate, frame_size=frame_size, hop_size=hop_size)
    scheduler = ManualScheduler()
    states: list[TunerState] = []
    session = TunerSession(source, scheduler, estimator=estimator, on_state=states.append)

    with session:
        while session.is_listening and scheduler.run_pending():
            pass

    readings = [s for s in states if s.listening]
    hz_list = [s.frequency for s in readings if s.frequency > 0]
    if not hz_list:
        return RecordingAnalysis(frames=len(readings), voiced_frames=0, state=TunerState())

    hz = float(np.median(np.array(hz_list, dtype=np.float64)))
    note = frequency_to_note(hz)
    match = match_tuning(note, hz)
    state = TunerState(
        frequency=hz,
        note=note,
        cents=match.cents,
        entry=match.entry,
        confidence=match.confidence,
    )
    return RecordingAnalysis(frames=len(readings), voiced_frames=len(hz_list), state=state)
