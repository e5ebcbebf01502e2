from __future__ import annotations

import math
import re
from dataclasses import dataclass

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
A4_HZ = 440.0
C0_HZ = A4_HZ * 2.0 ** -4.75
MIN_NOTE_HZ = 20.0
_A4_HALF_STEPS = 57.0

_NOTE_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


@dataclass(frozen=True)
class NoteIdentifier:
    pitch_class: str
    octave: int
    cents: int

    @property
    def is_empty(self) -> bool:
        return not self.pitch_class

    @property
    def name(self) -> str:
        if self.is_empty:
            return ""
        return f"{self.pitch_class}{self.octave}"


EMPTY_NOTE = NoteIdentifier(pitch_class="", octave=0, cents=0)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def frequency_to_note(frequency: float) -> NoteIdentifier:
    if not math.isfinite(frequency) or frequency < MIN_NOTE_HZ:
        return EMPTY_NOTE
    # Same as 12 * log2(f / C0), anchored on A4 so exact semitones stay exact.
    half_steps = 12.0 * math.log2(frequency / A4_HZ) + _A4_HALF_STEPS
    nearest = round_half_up(half_steps)
    return NoteIdentifier(
        pitch_class=NOTE_NAMES[nearest % 12],
        octave=nearest // 12,
        cents=int(math.floor((half_steps - nearest) * 100.0)),
    )


def note_to_frequency(pitch_class: str, octave: int) -> float:
    try:
        index = NOTE_NAMES.index(pitch_class)
    except ValueError:
        raise ValueError(f"unknown pitch class {pitch_class!r}") from None
    return float(C0_HZ * 2.0 ** ((index + 12 * int(octave)) / 12.0))


def parse_note_name(text: str) -> tuple[str, int]:
    match = _NOTE_RE.match(text.strip())
    if match is None:
        raise ValueError(f"not a note name: {text!r}")
    return match.group(1), int(match.group(2))
