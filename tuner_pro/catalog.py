from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from tuner_pro.notes import note_to_frequency, parse_note_name

_BASSES = ("4-String Bass", "5-String Bass")
_GUITARS = ("6-String Guitar", "7-String Guitar", "8-String Guitar", "12-String Guitar")


@dataclass(frozen=True)
class TuningEntry:
    note: str
    frequency: float
    instruments: tuple[str, ...]

    def __post_init__(self) -> None:
        parse_note_name(self.note)
        if not self.instruments:
            raise ValueError(f"tuning entry {self.note!r} has no instruments")
        if self.frequency <= 0:
            raise ValueError(f"tuning entry {self.note!r} has a non-positive frequency")

    @property
    def equal_tempered(self) -> float:
        """Equal-tempered frequency of the note, A4 = 440 Hz."""
        return note_to_frequency(*parse_note_name(self.note))


def _build(rows: list[tuple[str, float, tuple[str, ...]]]) -> Mapping[str, TuningEntry]:
    table: dict[str, TuningEntry] = {}
    for note, freq, instruments in rows:
        if note in table:
            raise ValueError(f"duplicate tuning entry {note!r}")
        table[note] = TuningEntry(note=note, frequency=float(freq), instruments=tuple(instruments))
    return MappingProxyType(table)


TUNING_CATALOG: Mapping[str, TuningEntry] = _build(
    [
        ("F#1", 46.25, ("8-String Guitar",)),
        ("B0", 30.87, ("5-String Bass",)),
        ("B1", 61.74, ("7-String Guitar", "8-String Guitar")),
        ("E1", 41.20, _BASSES),
        ("A1", 55.00, _BASSES),
        ("D2", 73.42, (*_BASSES, *_GUITARS, "Drop D")),
        ("E2", 82.41, _GUITARS),
        ("G2", 98.00, (*_BASSES, "Open G")),
        ("A2", 110.00, (*_GUITARS, "DADGAD")),
        ("D3", 146.83, (*_GUITARS, "DADGAD", "Open G")),
        ("G3", 196.00, _GUITARS),
        ("A3", 220.00, ("DADGAD",)),
        ("B3", 246.94, _GUITARS),
        ("C4", 261.63, ("Ukulele",)),
        ("D4", 293.66, ("Open G", "DADGAD", "12-String Guitar")),
        ("E4", 329.63, (*_GUITARS, "Ukulele")),
        ("G4", 392.00, ("Ukulele",)),
        ("A4", 440.00, ("Ukulele",)),
    ]
)


def lookup(note_name: str) -> TuningEntry | None:
    # Exact match only; "E3" never falls back to "E2" or "E4".
    return TUNING_CATALOG.get(note_name)


def instruments() -> tuple[str, ...]:
    names = {name for entry in TUNING_CATALOG.values() for name in entry.instruments}
    return tuple(sorted(names))


def entries_for(instrument: str) -> tuple[TuningEntry, ...]:
    matches = [entry for entry in TUNING_CATALOG.values() if instrument in entry.instruments]
    return tuple(sorted(matches, key=lambda entry: entry.frequency))
