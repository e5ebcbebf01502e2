from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from tuner_pro.catalog import TUNING_CATALOG, TuningEntry
from tuner_pro.notes import NoteIdentifier, round_half_up


@dataclass(frozen=True)
class TuningMatch:
    cents: int
    confidence: int
    entry: TuningEntry | None


def match_tuning(
    note: NoteIdentifier,
    frequency: float,
    catalog: Mapping[str, TuningEntry] = TUNING_CATALOG,
) -> TuningMatch:
    entry = catalog.get(note.name) if not note.is_empty else None
    if entry is None or frequency <= 0:
        return TuningMatch(cents=note.cents, confidence=0, entry=None)
    cents = 1200.0 * math.log2(frequency / entry.frequency)
    return TuningMatch(cents=round_half_up(cents), confidence=1, entry=entry)
