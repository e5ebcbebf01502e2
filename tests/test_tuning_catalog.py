from __future__ import annotations

import math

import pytest

from tuner_pro.catalog import TUNING_CATALOG, TuningEntry, entries_for, instruments, lookup
from tuner_pro.matcher import match_tuning
from tuner_pro.notes import EMPTY_NOTE, frequency_to_note

GUITARS = ["6-String Guitar", "7-String Guitar", "8-String Guitar", "12-String Guitar"]


def test_catalog_is_read_only() -> None:
    with pytest.raises(TypeError):
        TUNING_CATALOG["F4"] = TuningEntry("F4", 349.23, ("Nothing",))  # type: ignore[index]


def test_catalog_keys_match_entries() -> None:
    assert len(TUNING_CATALOG) == 18
    for name, entry in TUNING_CATALOG.items():
        assert entry.note == name
        assert entry.instruments
        assert entry.frequency > 0


def test_entries_require_instruments() -> None:
    with pytest.raises(ValueError):
        TuningEntry("E2", 82.41, ())


def test_lookup_is_exact() -> None:
    assert lookup("E2") is TUNING_CATALOG["E2"]
    assert lookup("E3") is None
    assert lookup("e2") is None


def test_instrument_index() -> None:
    names = instruments()
    for expected in ("4-String Bass", "Drop D", "Open G", "DADGAD", "Ukulele", *GUITARS):
        assert expected in names
    assert [e.note for e in entries_for("Ukulele")] == ["C4", "E4", "G4", "A4"]
    assert [e.note for e in entries_for("Drop D")] == ["D2"]
    assert entries_for("Banjo") == ()


def test_match_low_e_in_tune() -> None:
    note = frequency_to_note(82.41)
    match = match_tuning(note, 82.41)
    assert match.confidence == 1
    assert match.cents == 0
    assert match.entry is not None
    assert list(match.entry.instruments) == GUITARS


def test_match_recomputes_cents_against_target() -> None:
    note = frequency_to_note(83.0)
    match = match_tuning(note, 83.0)
    assert note.name == "E2"
    assert match.confidence == 1
    assert match.cents == round(1200 * math.log2(83.0 / 82.41))


def test_catalog_miss_falls_back_to_generic_cents() -> None:
    note = frequency_to_note(351.0)
    assert note.name == "F4"
    match = match_tuning(note, 351.0)
    assert match.confidence == 0
    assert match.entry is None
    assert match.cents == note.cents


def test_empty_note_never_matches() -> None:
    match = match_tuning(EMPTY_NOTE, 0.0)
    assert match.confidence == 0
    assert match.entry is None
    assert match.cents == 0


def test_entries_validate_note_names() -> None:
    with pytest.raises(ValueError):
        TuningEntry("H2", 123.0, ("Nothing",))


def test_equal_tempered_reference() -> None:
    assert TUNING_CATALOG["A4"].equal_tempered == pytest.approx(440.0)
    for entry in TUNING_CATALOG.values():
        assert entry.equal_tempered == pytest.approx(entry.frequency, abs=0.01)
