from __future__ import annotations

import pytest

from tuner_pro.notes import (
    EMPTY_NOTE,
    NOTE_NAMES,
    frequency_to_note,
    note_to_frequency,
    parse_note_name,
)


def test_concert_a() -> None:
    note = frequency_to_note(440.0)
    assert note.pitch_class == "A"
    assert note.octave == 4
    assert note.cents == 0
    assert note.name == "A4"


def test_low_e_string() -> None:
    assert frequency_to_note(82.41).name == "E2"


def test_below_audible_range_is_empty() -> None:
    assert frequency_to_note(19.9) == EMPTY_NOTE
    assert frequency_to_note(-1.0) == EMPTY_NOTE
    assert EMPTY_NOTE.is_empty
    assert EMPTY_NOTE.name == ""
    assert not frequency_to_note(20.0).is_empty


def test_cents_sign_follows_deviation() -> None:
    sharp = frequency_to_note(440.0 * 2 ** (20 / 1200))
    flat = frequency_to_note(440.0 * 2 ** (-20 / 1200))
    assert sharp.name == flat.name == "A4"
    assert 19 <= sharp.cents <= 20
    assert -21 <= flat.cents <= -20


def test_cents_wrap_at_semitone_boundary() -> None:
    below = [frequency_to_note(440.0 * 2 ** (c / 1200)) for c in range(40, 50)]
    above = [frequency_to_note(440.0 * 2 ** (c / 1200)) for c in range(51, 61)]
    assert all(n.name == "A4" and 39 <= n.cents <= 49 for n in below)
    assert all(n.name == "A#4" and -50 <= n.cents <= -39 for n in above)


def test_sweep_never_skips_a_note_or_leaves_range() -> None:
    previous = None
    for step in range(0, 2400 * 2):
        hz = 110.0 * 2 ** (step / 2 / 1200)
        note = frequency_to_note(hz)
        assert -50 <= note.cents <= 49
        index = NOTE_NAMES.index(note.pitch_class) + 12 * note.octave
        if previous is not None:
            assert index - previous in (0, 1)
        previous = index


@pytest.mark.parametrize("semitone", range(12, 100))
def test_equal_tempered_pitches_map_back(semitone: int) -> None:
    pitch_class, octave = NOTE_NAMES[semitone % 12], semitone // 12
    note = frequency_to_note(note_to_frequency(pitch_class, octave))
    assert (note.pitch_class, note.octave) == (pitch_class, octave)
    assert -1 <= note.cents <= 0


def test_note_to_frequency_reference() -> None:
    assert note_to_frequency("A", 4) == pytest.approx(440.0)
    assert note_to_frequency("E", 2) == pytest.approx(82.41, abs=0.01)
    with pytest.raises(ValueError):
        note_to_frequency("H", 2)


def test_parse_note_name() -> None:
    assert parse_note_name("C#4") == ("C#", 4)
    assert parse_note_name(" E2 ") == ("E", 2)
    assert parse_note_name("B0") == ("B", 0)
    for bad in ("", "H2", "E", "Eb2", "4E"):
        with pytest.raises(ValueError):
            parse_note_name(bad)
