from __future__ import annotations

from tuner_pro.session import NEEDLE_LIMIT, TunerState

GAUGE_WIDTH = 41


def needle_bar(state: TunerState, width: int = GAUGE_WIDTH) -> str:
    # |----------^----------| with the caret at the needle position.
    width = max(5, int(width) | 1)
    mid = width // 2
    cells = ["-"] * width
    cells[mid] = "|"
    pos = mid + int(round(state.needle_rotation / NEEDLE_LIMIT * mid))
    cells[max(0, min(width - 1, pos))] = "^"
    return "[" + "".join(cells) + "]"


def render_line(state: TunerState) -> str:
    if not state.listening:
        return "Stopped"
    if state.frequency <= 0:
        return f"{'--':>4}  {'Play a note':>12}  {needle_bar(state)}"

    text = f"{state.note.name:>4}  {state.frequency:9.2f} Hz  {needle_bar(state)}  {state.cents:+4d}c"
    if state.in_tune:
        text += "  IN TUNE"
    elif state.tune_direction == "sharp":
        text += "  tune down"
    elif state.tune_direction == "flat":
        text += "  tune up"
    summary = state.instruments_summary()
    if summary:
        text += f"  ({summary})"
    return text
