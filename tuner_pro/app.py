from __future__ import annotations

import argparse
import logging
import sys

from tuner_pro.audio import AudioInputConfig, MicrophoneFrameSource, list_input_devices
from tuner_pro.errors import AcquisitionError
from tuner_pro.readout import render_line
from tuner_pro.scheduling import BlockingScheduler
from tuner_pro.session import TunerSession, TunerState

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tuner-pro", description="Terminal string instrument tuner.")
    parser.add_argument("--device", default=None, help="Input device index or name.")
    parser.add_argument("--sample-rate", type=int, default=44100)
    parser.add_argument("--frame-size", type=int, default=4096, help="Samples per analysis frame.")
    parser.add_argument("--interval", type=float, default=1 / 30, help="Seconds between readings.")
    parser.add_argument("--list-devices", action="store_true", help="List input devices and exit.")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def _device_arg(value: str | None) -> int | str | None:
    if value is None:
        return None
    return int(value) if value.isdigit() else value


class ConsoleDisplay:
    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout
        self._last = ""

    def __call__(self, state: TunerState) -> None:
        line = render_line(state)
        pad = max(0, len(self._last) - len(line))
        self._stream.write("\r" + line + " " * pad)
        self._stream.flush()
        self._last = line


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if args.list_devices:
        for index, name in list_input_devices():
            print(f"{index:3d}  {name}")
        return 0

    source = MicrophoneFrameSource(
        AudioInputConfig(
            sample_rate=args.sample_rate,
            frame_size=args.frame_size,
            device=_device_arg(args.device),
        )
    )
    scheduler = BlockingScheduler(interval=args.interval)
    session = TunerSession(source, scheduler, on_state=ConsoleDisplay())

    try:
        with session:
            print("Listening. Press Ctrl+C to stop.")
            scheduler.run()
    except AcquisitionError as exc:
        logger.error("Cannot open microphone: %s", exc)
        print(f"Cannot open microphone: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
