"""Main entry point for the Fret Recall CLI."""

import argparse
import sys
import threading
import time
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..exceptions import FretRecallError
from ..fretboard import find_note_on_fretboard
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import PitchClass, PitchedNote
from ..services.audio_providers import WavFileAudioProvider
from ..services.pitch_detection_service import PitchDetectionService

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fret Recall - Guitar Pitch and Fretboard Tools")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir", default=None, help="Configuration directory (default: ~/.config/fret_recall)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    frequency_parser = subparsers.add_parser("frequency", help="Print the reference frequency of a note")
    frequency_parser.add_argument("note", help="Note in scientific pitch notation, e.g. A4")

    layout_parser = subparsers.add_parser("layout", help="Print the note at every fret")
    find_parser = subparsers.add_parser("find", help="List every position of a pitch class")
    find_parser.add_argument("pitch_class", help="Pitch class, e.g. E or F#")
    for sub in (layout_parser, find_parser):
        sub.add_argument("--strings", type=int, default=None, help="Number of strings (6-8)")
        sub.add_argument("--frets", type=int, default=None, help="Number of frets (12-36)")

    detect_parser = subparsers.add_parser("detect", help="Detect pitches in a sound file")
    detect_parser.add_argument("path", help="Path to a WAV (or other libsndfile) file")
    detect_parser.add_argument("--buffer-size", type=int, default=None, help="Samples per buffer")

    listen_parser = subparsers.add_parser("listen", help="Detect pitches from a live input")
    listen_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")
    listen_parser.add_argument("--duration", type=float, default=10.0, help="Duration in seconds")

    for sub in (detect_parser, listen_parser):
        sub.add_argument(
            "--target", action="append", default=[], help="Target note to match, e.g. E2 (repeatable)"
        )
        sub.add_argument("--tolerance", type=float, default=None, help="Match tolerance in cents")

    return parser


class _PitchPrinter:
    """Prints each detected pitch with its note name and any matched target."""

    def __init__(self, factory: ComponentFactory, targets: List[PitchedNote], tolerance: Optional[float]):
        self._table = factory.frequency_table
        kwargs = {} if tolerance is None else {"tolerance_cents": tolerance}
        self._matcher = factory.create_matcher(**kwargs)
        self._targets = targets
        self._start = time.time()
        self.detections = 0

    def __call__(self, frequency: Optional[float]) -> None:
        if frequency is None:
            return
        self.detections += 1
        nearest = self._table.nearest_note(frequency)
        line = f"[{time.time() - self._start:6.2f}s] {frequency:8.2f}Hz  {nearest or '---'}"
        if self._targets:
            match = self._matcher.find_match(frequency, self._targets)
            line += f"  match: {match}" if match else "  no match"
        print(line, flush=True)


def _run_frequency(factory: ComponentFactory, args) -> int:
    note = PitchedNote.parse(args.note)
    print(f"{note}: {factory.frequency_table.lookup(note):.3f} Hz")
    return 0


def _layout_overrides(args) -> dict:
    overrides = {}
    if args.strings is not None:
        overrides["string_count"] = args.strings
    if args.frets is not None:
        overrides["fret_count"] = args.frets
    return overrides


def _run_layout(factory: ComponentFactory, args) -> int:
    for layout in factory.create_layouts(**_layout_overrides(args)):
        print(layout)
    return 0


def _run_find(factory: ComponentFactory, args) -> int:
    pitch_class = PitchClass.parse(args.pitch_class)
    layouts = factory.create_layouts(**_layout_overrides(args))
    positions = sorted(find_note_on_fretboard(pitch_class, layouts), key=lambda p: (p.string, p.fret))
    print(f"{pitch_class.display_name}: " + " ".join(str(p) for p in positions))
    return 0


def _run_detect(factory: ComponentFactory, args) -> int:
    buffer_size = args.buffer_size or factory.config_manager.get_config("audio_input")["buffer_size"]
    provider = WavFileAudioProvider(args.path, chunk_size=buffer_size, realtime=False)
    printer = _PitchPrinter(factory, [PitchedNote.parse(t) for t in args.target], args.tolerance)
    # Offline files have no real-time deadline, so size the queue to hold the whole file
    service = PitchDetectionService(provider, factory.create_pitch_detector(), max_pending=1 << 16)
    service.start(printer)
    try:
        provider.wait()
    finally:
        service.stop()
    if printer.detections == 0:
        print("No pitch detected")
    return 0


def _run_listen(factory: ComponentFactory, args) -> int:
    targets = [PitchedNote.parse(t) for t in args.target]
    overrides = {} if args.device is None else {"device_id": args.device}
    service = factory.create_live_service(**overrides)
    stop = threading.Event()
    service.start(_PitchPrinter(factory, targets, args.tolerance))
    try:
        stop.wait(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
    return 0


COMMANDS = {
    "frequency": _run_frequency,
    "layout": _run_layout,
    "find": _run_find,
    "detect": _run_detect,
    "listen": _run_listen,
}


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = _build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command not in COMMANDS:
        parser.print_help()
        return 1

    setup_logging("DEBUG" if parsed_args.debug else None)

    try:
        factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
        return COMMANDS[parsed_args.command](factory, parsed_args)
    except FretRecallError as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
