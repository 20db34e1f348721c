#!/usr/bin/env python3
"""Play Standard MIDI Files to a MIDI output port in real time.

Events are decoded lazily from the file and sent as their ticks come due,
so tempo changes, multi-track files, looping and tempo adjustment all
follow the player's clock rather than a precomputed schedule.

Requirements:
  pip install mido python-rtmidi

Usage:
  # List available MIDI ports:
  python tools/play_smf.py --list-ports

  # Play one or more files in order:
  python tools/play_smf.py --port "IAC Driver Bus 1" song.mid other.mid

  # Loop, 10 BPM faster, event-priority ordering:
  python tools/play_smf.py --port "IAC Driver Bus 1" --loop --tempo-adjust 10 \\
      --ordering event song.mid
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import mido

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.config import VALID_ORDERINGS, PlayerConfig, load_player_config  # noqa: E402
from smf.container import LoadStatus, describe_load_status  # noqa: E402
from smf.events import MetaEvent  # noqa: E402
from smf.midifile import MidiFile  # noqa: E402
from smf.sink import MidoPortSink  # noqa: E402

POLL_INTERVAL = 0.0005  # seconds between scheduling steps


def build_config(args: argparse.Namespace) -> PlayerConfig:
    """Start from --config (or the defaults) and apply command-line overrides."""
    config = load_player_config(args.config) if args.config else PlayerConfig()
    return config.with_overrides(
        event_ordering=args.ordering,
        max_tracks=args.max_tracks,
        looping=True if args.loop else None,
        tempo_adjust=args.tempo_adjust,
    )


def print_meta(event: MetaEvent) -> None:
    print(f"  {event}")


def list_ports() -> None:
    """Print available MIDI output ports."""
    ports = mido.get_output_names()
    if not ports:
        print("No MIDI output ports found.")
    else:
        print("Available MIDI output ports:")
        for p in ports:
            print(f"  {p}")


def play_file(
    path: Path,
    port: mido.ports.BaseOutput,
    config: PlayerConfig,
    *,
    show_meta: bool = False,
) -> int:
    """Play one file to completion.  Returns the load status code."""
    sink = MidoPortSink(port, on_meta=print_meta if show_meta else None)
    midi = MidiFile(config, sink=sink)
    code = midi.load(path)
    if code != LoadStatus.SUCCESS:
        print(f"{path}: {describe_load_status(code)} (status {code})", file=sys.stderr)
        return code

    num, den = midi.time_signature
    print(f"\n{'='*60}")
    print(f"Playing: {path}")
    print(f"  Format: {midi.format}, tracks: {midi.track_count}")
    print(f"  Ticks/qn: {midi.ticks_per_quarter_note}, tempo: {midi.tempo} BPM "
          f"({midi.tempo_adjust:+d}), time signature: {num}/{den}")
    print(f"  Ordering: {config.event_ordering} priority, looping: {midi.looping}")
    print(f"{'='*60}")

    try:
        while not midi.is_finished():
            midi.get_next_event()
            time.sleep(POLL_INTERVAL)
    finally:
        sink.silence()
        midi.close()
    return LoadStatus.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Play Standard MIDI Files to a MIDI output port",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --list-ports
  %(prog)s --port "IAC Driver Bus 1" song.mid
  %(prog)s --port "IAC Driver Bus 1" --loop song.mid
  %(prog)s --port "IAC Driver Bus 1" --config player.json song.mid
""",
    )
    parser.add_argument("files", nargs="*", type=Path, help="MIDI files to play in order")
    parser.add_argument("--list-ports", action="store_true",
                        help="List available MIDI output ports and exit")
    parser.add_argument("--port", "-p", type=str, default=None,
                        help="MIDI output port name (use --list-ports to find it)")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="JSON player configuration file")
    parser.add_argument("--ordering", choices=sorted(VALID_ORDERINGS), default=None,
                        help="Drain events by track or round-robin by event")
    parser.add_argument("--max-tracks", type=int, default=None,
                        help="Reject files with more tracks than this")
    parser.add_argument("--loop", action="store_true",
                        help="Loop each file until interrupted")
    parser.add_argument("--tempo-adjust", type=int, default=None,
                        help="Signed BPM offset applied on top of the file tempo")
    parser.add_argument("--show-meta", action="store_true",
                        help="Print meta events as they are played")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log decoder activity")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_ports:
        list_ports()
        return 0

    if not args.port:
        parser.error("--port is required (use --list-ports to find your device)")
    if not args.files:
        parser.error("no MIDI files given")

    try:
        config = build_config(args)
    except (OSError, ValueError) as err:
        parser.error(f"bad configuration: {err}")

    failures = 0
    with mido.open_output(args.port) as port:
        print(f"Connected to: {args.port}")
        try:
            for path in args.files:
                if play_file(path, port, config, show_meta=args.show_meta) != LoadStatus.SUCCESS:
                    failures += 1
        except KeyboardInterrupt:
            print("\nInterrupted")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
