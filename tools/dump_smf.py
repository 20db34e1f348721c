#!/usr/bin/env python3
"""Decode Standard MIDI Files and list every event with its absolute tick.

Runs the player's own scheduler offline, one tick at a time, so the
listing shows events in the order and at the ticks playback would
deliver them.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.config import VALID_ORDERINGS, PlayerConfig  # noqa: E402
from smf.container import LoadError, check_load_status  # noqa: E402
from smf.events import MetaEvent, TrackEvent  # noqa: E402
from smf.midifile import MidiFile  # noqa: E402
from smf.sink import DispatchSink  # noqa: E402


def collect_events(
    path: Path, config: Optional[PlayerConfig] = None
) -> Tuple[MidiFile, List[Tuple[int, TrackEvent]]]:
    """Decode `path` and return the loaded file and its timed events.

    Raises `LoadError` if the file does not load.
    """
    events: List[Tuple[int, TrackEvent]] = []
    tick = 0

    def record(event: TrackEvent) -> None:
        events.append((tick, event))

    config = replace(config or PlayerConfig(), looping=False)
    midi = MidiFile(config, sink=DispatchSink(record, record, record))
    check_load_status(midi.load(path))

    # Tick 0 events first, then one tick per step.
    midi.process_events(0)
    while not midi.is_finished():
        tick += 1
        midi.process_events(1)
    return midi, events


def describe(midi: MidiFile) -> List[str]:
    num, den = midi.time_signature
    lines = [
        f"Format:          {midi.format}",
        f"Tracks:          {midi.track_count}",
        f"Ticks/qn:        {midi.ticks_per_quarter_note}",
        f"Tempo:           {midi.tempo} BPM",
        f"Time signature:  {num}/{den}",
        f"Microsec/tick:   {midi.tick_time}",
    ]
    for cursor in midi.tracks:
        lines.append(
            f"  Track {cursor.track_id}: {cursor.length} bytes at 0x{cursor.start_offset:X}"
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="List the events of Standard MIDI Files with absolute ticks."
    )
    parser.add_argument("paths", nargs="+", type=Path, help="MIDI files to decode")
    parser.add_argument("--ordering", choices=sorted(VALID_ORDERINGS), default="track",
                        help="Event ordering within a tick (default: track)")
    parser.add_argument("--hide-meta", action="store_true",
                        help="Do not list meta events")
    args = parser.parse_args(argv)

    config = PlayerConfig(event_ordering=args.ordering)
    status = 0
    for path in args.paths:
        print(f"== {path}")
        try:
            midi, events = collect_events(path, config)
        except LoadError as err:
            print(f"  ERR {err}", file=sys.stderr)
            status = 1
            continue

        # Header fields reflect the state at the end of the file.
        for line in describe(midi):
            print(line)
        print()
        for tick, event in events:
            if args.hide_meta and isinstance(event, MetaEvent):
                continue
            print(f"{tick:8d}  {event}")
        midi.close()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
