"""Per-track read position and timing state.

A `TrackCursor` never holds event data.  It remembers where its chunk
lives in the source, how far playback has read into it, how many ticks
have been credited but not yet consumed by a delta-time, and the running
status header for the next decode.
"""

from __future__ import annotations

import logging
from typing import Optional

from .clock import PlaybackClock
from .container import MTRK_MAGIC, LoadStatus, TrackLoadStatus
from .decoder import RunningStatus, parse_event
from .primitives import MB_LONG, read_fixed, read_var_len
from .sink import DispatchSink
from .source import ByteSource

logger = logging.getLogger(__name__)

NO_TRACK = 255


class TrackCursor:
    def __init__(self) -> None:
        self.track_id = NO_TRACK
        self.length = 0
        self.start_offset = 0
        self.current_offset = 0
        self.end_of_track = False
        self.elapsed_ticks = 0
        self.running_status: Optional[RunningStatus] = None

    def __repr__(self) -> str:
        return (
            f"TrackCursor(id: {self.track_id}, start: {self.start_offset:#x}, "
            f"len: {self.length:#x}, cur: {self.current_offset:#x}, eot: {self.end_of_track})"
        )

    def load(self, track_id: int, source: ByteSource) -> int:
        """Read the chunk header at the current position and skip past the chunk.

        Returns `LoadStatus.SUCCESS` or a `TrackLoadStatus` code.
        """
        self.track_id = track_id

        magic = source.read(len(MTRK_MAGIC))
        if magic != MTRK_MAGIC:
            logger.warning("track %d: bad chunk magic %r", track_id, magic)
            return TrackLoadStatus.BAD_MAGIC

        self.length = read_fixed(source, MB_LONG)
        self.start_offset = source.tell()
        self.current_offset = 0

        if not source.seek(self.start_offset + self.length):
            logger.warning(
                "track %d: length %d at 0x%X runs past end of source",
                track_id,
                self.length,
                self.start_offset,
            )
            return TrackLoadStatus.LENGTH_OVERRUN

        return LoadStatus.SUCCESS

    def restart(self) -> None:
        """Rewind to the first event of the chunk."""
        self.current_offset = 0
        self.end_of_track = False
        self.elapsed_ticks = 0
        self.running_status = None

    def sync_time(self) -> None:
        self.elapsed_ticks = 0

    def close(self) -> None:
        self.length = 0
        self.start_offset = 0
        self.restart()
        self.track_id = NO_TRACK

    def get_next_event(
        self,
        source: ByteSource,
        ticks: int,
        clock: PlaybackClock,
        sink: DispatchSink,
        *,
        sysex_capacity: int,
        meta_capacity: int,
        emit_unrecognized_meta: bool = True,
    ) -> bool:
        """Credit `ticks` and process the next event if it is due.

        Returns True when an event was consumed.  When the next event is
        not due yet the read position is left unchanged, so the same
        delta-time is re-read next time.
        """
        if self.end_of_track:
            return False
        if self.current_offset >= self.length:
            self.end_of_track = True
            return False

        source.seek(self.start_offset + self.current_offset)
        self.elapsed_ticks += ticks

        delta = read_var_len(source)
        if self.elapsed_ticks < delta:
            return False
        # Keep the overshoot so lateness does not accumulate.
        self.elapsed_ticks -= delta
        logger.debug("track %d: delta %d at 0x%X", self.track_id, delta, self.current_offset)

        result = parse_event(
            source,
            self.track_id,
            self.running_status,
            clock,
            sysex_capacity=sysex_capacity,
            meta_capacity=meta_capacity,
            emit_unrecognized_meta=emit_unrecognized_meta,
        )
        self.running_status = result.running_status
        self.current_offset = source.tell() - self.start_offset
        self.end_of_track = (
            self.end_of_track or result.end_of_track or self.current_offset >= self.length
        )
        if self.end_of_track:
            logger.debug("track %d: finished at offset 0x%X", self.track_id, self.current_offset)

        if result.event is not None and result.emit:
            sink.dispatch(result.event)
        return True
