"""Load a Standard MIDI File and play it back against a wall clock.

`MidiFile` owns the byte source, one `TrackCursor` per track and the
`PlaybackClock`.  Loading only reads the chunk headers; events are
decoded lazily as playback reaches them.  Playback is poll driven:

    mf = MidiFile(sink=DispatchSink(on_channel=handle))
    if mf.load("song.mid") == LoadStatus.SUCCESS:
        while not mf.is_finished():
            mf.get_next_event()
    mf.close()

Each `get_next_event` call samples the clock and hands the elapsed ticks
to every track.  Within one step, tracks are drained either one track at
a time (track priority) or one event per track per round (event
priority), as configured.
"""

from __future__ import annotations

import enum
import logging
import os
import time
from typing import Callable, List, Optional, Tuple, Union

from .clock import PlaybackClock
from .config import EVENT_PRIORITY, PlayerConfig
from .container import LoadError, LoadStatus, read_header, track_load_status
from .events import ChannelEvent, MetaEvent, SysexEvent
from .sink import DispatchSink
from .source import ByteSource, FileSource
from .track import TrackCursor

logger = logging.getLogger(__name__)

PathOrSource = Union[str, "os.PathLike[str]", ByteSource]


def monotonic_us() -> int:
    return time.perf_counter_ns() // 1000


class PlayerState(enum.Enum):
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class MidiFile:
    def __init__(
        self,
        config: Optional[PlayerConfig] = None,
        *,
        sink: Optional[DispatchSink] = None,
        time_us: Optional[Callable[[], int]] = None,
    ) -> None:
        self.config = config or PlayerConfig()
        self.sink = sink if sink is not None else DispatchSink()
        self.time_us = time_us or monotonic_us
        self.clock = PlaybackClock(self.config.tempo_adjust)

        self._filename = ""
        self._source: Optional[ByteSource] = None
        self._owns_source = False
        self._format = 0
        self._tracks: List[TrackCursor] = []
        self._looping = self.config.looping
        self._paused = False
        self._sync_pending = True
        self._started = False

    @classmethod
    def open(cls, path: PathOrSource, config: Optional[PlayerConfig] = None, **kwargs) -> "MidiFile":
        """Construct and load in one go, raising `LoadError` on failure."""
        midi = cls(config, **kwargs)
        code = midi.load(path)
        if code != LoadStatus.SUCCESS:
            raise LoadError(code)
        return midi

    def __enter__(self) -> "MidiFile":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"MidiFile({self._filename!r}, fmt: {self._format}, "
            f"tracks: {len(self._tracks)}, {self.state.value})"
        )

    # ── file identity ───────────────────────────────────────────────

    @property
    def filename(self) -> str:
        return self._filename

    def set_filename(self, name: Union[str, "os.PathLike[str]"]) -> None:
        self._filename = os.fspath(name)

    @property
    def format(self) -> int:
        return self._format

    @property
    def track_count(self) -> int:
        return len(self._tracks)

    @property
    def tracks(self) -> Tuple[TrackCursor, ...]:
        return tuple(self._tracks)

    # ── clock settings ──────────────────────────────────────────────

    @property
    def tempo(self) -> int:
        return self.clock.tempo

    def set_tempo(self, bpm: int) -> None:
        self.clock.set_tempo(bpm)

    @property
    def tempo_adjust(self) -> int:
        return self.clock.tempo_adjust

    def set_tempo_adjust(self, delta: int) -> None:
        self.clock.set_tempo_adjust(delta)

    def set_microseconds_per_quarter_note(self, value: int) -> None:
        self.clock.set_microseconds_per_quarter_note(value)

    @property
    def ticks_per_quarter_note(self) -> int:
        return self.clock.ticks_per_quarter_note

    def set_ticks_per_quarter_note(self, ticks: int) -> None:
        self.clock.set_ticks_per_quarter_note(ticks)

    @property
    def time_signature(self) -> Tuple[int, int]:
        return self.clock.time_signature

    def set_time_signature(self, numerator: int, denominator: int) -> None:
        self.clock.set_time_signature(numerator, denominator)

    @property
    def tick_time(self) -> int:
        """Microseconds per tick."""
        return self.clock.tick_time

    # ── sink hooks ──────────────────────────────────────────────────

    def set_midi_handler(self, handler: Optional[Callable[[ChannelEvent], None]]) -> None:
        self.sink.on_channel = handler

    def set_sysex_handler(self, handler: Optional[Callable[[SysexEvent], None]]) -> None:
        self.sink.on_sysex = handler

    def set_meta_handler(self, handler: Optional[Callable[[MetaEvent], None]]) -> None:
        self.sink.on_meta = handler

    # ── load / close ────────────────────────────────────────────────

    def load(self, source: Optional[PathOrSource] = None) -> int:
        """Read the file header and every track header.

        `source` may be a path (remembered as the filename) or an already
        positioned `ByteSource`; with no argument the current filename is
        opened.  Returns `LoadStatus.SUCCESS` (-1) or a failure code, see
        `describe_load_status`.
        """
        if source is None:
            source = self._filename
        if self._tracks or self._source is not None:
            self.close()

        if isinstance(source, (str, os.PathLike)):
            self.set_filename(source)
            if not self._filename:
                return LoadStatus.NO_FILENAME
            try:
                self._source = FileSource.open(self._filename)
            except OSError as err:
                logger.warning("cannot open %s: %s", self._filename, err)
                return LoadStatus.OPEN_FAILED
            self._owns_source = True
        else:
            self._source = source
            self._owns_source = False

        status, header = read_header(self._source, max_tracks=self.config.max_tracks)
        if header is None:
            self._fail(status)
            return status

        self._format = header.format
        self.clock.set_ticks_per_quarter_note(header.ticks_per_quarter_note)

        tracks = [TrackCursor() for _ in range(header.track_count)]
        for index, cursor in enumerate(tracks):
            code = cursor.load(index, self._source)
            if code != LoadStatus.SUCCESS:
                status = track_load_status(index, code)
                self._fail(status)
                return status

        self._tracks = tracks
        self._sync_pending = True
        self._started = False
        logger.debug(
            "loaded %s: format %d, %d tracks, %d ticks/qn",
            self._filename or self._source,
            self._format,
            len(self._tracks),
            self.clock.ticks_per_quarter_note,
        )
        return LoadStatus.SUCCESS

    def _fail(self, status: int) -> None:
        logger.warning("load of %s failed with status %d", self._filename or self._source, status)
        self.close()

    def close(self) -> None:
        """Release the source and reset, ready for the next `load`."""
        for cursor in self._tracks:
            cursor.close()
        self._tracks = []
        if self._owns_source and isinstance(self._source, FileSource):
            self._source.close()
        self._source = None
        self._owns_source = False
        self._format = 0
        self._filename = ""
        self._paused = False
        self._sync_pending = True
        self._started = False
        self.clock.reset()

    # ── playback control ────────────────────────────────────────────

    @property
    def looping(self) -> bool:
        return self._looping

    def set_looping(self, mode: bool) -> None:
        self._looping = mode

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self, mode: bool) -> None:
        """Pause when `mode` is True, resume when False."""
        self._paused = mode
        if not mode:
            # Do not credit the paused interval as elapsed ticks.
            self._sync_pending = True

    def restart(self) -> None:
        """Rewind all tracks to their start.

        When looping a multi-track file, track 0 holds one-time setup
        events and is left where it is.
        """
        first = 1 if self._looping and len(self._tracks) > 1 else 0
        for cursor in self._tracks[first:]:
            cursor.restart()
        self._sync_pending = True

    def sync_tracks(self) -> None:
        for cursor in self._tracks:
            cursor.sync_time()
        self.clock.sync(self.time_us())

    def tick_clock(self) -> int:
        """Whole ticks elapsed since the previous sample."""
        return self.clock.sample_elapsed_ticks(self.time_us())

    def get_next_event(self) -> bool:
        """Run one scheduling step.  Returns True if at least one tick passed."""
        if not self._tracks or self._paused:
            return False
        self._started = True

        if self._sync_pending:
            self.sync_tracks()
            self._sync_pending = False
            return False

        ticks = self.tick_clock()
        if ticks == 0:
            return False

        self.process_events(ticks)
        return True

    def process_events(self, ticks: int) -> None:
        """Credit `ticks` to every track and dispatch whatever became due.

        Only the first decode attempt on a track is credited with the
        ticks; further events in the same step share its timestamp.
        """
        if ticks < 0:
            raise ValueError(f"ticks must not be negative, got {ticks}")
        if self._source is None:
            return

        limit = self.config.max_events_per_step
        if self.config.event_ordering == EVENT_PRIORITY:
            for n in range(limit):
                done = False
                for cursor in self._tracks:
                    if self._step_track(cursor, ticks if n == 0 else 0):
                        done = True
                if not done:
                    break
        else:
            for cursor in self._tracks:
                for n in range(limit):
                    if not self._step_track(cursor, ticks if n == 0 else 0):
                        break

    def _step_track(self, cursor: TrackCursor, ticks: int) -> bool:
        return cursor.get_next_event(
            self._source,
            ticks,
            self.clock,
            self.sink,
            sysex_capacity=self.config.sysex_capacity,
            meta_capacity=self.config.meta_capacity,
            emit_unrecognized_meta=self.config.emit_unrecognized_meta,
        )

    def is_finished(self) -> bool:
        """True once every track has ended.  When looping, restart instead."""
        if not self._tracks:
            return True
        if not all(cursor.end_of_track for cursor in self._tracks):
            return False
        if self._looping:
            logger.debug("end of file, looping")
            self.restart()
            return False
        return True

    @property
    def state(self) -> PlayerState:
        if not self._tracks:
            return PlayerState.IDLE
        if self._paused:
            return PlayerState.PAUSED
        if all(cursor.end_of_track for cursor in self._tracks):
            return PlayerState.FINISHED
        if not self._started:
            return PlayerState.READY
        return PlayerState.PLAYING
