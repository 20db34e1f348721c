"""Tempo bookkeeping and wall-clock to tick conversion.

1 tick = microseconds per beat / ticks per quarter note, scaled by the
time signature denominator so the beat is a quarter note at 4/4.  At the
SMF defaults (120 BPM, 48 ticks per quarter note, 4/4) a tick lasts
10416 microseconds.

All arithmetic is integer microseconds.  The remainder left over when
elapsed time is converted to whole ticks is carried into the next sample,
so chopping the same interval into different samples yields the same
total tick count.
"""

from __future__ import annotations

import logging
from typing import Tuple

logger = logging.getLogger(__name__)

MICROSECONDS_PER_MINUTE = 60 * 1000000
DEFAULT_TICKS_PER_QUARTER_NOTE = 48
DEFAULT_TEMPO = 120
DEFAULT_MICROSECONDS_PER_QUARTER_NOTE = 500000
DEFAULT_TIME_SIGNATURE = (4, 4)


class PlaybackClock:
    def __init__(self, tempo_adjust: int = 0) -> None:
        self.tempo = DEFAULT_TEMPO
        self.tempo_adjust = 0
        self.ticks_per_quarter_note = DEFAULT_TICKS_PER_QUARTER_NOTE
        self.time_signature: Tuple[int, int] = DEFAULT_TIME_SIGNATURE
        self.tick_time = 0
        self.last_tick_error = 0
        self.last_check_time = 0
        self.reset()
        self.set_tempo_adjust(tempo_adjust)

    def __repr__(self) -> str:
        num, den = self.time_signature
        return (
            f"PlaybackClock(tempo: {self.tempo}{self.tempo_adjust:+d}, "
            f"tpqn: {self.ticks_per_quarter_note}, sig: {num}/{den}, "
            f"tick: {self.tick_time}us)"
        )

    def reset(self) -> None:
        """Restore the file defaults.  The tempo adjustment is a user setting and survives."""
        self.ticks_per_quarter_note = DEFAULT_TICKS_PER_QUARTER_NOTE
        self.set_tempo(DEFAULT_TEMPO)
        self.set_microseconds_per_quarter_note(DEFAULT_MICROSECONDS_PER_QUARTER_NOTE)
        self.set_time_signature(*DEFAULT_TIME_SIGNATURE)
        self.last_tick_error = 0
        self.last_check_time = 0

    def set_tempo(self, bpm: int) -> None:
        if bpm + self.tempo_adjust <= 0:
            logger.debug("tempo %d rejected with adjustment %d", bpm, self.tempo_adjust)
            return
        self.tempo = bpm
        self.calc_tick_time()

    def set_tempo_adjust(self, delta: int) -> None:
        if self.tempo + delta <= 0:
            logger.debug("tempo adjustment %d rejected at tempo %d", delta, self.tempo)
            return
        self.tempo_adjust = delta
        self.calc_tick_time()

    def set_microseconds_per_quarter_note(self, value: int) -> None:
        """Set the tempo from a Set-Tempo meta event value."""
        if value <= 0:
            logger.debug("ignoring non-positive microseconds per quarter note %d", value)
            return
        self.tempo = MICROSECONDS_PER_MINUTE // value
        self.calc_tick_time()

    def set_ticks_per_quarter_note(self, ticks: int) -> None:
        self.ticks_per_quarter_note = ticks
        self.calc_tick_time()

    def set_time_signature(self, numerator: int, denominator: int) -> None:
        self.time_signature = (numerator, denominator)
        self.calc_tick_time()

    def calc_tick_time(self) -> None:
        """Recompute microseconds per tick; keep the old value if it would be undefined."""
        bpm = self.tempo + self.tempo_adjust
        denominator = self.time_signature[1]
        if bpm <= 0 or self.ticks_per_quarter_note == 0 or denominator == 0:
            return
        per_beat = MICROSECONDS_PER_MINUTE // bpm
        tick_time = (per_beat * 4) // (denominator * self.ticks_per_quarter_note)
        if tick_time <= 0:
            # A zero-length tick would stop the clock.
            logger.debug("tick time rounds to %d us, keeping %d", tick_time, self.tick_time)
            return
        self.tick_time = tick_time

    def sync(self, now: int) -> None:
        """Take `now` as the reference point for the next sample."""
        self.last_check_time = now

    def sample_elapsed_ticks(self, now: int) -> int:
        """Return how many whole ticks have passed since the last sample."""
        elapsed = self.last_tick_error + (now - self.last_check_time)
        if self.tick_time <= 0 or elapsed < self.tick_time:
            return 0
        ticks = elapsed // self.tick_time
        self.last_tick_error = elapsed - ticks * self.tick_time
        self.last_check_time = now
        return ticks
