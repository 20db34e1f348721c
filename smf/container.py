"""SMF chunk layout and load result codes.

    SMF          := <header_chunk> <track_chunk> [<track_chunk> ...]
    header_chunk := "MThd" <length:4 = 6> <format:2> <tracks:2> <division:2>
    track_chunk  := "MTrk" <length:4> <track_event> [<track_event> ...]
    track_event  := <delta:v> (<midi_event> | <meta_event> | <sysex_event>)

All fixed-width fields are big-endian.  When bit 15 of the division is
set it holds a negative SMPTE frame rate in the high byte (232, 231, 227
or 226 for 24, 25, 29.97 and 30 fps) and the ticks per frame in the low
byte.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .primitives import MB_LONG, MB_WORD, read_fixed
from .source import ByteSource

logger = logging.getLogger(__name__)

MTHD_MAGIC = b"MThd"
MTRK_MAGIC = b"MTrk"
MTHD_LENGTH = 6
SUPPORTED_FORMATS = (0, 1)

SMPTE_FRAME_RATES = {
    232: 24,
    231: 25,
    227: 29,
    226: 30,
}


class LoadStatus(enum.IntEnum):
    SUCCESS = -1
    NO_FILENAME = 0
    OPEN_FAILED = 2
    BAD_MAGIC = 3
    BAD_HEADER_SIZE = 4
    BAD_FORMAT = 5
    FORMAT0_TRACK_COUNT = 6
    TOO_MANY_TRACKS = 7


class TrackLoadStatus(enum.IntEnum):
    BAD_MAGIC = 0
    LENGTH_OVERRUN = 1


_MESSAGES = {
    LoadStatus.SUCCESS: "ok",
    LoadStatus.NO_FILENAME: "no file name given",
    LoadStatus.OPEN_FAILED: "file could not be opened",
    LoadStatus.BAD_MAGIC: "not a MIDI file (missing 'MThd')",
    LoadStatus.BAD_HEADER_SIZE: "header chunk length is not 6",
    LoadStatus.BAD_FORMAT: "only format 0 and 1 files are supported",
    LoadStatus.FORMAT0_TRACK_COUNT: "format 0 file must have exactly one track",
    LoadStatus.TOO_MANY_TRACKS: "too many tracks or unsupported SMPTE frame rate",
}

_TRACK_MESSAGES = {
    TrackLoadStatus.BAD_MAGIC: "missing 'MTrk'",
    TrackLoadStatus.LENGTH_OVERRUN: "declared length runs past end of file",
}


def track_load_status(index: int, code: int) -> int:
    """Combine a 0-based track index and a `TrackLoadStatus` into a load code."""
    return 10 * (index + 1) + code


def describe_load_status(code: int) -> str:
    if code in _MESSAGES:
        return _MESSAGES[LoadStatus(code)]
    if code >= 10:
        index, track_code = divmod(code, 10)
        if track_code in _TRACK_MESSAGES:
            return f"track {index - 1}: {_TRACK_MESSAGES[TrackLoadStatus(track_code)]}"
    return f"unknown load status {code}"


class LoadError(ValueError):
    def __init__(self, code: int) -> None:
        super().__init__(f"MIDI load failed ({code}): {describe_load_status(code)}")
        self.code = code


def check_load_status(code: int) -> None:
    """Raise `LoadError` unless `code` is `LoadStatus.SUCCESS`."""
    if code != LoadStatus.SUCCESS:
        raise LoadError(code)


@dataclass(frozen=True)
class SMFHeader:
    format: int
    track_count: int
    division: int

    @property
    def is_smpte(self) -> bool:
        return bool(self.division & 0x8000)

    @property
    def smpte(self) -> Optional[Tuple[int, int]]:
        """(frames per second, ticks per frame) for SMPTE divisions."""
        if not self.is_smpte:
            return None
        fps = SMPTE_FRAME_RATES.get((self.division >> 8) & 0xFF)
        if fps is None:
            return None
        return fps, self.division & 0xFF

    @property
    def ticks_per_quarter_note(self) -> int:
        smpte = self.smpte
        if smpte is not None:
            return smpte[0] * smpte[1]
        return self.division


def read_header(source: ByteSource, *, max_tracks: int) -> Tuple[int, Optional[SMFHeader]]:
    """Read and validate the header chunk at the current position.

    Returns ``(LoadStatus.SUCCESS, header)`` or ``(failure_code, None)``.
    """
    magic = source.read(len(MTHD_MAGIC))
    if magic != MTHD_MAGIC:
        logger.warning("bad header magic %r", magic)
        return LoadStatus.BAD_MAGIC, None

    length = read_fixed(source, MB_LONG)
    if length != MTHD_LENGTH:
        logger.warning("bad header length %d", length)
        return LoadStatus.BAD_HEADER_SIZE, None

    fmt = read_fixed(source, MB_WORD)
    if fmt not in SUPPORTED_FORMATS:
        logger.warning("unsupported format %d", fmt)
        return LoadStatus.BAD_FORMAT, None

    tracks = read_fixed(source, MB_WORD)
    if fmt == 0 and tracks != 1:
        logger.warning("format 0 file declares %d tracks", tracks)
        return LoadStatus.FORMAT0_TRACK_COUNT, None
    if tracks > max_tracks:
        logger.warning("%d tracks exceeds maximum %d", tracks, max_tracks)
        return LoadStatus.TOO_MANY_TRACKS, None

    header = SMFHeader(format=fmt, track_count=tracks, division=read_fixed(source, MB_WORD))
    if header.is_smpte and header.smpte is None:
        logger.warning("unsupported SMPTE division 0x%04X", header.division)
        return LoadStatus.TOO_MANY_TRACKS, None

    return LoadStatus.SUCCESS, header
