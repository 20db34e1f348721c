"""Decode one track event body from a byte source.

The delta-time has already been consumed by the caller; `parse_event`
reads the status byte and whatever follows it:

  0x80-0xBF, 0xE0-0xEF  channel message with two data bytes
  0xC0-0xDF             channel message with one data byte
  0x00-0x7F             running status: the byte is the first data byte of
                        a message repeating the previous channel header
  0xF0 / 0xF7           system exclusive: <len:v> <data>
  0xFF                  meta event: <type:1> <len:v> <data>
  anything else         unrecoverable, the track is halted

Running status is the only state carried between calls.  It is passed in
and returned explicitly as a `RunningStatus`; SysEx and meta events leave
it untouched.  Set-Tempo and Time-Signature meta events are applied to the
playback clock before the event is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .clock import PlaybackClock
from .events import (
    DEFAULT_META_CAPACITY,
    DEFAULT_SYSEX_CAPACITY,
    INTERPRETED_META,
    TEXT_ENCODING,
    ChannelEvent,
    MetaEvent,
    MetaType,
    SysexEvent,
    TrackEvent,
    key_signature_name,
)
from .primitives import read_fixed, read_var_len
from .source import ByteSource, skip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunningStatus:
    """The last channel message header seen on a track."""

    status: int

    @property
    def channel(self) -> int:
        return self.status & 0x0F

    @property
    def command(self) -> int:
        return self.status & 0xF0

    @property
    def data_size(self) -> int:
        return 1 if 0xC0 <= self.status <= 0xDF else 2


@dataclass(frozen=True)
class DecodeResult:
    event: Optional[TrackEvent]
    running_status: Optional[RunningStatus]
    end_of_track: bool = False
    emit: bool = True


def parse_event(
    source: ByteSource,
    track: int,
    running_status: Optional[RunningStatus],
    clock: PlaybackClock,
    *,
    sysex_capacity: int = DEFAULT_SYSEX_CAPACITY,
    meta_capacity: int = DEFAULT_META_CAPACITY,
    emit_unrecognized_meta: bool = True,
) -> DecodeResult:
    """Decode the event at the current source position.

    Returns the decoded event (None when the track had to be halted), the
    running status to use for the next call, and whether the track ended.
    ``emit`` is False for opaque meta events suppressed by configuration.
    """
    raw = source.read(1)
    if not raw:
        logger.debug("track %d: ran out of data reading status", track)
        return DecodeResult(None, running_status, end_of_track=True)
    status = raw[0]

    if 0x80 <= status <= 0xEF:
        header = RunningStatus(status)
        data = source.read(header.data_size)
        event = ChannelEvent(track, header.channel, header.command, data)
        logger.debug("track %d: [MIDI] %s", track, event)
        return DecodeResult(event, header)

    if status <= 0x7F:
        if running_status is None:
            logger.warning(
                "track %d: data byte 0x%02X with no running status, track aborted",
                track,
                status,
            )
            return DecodeResult(None, None, end_of_track=True)
        data = bytes([status]) + source.read(running_status.data_size - 1)
        event = ChannelEvent(
            track, running_status.channel, running_status.command, data
        )
        logger.debug("track %d: [MIDI+] %s", track, event)
        return DecodeResult(event, running_status)

    if status in (0xF0, 0xF7):
        event = _parse_sysex(source, track, status, sysex_capacity)
        logger.debug("track %d: %s", track, event)
        return DecodeResult(event, running_status)

    if status == 0xFF:
        event = _parse_meta(source, track, clock, meta_capacity)
        logger.debug("track %d: %s", track, event)
        emit = emit_unrecognized_meta or event.meta_type in INTERPRETED_META
        return DecodeResult(
            event,
            running_status,
            end_of_track=event.meta_type == MetaType.END_OF_TRACK,
            emit=emit,
        )

    logger.warning("track %d: unknown status 0x%02X, track aborted", track, status)
    return DecodeResult(None, running_status, end_of_track=True)


def _read_bounded(source: ByteSource, length: int, capacity: int) -> bytes:
    """Read up to `capacity` of `length` bytes and skip the rest."""
    kept = min(length, capacity)
    data = source.read(kept)
    if length > kept:
        skip(source, length - kept)
    return data


def _parse_sysex(
    source: ByteSource, track: int, status: int, capacity: int
) -> SysexEvent:
    # The declared length covers the payload and the trailing 0xF7 but not
    # the lead byte; 0xF0 messages deliver the lead byte as well.
    length = read_var_len(source)
    lead = bytes([status])[:capacity] if status == 0xF0 else b""
    size = length + 1 if status == 0xF0 else length
    data = lead + _read_bounded(source, length, capacity - len(lead))
    return SysexEvent(track, data, size, truncated=size > len(data))


# Payload bytes each interpreted meta type needs, read whatever the capacity.
_VALUE_SIZES = {
    MetaType.SEQUENCE_NUMBER: 2,
    MetaType.CHANNEL_PREFIX: 1,
    MetaType.PORT_PREFIX: 1,
    MetaType.SET_TEMPO: 3,
    MetaType.TIME_SIGNATURE: 4,
    MetaType.KEY_SIGNATURE: 2,
}


def _parse_meta(
    source: ByteSource, track: int, clock: PlaybackClock, capacity: int
) -> MetaEvent:
    meta_type = read_fixed(source, 1)
    length = read_var_len(source)
    needed = _VALUE_SIZES.get(meta_type, 0)
    # The capacity only bounds the copy forwarded with the event.
    raw = _read_bounded(source, length, max(capacity, needed))
    data = raw[:capacity]
    truncated = length > len(data)
    value = None
    size = length

    if meta_type == MetaType.END_OF_TRACK:
        logger.debug("track %d: END OF TRACK", track)

    elif meta_type == MetaType.SET_TEMPO and len(raw) >= 3:
        value = int.from_bytes(raw[:3], "big")
        clock.set_microseconds_per_quarter_note(value)
        logger.debug(
            "track %d: SET TEMPO %d us/qn -> %d bpm, %d us/tick",
            track,
            value,
            clock.tempo,
            clock.tick_time,
        )

    elif meta_type == MetaType.TIME_SIGNATURE and len(raw) >= 2:
        numerator = raw[0]
        denominator = 1 << raw[1]
        value = (numerator, denominator)
        clock.set_time_signature(numerator, denominator)
        logger.debug("track %d: SET TIME SIGNATURE %d/%d", track, numerator, denominator)

    elif meta_type == MetaType.KEY_SIGNATURE and len(raw) >= 2:
        sharps_flats = int.from_bytes(raw[:1], "big", signed=True)
        minor = raw[1]
        value = (sharps_flats, minor)
        name = key_signature_name(sharps_flats, minor)
        data = name.encode(TEXT_ENCODING)
        size = len(data)
        truncated = False

    elif meta_type in (MetaType.SEQUENCE_NUMBER, MetaType.CHANNEL_PREFIX, MetaType.PORT_PREFIX):
        value = int.from_bytes(raw[:needed], "big")

    return MetaEvent(
        track, meta_type, data, size, truncated=truncated, value=value
    )
