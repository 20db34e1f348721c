"""Decoded track events: channel messages, system exclusive and meta events.

Every event carries the id of the track it was read from.  SysEx and meta
payloads are bounded; when a declared length exceeds the capacity the
excess is skipped in the source and the event is flagged ``truncated``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import mido

DEFAULT_SYSEX_CAPACITY = 50
DEFAULT_META_CAPACITY = 50
TEXT_ENCODING = "latin-1"


class MetaType(enum.IntEnum):
    SEQUENCE_NUMBER = 0x00  # 02 ss ss
    TEXT = 0x01
    COPYRIGHT = 0x02
    TRACK_NAME = 0x03
    INSTRUMENT_NAME = 0x04
    LYRIC = 0x05
    MARKER = 0x06
    CUE_POINT = 0x07
    CHANNEL_PREFIX = 0x20  # 01 cc
    PORT_PREFIX = 0x21  # 01 pp
    END_OF_TRACK = 0x2F  # 00
    SET_TEMPO = 0x51  # 03 tt tt tt
    SMPTE_OFFSET = 0x54  # 05 hr mn se fr ff
    TIME_SIGNATURE = 0x58  # 04 nn dd cc bb
    KEY_SIGNATURE = 0x59  # 02 sf mi
    SEQUENCER_SPECIFIC = 0x7F


# Meta types the decoder acts on itself; everything else is opaque.
INTERPRETED_META = frozenset(
    {
        MetaType.SEQUENCE_NUMBER,
        MetaType.CHANNEL_PREFIX,
        MetaType.PORT_PREFIX,
        MetaType.END_OF_TRACK,
        MetaType.SET_TEMPO,
        MetaType.TIME_SIGNATURE,
        MetaType.KEY_SIGNATURE,
    }
)

# mido message type and the attribute holding the text.
_TEXT_META = {
    MetaType.TEXT: ("text", "text"),
    MetaType.COPYRIGHT: ("copyright", "text"),
    MetaType.TRACK_NAME: ("track_name", "name"),
    MetaType.INSTRUMENT_NAME: ("instrument_name", "name"),
    MetaType.LYRIC: ("lyrics", "text"),
    MetaType.MARKER: ("marker", "text"),
    MetaType.CUE_POINT: ("cue_marker", "text"),
}

# Indexed by sharps/flats + 7 for major keys and + 10 for minor keys.
KEY_NAMES = (
    "Cb", "Gb", "Db", "Ab", "Eb", "Bb", "F", "C", "G",
    "D", "A", "E", "B", "F#", "C#", "G#", "D#", "A#",
)
KEY_ERROR = "Err"


def key_signature_name(sharps_flats: int, minor: int) -> str:
    """Render a key signature as e.g. ``"GM"`` (G major) or ``"Em"`` (E minor)."""
    if not -7 <= sharps_flats <= 7:
        return KEY_ERROR
    if minor == 0:
        return KEY_NAMES[sharps_flats + 7] + "M"
    if minor == 1:
        return KEY_NAMES[sharps_flats + 10] + "m"
    return KEY_ERROR


@dataclass(frozen=True)
class ChannelEvent:
    """A channel voice message.

    ``command`` is the status byte with the channel masked off (0x80-0xE0),
    ``data`` holds the one or two data bytes that follow it.
    """

    track: int
    channel: int
    command: int
    data: bytes

    @property
    def status(self) -> int:
        return self.command | self.channel

    @property
    def size(self) -> int:
        """Message length in bytes, status included."""
        return 1 + len(self.data)

    def to_bytes(self) -> bytes:
        return bytes([self.status]) + self.data

    def to_mido(self) -> mido.Message:
        return mido.Message.from_bytes(list(self.to_bytes()))

    def __str__(self) -> str:
        data = " ".join(f"{b:02X}" for b in self.data)
        return f"T{self.track} ch{self.channel + 1} {self.command:02X} {data}"


@dataclass(frozen=True)
class SysexEvent:
    """A system exclusive message.

    For 0xF0-initiated messages ``data`` starts with the 0xF0 lead byte;
    0xF7 (escape / continuation) messages carry only their payload.
    ``size`` is the full declared length, ``data`` what fit in the buffer.
    """

    track: int
    data: bytes
    size: int
    truncated: bool = False

    def to_mido(self) -> mido.Message:
        body = self.data
        if body[:1] == b"\xF0":
            body = body[1:]
        if body[-1:] == b"\xF7":
            body = body[:-1]
        return mido.Message("sysex", data=list(body))

    def __str__(self) -> str:
        data = " ".join(f"{b:02X}" for b in self.data)
        more = " ..." if self.truncated else ""
        return f"T{self.track} SYSEX[{self.size}] {data}{more}"


@dataclass(frozen=True)
class MetaEvent:
    """A meta event.

    ``value`` holds the decoded payload for interpreted types: tempo in
    microseconds per quarter note, ``(numerator, denominator)`` for time
    signatures, ``(sharps_flats, minor)`` for key signatures, and a plain
    integer for sequence number, channel prefix and port prefix.
    """

    track: int
    meta_type: int
    data: bytes
    size: int
    truncated: bool = False
    value: Optional[Union[int, Tuple[int, int]]] = None

    @property
    def text(self) -> str:
        return self.data.decode(TEXT_ENCODING)

    @property
    def name(self) -> str:
        try:
            return MetaType(self.meta_type).name
        except ValueError:
            return f"META_{self.meta_type:02X}"

    def to_mido(self) -> mido.MetaMessage:
        kind = self.meta_type
        if kind == MetaType.END_OF_TRACK:
            return mido.MetaMessage("end_of_track")
        if kind == MetaType.SET_TEMPO and self.value is not None:
            return mido.MetaMessage("set_tempo", tempo=self.value)
        if kind == MetaType.TIME_SIGNATURE and self.value is not None:
            numerator, denominator = self.value
            extra = {}
            if len(self.data) >= 4:
                extra = {
                    "clocks_per_click": self.data[2],
                    "notated_32nd_notes_per_beat": self.data[3],
                }
            return mido.MetaMessage(
                "time_signature", numerator=numerator, denominator=denominator, **extra
            )
        if kind == MetaType.KEY_SIGNATURE and self.text != KEY_ERROR:
            key = self.text[:-1] + ("m" if self.text.endswith("m") else "")
            return mido.MetaMessage("key_signature", key=key)
        if kind == MetaType.SEQUENCE_NUMBER and self.value is not None:
            return mido.MetaMessage("sequence_number", number=self.value)
        if kind == MetaType.CHANNEL_PREFIX and self.value is not None:
            return mido.MetaMessage("channel_prefix", channel=self.value)
        if kind == MetaType.PORT_PREFIX and self.value is not None:
            return mido.MetaMessage("midi_port", port=self.value)
        if kind in _TEXT_META:
            message_type, attribute = _TEXT_META[MetaType(kind)]
            return mido.MetaMessage(message_type, **{attribute: self.text})
        if kind == MetaType.SEQUENCER_SPECIFIC:
            return mido.MetaMessage("sequencer_specific", data=list(self.data))
        return mido.UnknownMetaMessage(kind, data=list(self.data))

    def __str__(self) -> str:
        if self.meta_type in _TEXT_META or self.meta_type == MetaType.KEY_SIGNATURE:
            shown = repr(self.text)
        elif self.value is not None:
            shown = str(self.value)
        else:
            shown = " ".join(f"{b:02X}" for b in self.data)
        more = " ..." if self.truncated else ""
        return f"T{self.track} META {self.name} {shown}{more}"


TrackEvent = Union[ChannelEvent, SysexEvent, MetaEvent]
