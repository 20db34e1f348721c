"""Where decoded events go.

A `DispatchSink` holds three independent, optional callbacks, one per
event kind.  A missing callback silently drops that kind of event.
`MidoPortSink` forwards channel and SysEx events to a mido output port.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import mido

from .events import ChannelEvent, MetaEvent, SysexEvent, TrackEvent

logger = logging.getLogger(__name__)

ALL_SOUND_OFF = 120
ALL_NOTES_OFF = 123
CHANNELS = 16


@dataclass
class DispatchSink:
    on_channel: Optional[Callable[[ChannelEvent], None]] = None
    on_sysex: Optional[Callable[[SysexEvent], None]] = None
    on_meta: Optional[Callable[[MetaEvent], None]] = None

    def dispatch(self, event: TrackEvent) -> None:
        if isinstance(event, ChannelEvent):
            handler = self.on_channel
        elif isinstance(event, SysexEvent):
            handler = self.on_sysex
        else:
            handler = self.on_meta
        if handler is not None:
            handler(event)


class MidoPortSink(DispatchSink):
    """Send decoded events to a mido output port.

    Meta events never go to the port; pass ``on_meta`` to observe them.
    """

    def __init__(
        self,
        port: mido.ports.BaseOutput,
        *,
        on_meta: Optional[Callable[[MetaEvent], None]] = None,
        send_sysex: bool = True,
    ) -> None:
        super().__init__(
            on_channel=self.send_channel,
            on_sysex=self.send_sysex if send_sysex else None,
            on_meta=on_meta,
        )
        self.port = port

    def send_channel(self, event: ChannelEvent) -> None:
        try:
            message = event.to_mido()
        except ValueError as err:
            logger.warning("cannot send %s: %s", event, err)
            return
        self.port.send(message)

    def send_sysex(self, event: SysexEvent) -> None:
        if event.truncated:
            logger.warning("not sending truncated sysex (%d of %d bytes)", len(event.data), event.size)
            return
        try:
            message = event.to_mido()
        except ValueError as err:
            logger.warning("cannot send sysex from track %d: %s", event.track, err)
            return
        self.port.send(message)

    def silence(self) -> None:
        """Turn off every sounding note on all channels."""
        for channel in range(CHANNELS):
            self.port.send(mido.Message("control_change", channel=channel, control=ALL_NOTES_OFF, value=0))
            self.port.send(mido.Message("control_change", channel=channel, control=ALL_SOUND_OFF, value=0))
