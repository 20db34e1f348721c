"""Standard MIDI File decoding and real-time playback."""

from .clock import (  # noqa: F401
    DEFAULT_MICROSECONDS_PER_QUARTER_NOTE,
    DEFAULT_TEMPO,
    DEFAULT_TICKS_PER_QUARTER_NOTE,
    DEFAULT_TIME_SIGNATURE,
    PlaybackClock,
)
from .config import (  # noqa: F401
    EVENT_PRIORITY,
    TRACK_PRIORITY,
    PlayerConfig,
    load_player_config,
    parse_player_config,
)
from .container import (  # noqa: F401
    MTHD_MAGIC,
    MTRK_MAGIC,
    LoadError,
    LoadStatus,
    SMFHeader,
    TrackLoadStatus,
    check_load_status,
    describe_load_status,
)
from .decoder import DecodeResult, RunningStatus, parse_event  # noqa: F401
from .events import (  # noqa: F401
    ChannelEvent,
    MetaEvent,
    MetaType,
    SysexEvent,
    TrackEvent,
    key_signature_name,
)
from .midifile import MidiFile, PlayerState  # noqa: F401
from .primitives import read_fixed, read_var_len  # noqa: F401
from .sink import DispatchSink, MidoPortSink  # noqa: F401
from .source import ByteSource, BytesSource, FileSource  # noqa: F401
from .track import TrackCursor  # noqa: F401
