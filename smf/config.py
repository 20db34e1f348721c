from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path

from .events import DEFAULT_META_CAPACITY, DEFAULT_SYSEX_CAPACITY

TRACK_PRIORITY = "track"
EVENT_PRIORITY = "event"
VALID_ORDERINGS = {TRACK_PRIORITY, EVENT_PRIORITY}

DEFAULT_MAX_TRACKS = 16
DEFAULT_MAX_EVENTS_PER_STEP = 100


@dataclass(frozen=True)
class PlayerConfig:
    event_ordering: str = TRACK_PRIORITY
    max_tracks: int = DEFAULT_MAX_TRACKS
    emit_unrecognized_meta: bool = True
    sysex_capacity: int = DEFAULT_SYSEX_CAPACITY
    meta_capacity: int = DEFAULT_META_CAPACITY
    # Liveness bound on events drained per track (or rounds) in one step.
    max_events_per_step: int = DEFAULT_MAX_EVENTS_PER_STEP
    looping: bool = False
    tempo_adjust: int = 0

    def __post_init__(self) -> None:
        if self.event_ordering not in VALID_ORDERINGS:
            modes = ", ".join(sorted(VALID_ORDERINGS))
            raise ValueError(f"event_ordering must be one of: {modes}")
        for name in ("max_tracks", "max_events_per_step"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        for name in ("sysex_capacity", "meta_capacity"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def with_overrides(self, **changes: object) -> "PlayerConfig":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _require_dict(value: object, *, where: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be an object")
    return value


def _require_bool(value: object, *, where: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{where} must be a boolean")
    return value


def _int_in_range(value: object, *, where: str, low: int, high: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{where} must be an integer")
    if not (low <= value <= high):
        raise ValueError(f"{where} must be in [{low}, {high}]")
    return value


_FIELDS = {
    "event_ordering",
    "max_tracks",
    "emit_unrecognized_meta",
    "sysex_capacity",
    "meta_capacity",
    "max_events_per_step",
    "looping",
    "tempo_adjust",
}


def parse_player_config(data: object) -> PlayerConfig:
    obj = _require_dict(data, where="config")

    unknown = sorted(set(obj) - _FIELDS)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(unknown)}")

    defaults = PlayerConfig()
    ordering = obj.get("event_ordering", defaults.event_ordering)
    if ordering not in VALID_ORDERINGS:
        modes = ", ".join(sorted(VALID_ORDERINGS))
        raise ValueError(f"config.event_ordering must be one of: {modes}")

    return PlayerConfig(
        event_ordering=ordering,
        max_tracks=_int_in_range(
            obj.get("max_tracks", defaults.max_tracks),
            where="config.max_tracks",
            low=1,
            high=65535,
        ),
        emit_unrecognized_meta=_require_bool(
            obj.get("emit_unrecognized_meta", defaults.emit_unrecognized_meta),
            where="config.emit_unrecognized_meta",
        ),
        sysex_capacity=_int_in_range(
            obj.get("sysex_capacity", defaults.sysex_capacity),
            where="config.sysex_capacity",
            low=0,
            high=65535,
        ),
        meta_capacity=_int_in_range(
            obj.get("meta_capacity", defaults.meta_capacity),
            where="config.meta_capacity",
            low=0,
            high=65535,
        ),
        max_events_per_step=_int_in_range(
            obj.get("max_events_per_step", defaults.max_events_per_step),
            where="config.max_events_per_step",
            low=1,
            high=65535,
        ),
        looping=_require_bool(obj.get("looping", defaults.looping), where="config.looping"),
        tempo_adjust=_int_in_range(
            obj.get("tempo_adjust", defaults.tempo_adjust),
            where="config.tempo_adjust",
            low=-1000,
            high=1000,
        ),
    )


def load_player_config(path: Path | str) -> PlayerConfig:
    config_path = Path(path)
    payload = json.loads(config_path.read_text(encoding="utf-8"))
    return parse_player_config(payload)
