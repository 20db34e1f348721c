import json

import pytest

from smf.config import (
    EVENT_PRIORITY,
    TRACK_PRIORITY,
    PlayerConfig,
    load_player_config,
    parse_player_config,
)


def test_defaults():
    config = PlayerConfig()
    assert config.event_ordering == TRACK_PRIORITY
    assert config.max_tracks == 16
    assert config.emit_unrecognized_meta
    assert config.sysex_capacity == 50
    assert config.meta_capacity == 50
    assert config.max_events_per_step == 100
    assert not config.looping
    assert config.tempo_adjust == 0


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"event_ordering": "random"}, "event_ordering must be one of"),
        ({"max_tracks": 0}, "max_tracks must be at least 1"),
        ({"max_events_per_step": 0}, "max_events_per_step must be at least 1"),
        ({"sysex_capacity": -1}, "sysex_capacity must not be negative"),
    ],
)
def test_constructor_validation(kwargs, message):
    with pytest.raises(ValueError, match=message):
        PlayerConfig(**kwargs)


def test_with_overrides_skips_none():
    config = PlayerConfig(max_tracks=4).with_overrides(
        event_ordering=EVENT_PRIORITY, max_tracks=None, tempo_adjust=-5
    )
    assert config.event_ordering == EVENT_PRIORITY
    assert config.max_tracks == 4
    assert config.tempo_adjust == -5


class TestParse:
    def test_empty_object_gives_defaults(self):
        assert parse_player_config({}) == PlayerConfig()

    def test_all_fields(self):
        config = parse_player_config(
            {
                "event_ordering": "event",
                "max_tracks": 32,
                "emit_unrecognized_meta": False,
                "sysex_capacity": 128,
                "meta_capacity": 16,
                "max_events_per_step": 10,
                "looping": True,
                "tempo_adjust": 12,
            }
        )
        assert config == PlayerConfig(
            event_ordering=EVENT_PRIORITY,
            max_tracks=32,
            emit_unrecognized_meta=False,
            sysex_capacity=128,
            meta_capacity=16,
            max_events_per_step=10,
            looping=True,
            tempo_adjust=12,
        )

    @pytest.mark.parametrize(
        "data, message",
        [
            ([], "config must be an object"),
            ({"loop": True}, "unknown config keys: loop"),
            ({"event_ordering": "tracks"}, "config.event_ordering must be one of"),
            ({"max_tracks": 0}, r"config.max_tracks must be in \[1, 65535\]"),
            ({"max_tracks": "16"}, "config.max_tracks must be an integer"),
            ({"max_tracks": True}, "config.max_tracks must be an integer"),
            ({"looping": 1}, "config.looping must be a boolean"),
            ({"tempo_adjust": 5000}, r"config.tempo_adjust must be in \[-1000, 1000\]"),
        ],
    )
    def test_rejects(self, data, message):
        with pytest.raises(ValueError, match=message):
            parse_player_config(data)


def test_load_player_config(tmp_path):
    path = tmp_path / "player.json"
    path.write_text(json.dumps({"looping": True, "event_ordering": "event"}), encoding="utf-8")
    config = load_player_config(path)
    assert config.looping
    assert config.event_ordering == EVENT_PRIORITY
