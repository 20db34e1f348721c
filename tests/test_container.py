"""Tests for header validation and load status codes."""

import pytest

from smf.container import (
    LoadError,
    LoadStatus,
    SMFHeader,
    TrackLoadStatus,
    check_load_status,
    describe_load_status,
    read_header,
    track_load_status,
)
from smf.source import BytesSource

from smf_bytes import header_chunk


def header_status(raw: bytes, max_tracks: int = 16):
    return read_header(BytesSource(raw), max_tracks=max_tracks)


class TestReadHeader:
    def test_format_1(self):
        status, header = header_status(header_chunk(1, 3, 96))
        assert status == LoadStatus.SUCCESS
        assert header == SMFHeader(format=1, track_count=3, division=96)
        assert header.ticks_per_quarter_note == 96
        assert not header.is_smpte

    def test_leaves_source_after_header(self):
        source = BytesSource(header_chunk(0, 1, 48) + b"MTrk")
        read_header(source, max_tracks=16)
        assert source.tell() == 14

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (b"RIFF" + header_chunk(0, 1, 48)[4:], LoadStatus.BAD_MAGIC),
            (b"MTh", LoadStatus.BAD_MAGIC),
            (header_chunk(0, 1, 48, length=8), LoadStatus.BAD_HEADER_SIZE),
            (header_chunk(2, 1, 48), LoadStatus.BAD_FORMAT),
            (header_chunk(0, 2, 48), LoadStatus.FORMAT0_TRACK_COUNT),
            (header_chunk(0, 0, 48), LoadStatus.FORMAT0_TRACK_COUNT),
            (header_chunk(1, 17, 48), LoadStatus.TOO_MANY_TRACKS),
        ],
        ids=["magic", "short", "length", "format2", "fmt0-two", "fmt0-none", "tracks"],
    )
    def test_failures(self, raw, expected):
        status, header = header_status(raw)
        assert status == expected
        assert header is None

    def test_max_tracks_is_configurable(self):
        assert header_status(header_chunk(1, 17, 48), max_tracks=32)[0] == LoadStatus.SUCCESS

    def test_smpte_division(self):
        # -25 fps, 40 ticks per frame
        status, header = header_status(header_chunk(1, 1, 0xE728))
        assert status == LoadStatus.SUCCESS
        assert header.is_smpte
        assert header.smpte == (25, 40)
        assert header.ticks_per_quarter_note == 1000

    @pytest.mark.parametrize("high, fps", [(232, 24), (227, 29), (226, 30)])
    def test_smpte_rates(self, high, fps):
        _, header = header_status(header_chunk(1, 1, (high << 8) | 10))
        assert header.smpte == (fps, 10)

    def test_unsupported_smpte_rate(self):
        status, header = header_status(header_chunk(1, 1, 0xE510))
        assert status == LoadStatus.TOO_MANY_TRACKS
        assert header is None


class TestLoadCodes:
    def test_track_codes(self):
        assert track_load_status(0, TrackLoadStatus.BAD_MAGIC) == 10
        assert track_load_status(1, TrackLoadStatus.BAD_MAGIC) == 20
        assert track_load_status(0, TrackLoadStatus.LENGTH_OVERRUN) == 11

    @pytest.mark.parametrize(
        "code, text",
        [
            (LoadStatus.NO_FILENAME, "no file name given"),
            (LoadStatus.BAD_FORMAT, "only format 0 and 1 files are supported"),
            (10, "track 0: missing 'MTrk'"),
            (31, "track 2: declared length runs past end of file"),
            (1, "unknown load status 1"),
            (15, "unknown load status 15"),
        ],
    )
    def test_describe(self, code, text):
        assert describe_load_status(code) == text

    def test_check_success(self):
        check_load_status(LoadStatus.SUCCESS)

    def test_check_raises_with_code(self):
        with pytest.raises(LoadError, match="missing 'MThd'") as excinfo:
            check_load_status(LoadStatus.BAD_MAGIC)
        assert excinfo.value.code == 3
        assert isinstance(excinfo.value, ValueError)
