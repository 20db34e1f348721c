"""Tests for fixed-width and variable-length integer readers."""

import pytest

from smf.primitives import MB_LONG, MB_TRYTE, MB_WORD, read_fixed, read_var_len
from smf.source import BytesSource


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b"\x00", 0),
        (b"\x40", 0x40),
        (b"\x7F", 127),
        (b"\x81\x00", 128),
        (b"\xC0\x00", 0x2000),
        (b"\xFF\x7F", 16383),
        (b"\x81\x80\x00", 0x4000),
        (b"\xFF\xFF\xFF\x7F", 0x0FFFFFFF),
    ],
    ids=lambda v: v.hex() if isinstance(v, bytes) else str(v),
)
def test_read_var_len(raw, expected):
    source = BytesSource(raw + b"\x55")
    assert read_var_len(source) == expected
    # Stops right after the first byte with the top bit clear.
    assert source.tell() == len(raw)


def test_read_var_len_consecutive_values():
    source = BytesSource(b"\x81\x00\x00\xFF\x7F")
    assert [read_var_len(source) for _ in range(3)] == [128, 0, 16383]


def test_read_var_len_stops_at_end_of_data():
    source = BytesSource(b"\x81\x81")
    assert read_var_len(source) == (1 << 7) | 1
    assert source.tell() == 2


class TestReadFixed:
    def test_big_endian(self):
        source = BytesSource(b"\x00\x00\x00\x06\x00\x01\x07\xA1\x20")
        assert read_fixed(source, MB_LONG) == 6
        assert read_fixed(source, MB_WORD) == 1
        assert read_fixed(source, MB_TRYTE) == 500000
        assert source.tell() == 9

    def test_single_byte(self):
        source = BytesSource(b"\xE7")
        assert read_fixed(source, 1) == 231

    def test_short_read_uses_available_bytes(self):
        source = BytesSource(b"\x01\x02")
        assert read_fixed(source, MB_LONG) == 0x0102
        assert source.tell() == 2

    @pytest.mark.parametrize("size", [0, 5])
    def test_rejects_bad_size(self, size):
        with pytest.raises(ValueError, match="1-4 bytes"):
            read_fixed(BytesSource(b"\x00" * 8), size)
