"""Fixed-width and variable-length integer readers for SMF data.

SMF stores chunk lengths and header fields as big-endian unsigned
integers, and delta-times / event lengths as variable-length quantities
(VLQ): seven value bits per byte, most significant group first, with the
top bit set on every byte except the last.

    0x00       -> 0
    0x7F       -> 127
    0x81 0x00  -> 128
    0xFF 0x7F  -> 16383
"""

from __future__ import annotations

from .source import ByteSource

MB_BYTE = 1
MB_WORD = 2
MB_TRYTE = 3
MB_LONG = 4


def read_fixed(source: ByteSource, size: int) -> int:
    """Read a `size`-byte big-endian unsigned integer (1-4 bytes).

    A short read composes whatever bytes were available.
    """
    if not 1 <= size <= 4:
        raise ValueError(f"fixed-width size must be 1-4 bytes, got {size}")
    return int.from_bytes(source.read(size), "big")


def read_var_len(source: ByteSource) -> int:
    """Read one variable-length quantity.

    No maximum length is enforced.  Running out of data ends the quantity,
    so a truncated source cannot spin forever.
    """
    value = 0
    while True:
        raw = source.read(1)
        if not raw:
            break
        byte = raw[0]
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            break
    return value
