"""Positioned, re-seekable byte readers used by the container parser and decoder.

The decoder only needs three things from a source: seek to an absolute
offset, read the next N bytes, and report the current position.  Short
reads are not errors; callers bound their reads with the chunk lengths
declared in the file.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Protocol


class ByteSource(Protocol):
    def seek(self, offset: int) -> bool:
        """Move to absolute `offset`; return False if it lies past the end."""

    def read(self, count: int) -> bytes:
        """Return up to `count` bytes and advance past them."""

    def tell(self) -> int:
        """Return the current absolute position."""


def skip(source: ByteSource, count: int) -> bool:
    """Advance `source` by `count` bytes without reading them."""

    return source.seek(source.tell() + count)


class BytesSource:
    """A `ByteSource` over an in-memory buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.pos = 0

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"BytesSource(len: {len(self.data):#x}, pos: {self.pos:#x})"

    def seek(self, offset: int) -> bool:
        if offset < 0 or offset > len(self.data):
            return False
        self.pos = offset
        return True

    def read(self, count: int) -> bytes:
        chunk = self.data[self.pos : self.pos + count]
        self.pos += len(chunk)
        return chunk

    def tell(self) -> int:
        return self.pos


class FileSource:
    """A `ByteSource` over an open binary file object."""

    def __init__(self, fileobj: BinaryIO) -> None:
        self.fileobj = fileobj
        self.fileobj.seek(0, io.SEEK_END)
        self.size = self.fileobj.tell()
        self.fileobj.seek(0)

    @classmethod
    def open(cls, path) -> "FileSource":
        return cls(open(path, "rb"))

    def __repr__(self) -> str:
        name = getattr(self.fileobj, "name", "?")
        return f"FileSource({name!r}, size: {self.size:#x})"

    def seek(self, offset: int) -> bool:
        # Regular files happily seek past EOF, so bound it ourselves.
        if offset < 0 or offset > self.size:
            return False
        self.fileobj.seek(offset)
        return True

    def read(self, count: int) -> bytes:
        return self.fileobj.read(count)

    def tell(self) -> int:
        return self.fileobj.tell()

    def close(self) -> None:
        self.fileobj.close()
