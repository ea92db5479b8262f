"""Tag-based frame scanner.

Each chunk starts with a one-byte tag whose numeric range fixes the chunk
length, known tag or not:

    tag < 0x40          1 byte  (tag only)
    0x40 <= tag < 0x80  2 bytes
    0x80 <= tag < 0xC0  3 bytes
    tag >= 0xC0         5 bytes

Only the first half of the buffer is scanned (``len(buffer) // 2``). Uplinks
seen so far carry their chunks there; whether the second half is a duplicated
encoding upstream or unused is unresolved, so the boundary is kept as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .errors import FrameTruncated


def chunk_length(tag: int) -> int:
    """Total bytes occupied by a chunk, tag byte included."""
    if tag < 0x40:
        return 1
    if tag < 0x80:
        return 2
    if tag < 0xC0:
        return 3
    return 5


def scan_limit(buffer: bytes) -> int:
    return len(buffer) // 2


@dataclass(frozen=True)
class Chunk:
    """One tag and the value bytes that follow it."""
    tag: int
    value: bytes
    offset: int


def read_chunks(buffer: bytes) -> Iterator[Chunk]:
    """Yield the chunks of ``buffer`` in wire order.

    Raises:
        FrameTruncated: a chunk's declared length runs past the end of the buffer
    """
    limit = scan_limit(buffer)
    size = len(buffer)
    idx = 0

    while idx < limit:
        tag = buffer[idx]
        length = chunk_length(tag)

        if idx + length > size:
            raise FrameTruncated(offset=idx, needed=length, available=size - idx)

        yield Chunk(tag=tag, value=bytes(buffer[idx + 1:idx + length]), offset=idx)
        idx += length
