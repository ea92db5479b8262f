"""Decoder errors."""

from __future__ import annotations


class DecodeError(Exception):
    """Base class for payload decoding failures."""


class InvalidPort(DecodeError):
    """The uplink arrived on a port this decoder does not handle."""

    def __init__(self, port: int, expected: int):
        self.port = port
        self.expected = expected
        super().__init__(f"invalid fPort {port}, expected {expected}")


class FrameTruncated(DecodeError):
    """The buffer ends before a declared chunk can be fully read."""

    def __init__(self, offset: int, needed: int, available: int):
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            f"frame truncated at offset {offset}: chunk needs {needed} bytes, {available} available"
        )
