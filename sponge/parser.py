"""Network-byte-order integer parsing and serialisation."""

from __future__ import annotations

from enum import Enum
from typing import Union

from .buffer import Buffer, BytesLike


class ParseResult(Enum):
    """The outcome of parsing a datagram, segment, frame or message."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6

    def __str__(self) -> str:
        return as_string(self)


_NAMES = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


def as_string(result: ParseResult) -> str:
    """A readable name for a ParseResult."""
    return _NAMES[ParseResult(result)]


class NetParser:
    """Reads big-endian integers from the front of a Buffer.

    Once an error is recorded, further reads return 0 and consume nothing.
    """

    def __init__(self, buffer: Union[Buffer, BytesLike]) -> None:
        self._buffer = Buffer(buffer)
        self.error = ParseResult.NO_ERROR

    @property
    def buffer(self) -> Buffer:
        """The unparsed remainder (a copy sharing storage)."""
        return Buffer(self._buffer)

    @property
    def has_error(self) -> bool:
        return self.error is not ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.error = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, length: int) -> int:
        self._check_size(length)
        if self.has_error:
            return 0
        value = int.from_bytes(self._buffer.view[:length], "big")
        self._buffer.remove_prefix(length)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if there are too few."""
        self._check_size(n)
        if self.has_error:
            return
        self._buffer.remove_prefix(n)


def _pack(value: int, length: int) -> bytes:
    mask = (1 << (8 * length)) - 1
    return (value & mask).to_bytes(length, "big")


def pack_u32(value: int) -> bytes:
    """Serialise a 32-bit integer in network byte order (truncating wider values)."""
    return _pack(value, 4)


def pack_u16(value: int) -> bytes:
    """Serialise a 16-bit integer in network byte order (truncating wider values)."""
    return _pack(value, 2)


def pack_u8(value: int) -> bytes:
    """Serialise an 8-bit integer (truncating wider values)."""
    return _pack(value, 1)