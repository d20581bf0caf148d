"""Error types, the Internet checksum, timing, randomness and hexdump helpers."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import IO, Optional

_MT_STATE_BYTES = 624 * 4
_PROGRAM_START_NS = time.monotonic_ns()


class TaggedError(OSError):
    """An OS-level error carrying the name of what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A failed system call, described by its name and errno value."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with a full state of entropy."""
    seed = int.from_bytes(os.urandom(_MT_STATE_BYTES), "big")
    return random.Random(seed)


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started (monotonic clock)."""
    return (time.monotonic_ns() - _PROGRAM_START_NS) // 1_000_000


class InternetChecksum:
    """The Internet checksum (RFC 1071), computed incrementally.

    The value is returned in host order. Running it over data that already
    contains a correct checksum yields zero.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._odd = False

    def add(self, data: bytes) -> None:
        """Add bytes to the running sum; odd-length pieces carry over correctly."""
        total = self._sum
        odd = self._odd
        for byte in bytes(memoryview(data)):
            total += byte if odd else byte << 8
            odd = not odd
        self._sum = total & 0xFFFFFFFF
        self._odd = odd

    def value(self) -> int:
        """The folded, complemented 16-bit checksum."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def hexdump(data: bytes, indent: int = 0, file: Optional[IO[str]] = None) -> None:
    """Write a hex and character dump of ``data``, sixteen bytes per line."""
    out = sys.stdout if file is None else file
    raw = bytes(memoryview(data))
    if not raw:
        out.write(" " * 5 + "\n\n")
    else:
        prefix = " " * indent
        lines = []
        for offset in range(0, len(raw), 16):
            chunk = raw[offset:offset + 16]
            hex_part = " ".join(chunk[i:i + 2].hex() for i in range(0, len(chunk), 2))
            chars = "".join(_printable(b) for b in chunk)
            lines.append(f"{prefix}{offset:08x}:    {hex_part:<39}    {chars}")
        out.write("\n".join(lines) + "\n\n")
    flush = getattr(out, "flush", None)
    if flush is not None:
        flush()