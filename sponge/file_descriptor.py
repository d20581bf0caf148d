"""Reference-counted file descriptor handles that track reads, writes and EOF."""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, Union

from .buffer import Buffer, BufferList, BufferViewList, BytesLike
from .util import TaggedError, UnixError

_MAX_READ = 1024 * 1024

Writable = Union[str, Buffer, BufferList, BufferViewList, BytesLike]


@contextmanager
def _system_call(attempt: str) -> Iterator[None]:
    """Turn an OSError raised inside the block into a UnixError naming ``attempt``."""
    try:
        yield
    except TaggedError:
        raise
    except OSError as exc:
        raise UnixError(attempt, exc.errno or 0) from exc


class _FDWrapper:
    """The kernel descriptor itself, closed when the last handle goes away."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        with _system_call("close"):
            os.close(self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finaliser
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _views_of(data: Writable) -> List[memoryview]:
    if isinstance(data, BufferViewList):
        return data.as_views()
    if isinstance(data, str):
        data = data.encode()
    return BufferViewList(data).as_views()


def _drop_prefix(views: List[memoryview], n: int) -> List[memoryview]:
    remaining = []
    for view in views:
        if n >= len(view):
            n -= len(view)
            continue
        remaining.append(view[n:])
        n = 0
    return remaining


class FileDescriptor:
    """A handle on a kernel file descriptor.

    Handles made with :meth:`duplicate` share the descriptor and its state;
    the descriptor is closed when the last handle is collected, or earlier
    by :meth:`close` or leaving a ``with`` block.
    """

    def __init__(self, fd: Union[int, _FDWrapper]) -> None:
        self._internal = fd if isinstance(fd, _FDWrapper) else _FDWrapper(fd)

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB at a time); fewer may come back."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        with _system_call("read"):
            data = os.read(self.fd_num, size)
        if (limit is None or limit > 0) and not data:
            self._internal.eof = True
        self._register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write bytes (or a list of buffers); with ``write_all`` keep going until all is written."""
        views = _views_of(data)
        remaining = sum(len(view) for view in views)
        total = 0
        while True:
            with _system_call("writev"):
                written = os.writev(self.fd_num, views)
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            views = _drop_prefix(views, written)
            remaining -= written
            total += written
            if not (write_all and remaining):
                return total

    def close(self) -> None:
        """Close the underlying descriptor for every handle sharing it."""
        self._internal.close()

    def duplicate(self) -> "FileDescriptor":
        """Another handle on the same descriptor, sharing its state."""
        return FileDescriptor(self._internal)

    def set_blocking(self, blocking: bool) -> None:
        """Switch between blocking and non-blocking mode."""
        with _system_call("fcntl"):
            os.set_blocking(self.fd_num, blocking)

    @property
    def fd_num(self) -> int:
        """The descriptor number."""
        return self._internal.fd

    @property
    def eof(self) -> bool:
        """Whether a read has hit end of file."""
        return self._internal.eof

    @property
    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._internal.closed

    @property
    def read_count(self) -> int:
        """How many times the descriptor has been read."""
        return self._internal.read_count

    @property
    def write_count(self) -> int:
        """How many times the descriptor has been written."""
        return self._internal.write_count

    def __enter__(self) -> "FileDescriptor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fd={self.fd_num}, closed={self.closed})"