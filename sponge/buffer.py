"""Shared read-only byte buffers that can discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A read-only byte string whose prefix can be dropped without copying.

    Constructing a Buffer from another Buffer shares the storage; dropping a
    prefix from one does not affect the other.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: Union["Buffer", BytesLike] = b"") -> None:
        if isinstance(data, Buffer):
            self._storage = data._storage
            self._offset = data._offset
        else:
            self._storage = bytes(memoryview(data))
            self._offset = 0

    @property
    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset:]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self._storage[self._offset:]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview)):
            return bytes(self) == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"

    def at(self, n: int) -> int:
        """The byte at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """A copy of the remaining bytes."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of Buffers, e.g. headers plus payload."""

    def __init__(self, data: Optional[Union[Buffer, BytesLike]] = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is not None:
            self._buffers.append(Buffer(data))

    @property
    def buffers(self) -> tuple:
        """The underlying Buffers, front first."""
        return tuple(self._buffers)

    def append(self, other: "BufferList") -> None:
        """Append the buffers of another BufferList (sharing their storage)."""
        self._buffers.extend(Buffer(buf) for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the contents as a single Buffer; only valid when contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return Buffer(self._buffers[0])
        raise RuntimeError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """A copy of all bytes joined together."""
        return b"".join(bytes(buf) for buf in self._buffers)

    def __bytes__(self) -> bytes:
        return self.concatenate()


class BufferViewList:
    """A non-owning view of a discontiguous byte string, for vectored writes."""

    def __init__(self, data: Union[BufferList, Buffer, BytesLike]) -> None:
        views: Iterable[memoryview]
        if isinstance(data, BufferList):
            views = (buf.view for buf in data.buffers)
        elif isinstance(data, Buffer):
            views = (data.view,)
        else:
            views = (memoryview(data).cast("B"),)
        self._views: deque[memoryview] = deque(views)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_views(self) -> List[memoryview]:
        """The pieces as memoryviews, suitable for os.writev or socket.sendmsg."""
        return list(self._views)