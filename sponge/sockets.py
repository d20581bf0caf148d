"""Thin wrappers over UDP, TCP and Unix-domain stream sockets."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .address import Address
from .buffer import BufferViewList
from .file_descriptor import FileDescriptor, Writable, _system_call

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


def _payload_views(payload: Writable) -> Tuple[List[memoryview], int]:
    if isinstance(payload, str):
        payload = payload.encode()
    views = payload if isinstance(payload, BufferViewList) else BufferViewList(payload)
    return views.as_views(), len(views)


class Socket(FileDescriptor):
    """A network socket; normally used through a subclass.

    With no ``fd`` a new socket of ``domain`` and ``type_`` is created;
    otherwise ``fd`` is taken over after checking its domain and type.
    """

    def __init__(self, domain: int, type_: int, fd: Optional[FileDescriptor] = None) -> None:
        if fd is None:
            with _system_call("socket"):
                fd_num = socket.socket(domain, type_).detach()
            super().__init__(fd_num)
            return

        super().__init__(fd._internal)
        with self._borrow("getsockopt") as sock:
            if hasattr(socket, "SO_DOMAIN"):
                actual_domain = sock.getsockopt(socket.SOL_SOCKET, socket.SO_DOMAIN)
            else:
                actual_domain = int(sock.family)
            actual_type = sock.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        if actual_type != type_:
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrow(self, attempt: str) -> Iterator[socket.socket]:
        """A socket object over this descriptor that does not own it."""
        with _system_call(attempt):
            sock = socket.socket(fileno=self.fd_num)
            try:
                yield sock
            finally:
                sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrow("bind") as sock:
            sock.bind(address.sockaddr)

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrow("connect") as sock:
            sock.connect(address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrow("shutdown") as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._borrow("getsockname") as sock:
            return Address.from_sockaddr(sock.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrow("getpeername") as sock:
            return Address.from_sockaddr(sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        with self._borrow("setsockopt") as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A datagram payload and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raises RuntimeError if it is larger than ``mtu``."""
        buf = bytearray(mtu)
        with self._borrow("recvfrom") as sock:
            length, source = sock.recvfrom_into(buf, mtu, _MSG_TRUNC)
        if length > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), bytes(buf[:length]))

    def _sendmsg(self, payload: Writable, destination: Optional[Address]) -> None:
        views, size = _payload_views(payload)
        with self._borrow("sendmsg") as sock:
            if destination is None:
                sent = sock.sendmsg(views)
            else:
                sent = sock.sendmsg(views, [], 0, destination.sockaddr)
        if sent != size:
            raise RuntimeError("datagram payload too big for sendmsg()")

    def sendto(self, destination: Address, payload: Writable) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)
        self._register_write()

    def send(self, payload: Writable) -> None:
        """Send a datagram to the connected peer."""
        self._sendmsg(payload, None)
        self._register_write()


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Listen for incoming connections."""
        with self._borrow("listen") as sock:
            sock.listen(backlog)

    def accept(self) -> "TCPSocket":
        """Wait for and return a new connection."""
        self._register_read()
        with self._borrow("accept") as sock:
            conn, _ = sock.accept()
            fd_num = conn.detach()
        return TCPSocket(FileDescriptor(fd_num))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket built from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)