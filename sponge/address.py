"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Any, Tuple, Union

from .util import TaggedError


class Address:
    """A socket address, usually IPv4, built by resolving a host and service.

    ``Address(host, port)`` with an integer port takes a dotted-quad address
    and does no name lookup. ``Address(hostname, service)`` with a string
    service resolves both through the system resolver.
    """

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, host: str, service: Union[int, str] = 0) -> None:
        if isinstance(service, int):
            if not 0 <= service <= 0xFFFF:
                raise ValueError(f"port out of range: {service}")
            family, sockaddr = self._resolve(
                host, str(service), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
            )
        else:
            family, sockaddr = self._resolve(host, service, socket.AI_ALL)
        self._family = family
        self._sockaddr = sockaddr

    @staticmethod
    def _resolve(node: str, service: str, flags: int) -> Tuple[int, Any]:
        try:
            results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
        except socket.gaierror as exc:
            raise TaggedError(
                f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
            ) from exc
        if not results:
            raise RuntimeError("getaddrinfo returned successfully but with no results")
        family, _type, _proto, _canon, sockaddr = results[0]
        return int(family), tuple(sockaddr)

    @classmethod
    def _make(cls, family: int, sockaddr: Any) -> "Address":
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = sockaddr
        return address

    @classmethod
    def from_sockaddr(cls, sockaddr: Any) -> "Address":
        """Wrap an address as returned by the socket module.

        A 2-tuple is IPv4, a 4-tuple IPv6, and a str or bytes path is a Unix-domain address.
        """
        if isinstance(sockaddr, (str, bytes)):
            return cls._make(socket.AF_UNIX, sockaddr)
        parts = tuple(sockaddr)
        if len(parts) == 2:
            return cls._make(socket.AF_INET, parts)
        if len(parts) == 4:
            return cls._make(socket.AF_INET6, parts)
        raise ValueError(f"unrecognised socket address: {sockaddr!r}")

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> "Address":
        """Build an IPv4 address (port 0) from its 32-bit host-order integer value."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"not a 32-bit address: {ip_address}")
        return cls._make(socket.AF_INET, (socket.inet_ntoa(ip_address.to_bytes(4, "big")), 0))

    @property
    def family(self) -> int:
        """The address family, e.g. ``socket.AF_INET``."""
        return self._family

    @property
    def sockaddr(self) -> Any:
        """The address in the form the socket module accepts."""
        return self._sockaddr

    def ip_port(self) -> Tuple[str, int]:
        """The numeric IP address string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "address family not supported")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    @property
    def ip(self) -> str:
        """The numeric IP address string, e.g. ``"18.243.0.1"``."""
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer in host order."""
        if self._family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address.from_sockaddr({self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))