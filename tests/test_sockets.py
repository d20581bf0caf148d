import socket

import pytest

from sponge.address import Address
from sponge.buffer import BufferList
from sponge.file_descriptor import FileDescriptor
from sponge.sockets import LocalStreamSocket, TCPSocket, UDPSocket
from sponge.util import UnixError

LOCALHOST = "127.0.0.1"


def _read_exactly(handle, n):
    data = b""
    while len(data) < n:
        chunk = handle.read(n - len(data))
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def udp_pair():
    a = UDPSocket()
    b = UDPSocket()
    a.bind(Address(LOCALHOST, 0))
    b.bind(Address(LOCALHOST, 0))
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def tcp_trio():
    server = TCPSocket()
    server.set_reuseaddr()
    server.bind(Address(LOCALHOST, 0))
    server.listen()
    client = TCPSocket()
    client.connect(server.local_address())
    conn = server.accept()
    yield server, client, conn
    for handle in (server, client, conn):
        if not handle.closed:
            handle.close()


def test_udp_bind_assigns_port(udp_pair):
    a, _ = udp_pair
    local = a.local_address()
    assert local.ip == LOCALHOST
    assert 0 < local.port <= 0xFFFF


def test_udp_sendto_recv(udp_pair):
    a, b = udp_pair
    a.sendto(b.local_address(), b"hello")
    datagram = b.recv()
    assert datagram.payload == b"hello"
    assert datagram.source_address == a.local_address()
    assert a.write_count == 1
    assert b.read_count == 1


def test_udp_buffer_list_payload(udp_pair):
    a, b = udp_pair
    payload = BufferList(b"head")
    payload.append(BufferList(b"tail"))
    a.sendto(b.local_address(), payload)
    assert b.recv().payload == b"headtail"


def test_udp_connected_send(udp_pair):
    a, b = udp_pair
    a.connect(b.local_address())
    assert a.peer_address() == b.local_address()
    a.send(b"x")
    assert b.recv().payload == b"x"


def test_udp_oversized_datagram(udp_pair):
    a, b = udp_pair
    a.sendto(b.local_address(), b"z" * 100)
    with pytest.raises(RuntimeError, match="oversized"):
        b.recv(10)
    assert b.read_count == 0


def test_unconnected_peer_address_fails(udp_pair):
    a, _ = udp_pair
    with pytest.raises(UnixError) as info:
        a.peer_address()
    assert info.value.attempt == "getpeername"


def test_tcp_addresses_match(tcp_trio):
    server, client, conn = tcp_trio
    assert conn.peer_address() == client.local_address()
    assert client.peer_address() == server.local_address()
    assert server.read_count == 1


def test_tcp_data_both_ways(tcp_trio):
    _, client, conn = tcp_trio
    client.write(b"ping")
    assert _read_exactly(conn, 4) == b"ping"
    conn.write(b"pong")
    assert _read_exactly(client, 4) == b"pong"


def test_tcp_shutdown_write_gives_eof(tcp_trio):
    _, client, conn = tcp_trio
    client.shutdown(socket.SHUT_WR)
    assert client.write_count == 1
    assert client.read_count == 0
    assert conn.read() == b""
    assert conn.eof


def test_tcp_shutdown_both_counts(tcp_trio):
    _, client, _ = tcp_trio
    client.shutdown(socket.SHUT_RDWR)
    assert (client.read_count, client.write_count) == (1, 1)


def test_shutdown_invalid_how(tcp_trio):
    _, client, _ = tcp_trio
    with pytest.raises(UnixError):
        client.shutdown(99)


def test_set_reuseaddr():
    with TCPSocket() as sock:
        sock.set_reuseaddr()
        sock.bind(Address(LOCALHOST, 0))
        local = sock.local_address()
        assert local.ip == LOCALHOST
        assert 0 < local.port <= 0xFFFF
        probe = socket.fromfd(sock.fd_num, socket.AF_INET, socket.SOCK_STREAM)
        try:
            assert probe.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR) != 0
        finally:
            probe.close()


def test_local_stream_socket_pair():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    left = LocalStreamSocket(FileDescriptor(a.detach()))
    right = LocalStreamSocket(FileDescriptor(b.detach()))
    try:
        left.write(b"abc")
        assert _read_exactly(right, 3) == b"abc"
        assert right.read_count >= 1
    finally:
        left.close()
        right.close()


def test_local_stream_socket_domain_mismatch():
    fd = FileDescriptor(socket.socket(socket.AF_INET, socket.SOCK_DGRAM).detach())
    try:
        with pytest.raises(RuntimeError, match="domain mismatch"):
            LocalStreamSocket(fd)
    finally:
        fd.close()


def test_udp_socket_type_mismatch():
    fd = FileDescriptor(socket.socket(socket.AF_INET, socket.SOCK_STREAM).detach())
    try:
        with pytest.raises(RuntimeError, match="type mismatch"):
            UDPSocket(fd)
    finally:
        fd.close()


def test_udp_socket_from_matching_descriptor():
    fd = FileDescriptor(socket.socket(socket.AF_INET, socket.SOCK_DGRAM).detach())
    sock = UDPSocket(fd)
    try:
        sock.bind(Address(LOCALHOST, 0))
        assert fd.fd_num == sock.fd_num
        assert sock.local_address().ip == LOCALHOST
    finally:
        sock.close()
    assert fd.closed