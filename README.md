# sponge

Building blocks for user-space networking code on Linux.

## What is in it

- `sponge.util`: `InternetChecksum` (the RFC 1071 one's-complement sum,
  fed incrementally with `add` and read with `value`), `hexdump` (writes
  a hex and character dump, sixteen bytes per line, to stdout or a given
  file), `timestamp_ms` (milliseconds since the module was loaded, on a
  monotonic clock), `get_random_generator` (a `random.Random` seeded from
  `os.urandom`), and the error types `TaggedError` and `UnixError`, both
  subclasses of `OSError` that name the call that failed.
- `sponge.buffer`: `Buffer`, a read-only byte string that can drop bytes
  from its front with `remove_prefix`. `BufferList` holds several of
  them, so headers can be put in front of a payload without copying it;
  `concatenate` joins them and `to_buffer` returns a single `Buffer` when
  there is at most one piece. `BufferViewList` is a list of memoryviews
  over such data, for vectored writes (`as_views`).
- `sponge.parser`: `NetParser` reads big-endian integers (`u32`, `u16`,
  `u8`) from a `Buffer`. When there are too few bytes it sets its
  `error` attribute to `ParseResult.PACKET_TOO_SHORT`, and from then on
  reads return 0 and consume nothing; `has_error` tells whether that has
  happened. `pack_u32`, `pack_u16` and `pack_u8` write big-endian
  integers, and `as_string` names a `ParseResult`.
- `sponge.address`: `Address`, an IPv4 address and port. `Address(ip, port)`
  with an integer port takes a dotted quad without a lookup;
  `Address(hostname, service)` with a string service resolves through the
  system resolver. It converts to and from 32-bit numbers
  (`ipv4_numeric`, `from_ipv4_numeric`), wraps socket-module addresses
  (`from_sockaddr`), and prints as `ip:port`.
- `sponge.file_descriptor`: `FileDescriptor`, a shared handle to a file
  descriptor. Handles made with `duplicate` share its state; it counts
  reads and writes, tracks end of file, and can be used as a context
  manager that closes it.
- `sponge.tun`: `TunFD` and `TapFD` open existing persistent TUN and TAP
  devices through `/dev/net/tun`.
- `sponge.eventloop`: `EventLoop`, a `poll`-based loop. It runs callbacks
  for rules added with `add_rule`, each rule pairing a descriptor with a
  `Direction` (`IN` or `OUT`). `wait_next_event` returns a `Result`
  (`SUCCESS`, `TIMEOUT` or `EXIT`) and raises `RuntimeError` when a
  callback neither reads nor writes its descriptor yet stays interested.
- `sponge.sockets`: `UDPSocket` (`recv` returns a `ReceivedDatagram`,
  `sendto`, `send`), `TCPSocket` (`listen`, `accept`) and
  `LocalStreamSocket`, all `FileDescriptor`s with `bind`, `connect`,
  `shutdown`, `local_address`, `peer_address` and `set_reuseaddr`.

## Example

```python
from sponge.buffer import Buffer
from sponge.parser import NetParser, pack_u16
from sponge.util import InternetChecksum

parser = NetParser(Buffer(pack_u16(0x4500) + b"\x00\x1c"))
assert parser.u16() == 0x4500
assert parser.u16() == 28
assert not parser.has_error

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
print(hex(checksum.value()))
```

## What it does not do

This package holds the utilities only. It has no TCP implementation of
its own (no byte stream, reassembler, sender, receiver or connection
state machine), no IP or Ethernet packet types, and no command-line
programs.

## Running the tests

```
pip install -e .[test]
pytest
```