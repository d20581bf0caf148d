"""Networking building blocks: buffers, parsers, checksums, addresses, descriptors, TUN/TAP, sockets and an event loop."""

__version__ = "0.1.0"