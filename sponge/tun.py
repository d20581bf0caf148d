"""Handles on persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from .file_descriptor import FileDescriptor, _system_call

CLONEDEV = "/dev/net/tun"
TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFNAMSIZ = 16
_IFREQ_SIZE = 40


def _ifreq(devname: str, is_tun: bool) -> bytes:
    """The ``struct ifreq`` that attaches to ``devname`` without packet info."""
    name = devname.encode()[: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    return struct.pack(f"{IFNAMSIZ}sh", name, flags).ljust(_IFREQ_SIZE, b"\0")


class TunTapFD(FileDescriptor):
    """A descriptor for an existing persistent TUN (IP) or TAP (Ethernet) device.

    The device must already exist, e.g. created with
    ``ip tuntap add mode tun user <user> name <devname>``.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        with _system_call("open"):
            fd = os.open(CLONEDEV, os.O_RDWR)
        super().__init__(fd)
        try:
            with _system_call("ioctl"):
                fcntl.ioctl(self.fd_num, TUNSETIFF, _ifreq(devname, is_tun))
        except BaseException:
            self.close()
            raise


class TunFD(TunTapFD):
    """A descriptor for a TUN device, which carries IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor for a TAP device, which carries Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)