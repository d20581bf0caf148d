import pytest

from sponge.buffer import Buffer
from sponge.parser import (
    NetParser,
    ParseResult,
    as_string,
    pack_u8,
    pack_u16,
    pack_u32,
)


def test_pack_is_big_endian():
    assert pack_u16(0x1234) == b"\x12\x34"
    assert pack_u32(0x01020304) == b"\x01\x02\x03\x04"
    assert pack_u8(0x7F) == b"\x7f"


def test_pack_truncates_wide_values():
    assert pack_u8(0x1FF) == pack_u8(0xFF)
    assert pack_u16(0x12345) == pack_u16(0x2345)
    assert pack_u32(-1) == pack_u32(0xFFFFFFFF)


@pytest.mark.parametrize("value32,value16,value8", [(0, 0, 0), (0xDEADBEEF, 0xBEEF, 0xEF), (1, 2, 3)])
def test_round_trip(value32, value16, value8):
    parser = NetParser(Buffer(pack_u32(value32) + pack_u16(value16) + pack_u8(value8)))
    assert parser.u32() == value32
    assert parser.u16() == value16
    assert parser.u8() == value8
    assert parser.error is ParseResult.NO_ERROR
    assert len(parser.buffer) == 0


def test_short_read_sets_error_and_consumes_nothing():
    parser = NetParser(b"\x01\x02\x03")
    assert parser.u32() == 0
    assert parser.error is ParseResult.PACKET_TOO_SHORT
    assert parser.has_error
    assert parser.buffer.copy() == b"\x01\x02\x03"


def test_reads_after_error_return_zero():
    parser = NetParser(b"\x05")
    parser.u16()
    assert parser.u8() == 0
    assert parser.buffer.copy() == b"\x05"


def test_manually_set_error_blocks_parsing():
    parser = NetParser(b"\x01\x02")
    parser.error = ParseResult.BAD_CHECKSUM
    assert parser.u8() == 0
    assert parser.error is ParseResult.BAD_CHECKSUM


def test_remove_prefix():
    parser = NetParser(b"\x00\x00\xab")
    parser.remove_prefix(2)
    assert parser.u8() == 0xAB
    parser.remove_prefix(1)
    assert parser.error is ParseResult.PACKET_TOO_SHORT


def test_parser_does_not_modify_source_buffer():
    source = Buffer(b"\x00\x01\x02\x03")
    parser = NetParser(source)
    parser.u16()
    assert source.copy() == b"\x00\x01\x02\x03"
    assert parser.buffer.copy() == b"\x02\x03"


def test_as_string_names():
    assert as_string(ParseResult.NO_ERROR) == "NoError"
    assert as_string(ParseResult.BAD_CHECKSUM) == "BadChecksum"
    assert as_string(ParseResult.TRUNCATED_PACKET) == "TruncatedPacket"
    assert str(ParseResult.PACKET_TOO_SHORT) == "PacketTooShort"


def test_as_string_accepts_values():
    assert as_string(ParseResult(3)) == "WrongIPVersion"
    with pytest.raises(ValueError):
        as_string(ParseResult(99))