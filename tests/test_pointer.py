"""Tests for bank-relative pointer decoding and encoding."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from rom.errors import InvalidPointer, ShortRead
from rom.pointer import decode_pointer, decode_pointer_table, encode_pointer


@pytest.mark.parametrize("data,offset", [
    (bytes([0x48, 0x4e, 0x45]), 0x5054e),
    (bytes([0x49, 0x44, 0x51]), 0x53144),
])
def test_decode_known_pointers(data, offset):
    assert decode_pointer(data) == offset


@pytest.mark.parametrize("data", [
    bytes([0x48, 0x4e, 0x45]),
    bytes([0x49, 0x44, 0x51]),
    bytes([0x20, 0x00, 0x40]),
    bytes([0x3f, 0xff, 0x5f]),
])
def test_encode_restores_rom_bytes(data):
    assert encode_pointer(decode_pointer(data)) == data


def test_encode_sets_window_bits():
    assert encode_pointer(0x5054e)[2] & 0xe0 == 0x40


def test_pointer_below_window_is_invalid():
    with pytest.raises(InvalidPointer):
        decode_pointer(bytes([0x00, 0x00, 0x00]))


def test_pointer_needs_three_bytes():
    with pytest.raises(ShortRead):
        decode_pointer(bytes([0x48, 0x4e]))


def test_decode_at_offset():
    data = bytes([0xaa, 0x48, 0x4e, 0x45])
    assert decode_pointer(data, 1) == 0x5054e


def test_decode_pointer_table():
    data = bytes([0x48, 0x4e, 0x45, 0x49, 0x44, 0x51])
    assert decode_pointer_table(data, 2) == [0x5054e, 0x53144]


def test_decode_pointer_table_short():
    data = bytes([0x48, 0x4e, 0x45, 0x49, 0x44])
    with pytest.raises(ShortRead):
        decode_pointer_table(data, 2)


def test_negative_offset_is_invalid():
    with pytest.raises(InvalidPointer):
        encode_pointer(-1)
