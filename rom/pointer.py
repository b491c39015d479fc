"""Bank-relative 3-byte pointers.

Level data addresses other level data with three bytes (b0, b1, b2):

    value  = (b0 << 13) | ((b2 & 0x1f) << 8) | b1
    offset = value - POINTER_BASE

b0 selects the 8KiB bank, b1 and the low five bits of b2 the address inside
it. The top three bits of b2 hold the mapper window the bank is paged into;
the ROM always uses POINTER_WINDOW_BITS there, so encode_pointer writes them
back and re-encoding a decoded pointer yields the original bytes.
"""

from typing import List

from .errors import InvalidPointer, ShortRead
from .rom_config import POINTER_BASE, POINTER_WINDOW_BITS

POINTER_SIZE = 3


def decode_pointer(data: bytes, offset: int = 0) -> int:
    """Decode the pointer at data[offset:offset + 3] into an image offset.

    Raises:
        ShortRead: fewer than three bytes are available.
        InvalidPointer: the pointer addresses memory below the ROM window.
    """
    if len(data) - offset < POINTER_SIZE:
        raise ShortRead("pointer needs 3 bytes", offset=offset)
    b0, b1, b2 = data[offset], data[offset + 1], data[offset + 2]
    value = (b0 << 13) | ((b2 & 0x1f) << 8) | b1
    if value < POINTER_BASE:
        raise InvalidPointer(
            f"pointer {b0:02x} {b1:02x} {b2:02x} is below 0x{POINTER_BASE:x}",
            offset=offset)
    return value - POINTER_BASE


def encode_pointer(offset: int) -> bytes:
    """Encode an image offset into its 3-byte pointer form."""
    if offset < 0:
        raise InvalidPointer(f"can't encode negative offset {offset}")
    value = offset + POINTER_BASE
    if value >> 13 > 0xff:
        raise InvalidPointer(f"offset 0x{offset:x} is out of pointer range")
    return bytes([
        value >> 13,
        value & 0xff,
        POINTER_WINDOW_BITS | ((value >> 8) & 0x1f),
    ])


def decode_pointer_table(data: bytes, count: int, offset: int = 0) -> List[int]:
    """Decode count consecutive pointers starting at data[offset]."""
    if len(data) - offset < count * POINTER_SIZE:
        raise ShortRead(
            f"pointer table of {count} entries needs {count * POINTER_SIZE} bytes, "
            f"{max(len(data) - offset, 0)} available",
            offset=offset)
    return [decode_pointer(data, offset + i * POINTER_SIZE) for i in range(count)]
