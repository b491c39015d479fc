"""ROM data access module.

This module decodes and re-encodes the Neutopia level data: pointers, room
object tables, chest tables and the level data model built from them.

Public API:
    NeutopiaRom - Read-only model of an image's level data
    RomWriter - Cursor based writer used to rebuild an image
    TestRomBuilder - Builder for creating synthetic test images
    verify - Identify an image by size and MD5

Example:
    from rom import NeutopiaRom, verify

    info = verify(data)
    rom = NeutopiaRom(data[0x200:] if info.headered else data)
    for room in rom.rooms[4]:
        print(hex(room.object_table_pointer))
"""

from .chest import Chest, parse_chest_table, write_chest_table
from .errors import (
    AreaLockViolation,
    ConsistencyError,
    DuplicateLocation,
    FormatError,
    IncoherentChest,
    InvalidPatch,
    InvalidPointer,
    InvalidRomSize,
    ModelConsumed,
    NeutopiaError,
    PolicyError,
    ShortRead,
    ShortTable,
    TrailingBytes,
    TruncatedRom,
    UnknownItem,
    UnknownLocation,
    UnknownTag,
    UnrecognizedRom,
    UnsupportedRegion,
)
from .interval import Interval, IntervalStore
from .neutopia_rom import NeutopiaRom, Room
from .object_table import (
    ObjectInfo,
    TableEntry,
    Tag,
    object_table_len,
    parse_entry,
    parse_object_table,
    write_entry,
    write_object_table,
)
from .pointer import decode_pointer, decode_pointer_table, encode_pointer
from .rom_config import RomLayout, RomRegion, ROM_SIZE, HEADER_SIZE
from .rom_writer import RomWriter
from .test_rom_builder import TestRomBuilder
from .verify import Region, RomInfo, strip_header, verify

__all__ = [
    # Main API
    'NeutopiaRom',
    'Room',
    'RomWriter',
    'TestRomBuilder',
    'verify',
    'strip_header',
    'Region',
    'RomInfo',
    # Codecs
    'Chest',
    'parse_chest_table',
    'write_chest_table',
    'ObjectInfo',
    'TableEntry',
    'Tag',
    'object_table_len',
    'parse_entry',
    'parse_object_table',
    'write_entry',
    'write_object_table',
    'decode_pointer',
    'decode_pointer_table',
    'encode_pointer',
    'Interval',
    'IntervalStore',
    # Configuration (for advanced usage)
    'RomLayout',
    'RomRegion',
    'ROM_SIZE',
    'HEADER_SIZE',
    # Errors
    'NeutopiaError',
    'FormatError',
    'InvalidPointer',
    'UnknownTag',
    'ShortRead',
    'TrailingBytes',
    'TruncatedRom',
    'ShortTable',
    'InvalidPatch',
    'ConsistencyError',
    'IncoherentChest',
    'DuplicateLocation',
    'UnknownLocation',
    'UnknownItem',
    'AreaLockViolation',
    'ModelConsumed',
    'PolicyError',
    'InvalidRomSize',
    'UnrecognizedRom',
    'UnsupportedRegion',
]
