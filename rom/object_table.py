"""Room object table codec.

A room's object table is a sequence of variable length records. The first
byte of each record is a tag that fixes the size and meaning of the rest:

    Object-like tags   tag, location (x | y << 4), object id
    Door-like tags     tag, one argument byte
    Flag tags          tag only
    Opaque tags        tag, fixed number of raw bytes

The table itself has no length; the ROM terminates it with 0xFF, which is not
a valid tag and is not part of the parsed entries.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

from .errors import FormatError, ShortRead, TrailingBytes, UnknownTag
from .rom_config import CHEST_OBJECT_BASE, NUM_CHESTS_PER_TABLE, TABLE_TERMINATOR


class Tag(IntEnum):
    OBJECT = 0x00
    OPEN_DOOR = 0x01
    PUSH_BLOCK_GATED_DOOR = 0x02
    ENEMY_GATED_DOOR = 0x03
    BOMBABLE_DOOR = 0x05
    PUSH_BLOCK_GATED_OBJECT = 0x06
    ENEMY_GATED_OBJECT = 0x07
    BELL_GATED_OBJECT = 0x08
    DARK_ROOM = 0x09
    BOSS_DOOR = 0x0a
    # Precedes the records that are only present while a chest holds a
    # given item.
    UNKNOWN_0B = 0x0b
    BURNABLE = 0x0c
    HIDDEN_ROOM = 0x0d
    FALCON_BOOTS_NEEDED = 0x81
    NPC = 0x9a
    OUCH_ROPE = 0xbd
    ARROW_LAUNCHER = 0xbf
    SWORDS = 0xc0
    GHOST_SPAWNER = 0xc1
    FIREBALL_SPAWNER = 0xc6
    SHOP_ITEM = 0xda
    UNKNOWN_E1 = 0xe1
    UNKNOWN_F4 = 0xf4

    @property
    def display_name(self) -> str:
        return ''.join(word.capitalize() for word in self.name.split('_'))


class Payload(Enum):
    OBJECT = 'object'
    BYTE = 'byte'
    NONE = 'none'
    RAW = 'raw'


# Tag -> (payload kind, payload size in bytes)
ENTRY_LAYOUT: Dict[Tag, Tuple[Payload, int]] = {
    Tag.OBJECT: (Payload.OBJECT, 2),
    Tag.OPEN_DOOR: (Payload.BYTE, 1),
    Tag.PUSH_BLOCK_GATED_DOOR: (Payload.BYTE, 1),
    Tag.ENEMY_GATED_DOOR: (Payload.BYTE, 1),
    Tag.BOMBABLE_DOOR: (Payload.BYTE, 1),
    Tag.PUSH_BLOCK_GATED_OBJECT: (Payload.OBJECT, 2),
    Tag.ENEMY_GATED_OBJECT: (Payload.OBJECT, 2),
    Tag.BELL_GATED_OBJECT: (Payload.OBJECT, 2),
    Tag.DARK_ROOM: (Payload.NONE, 0),
    Tag.BOSS_DOOR: (Payload.BYTE, 1),
    Tag.UNKNOWN_0B: (Payload.RAW, 3),
    Tag.BURNABLE: (Payload.OBJECT, 2),
    Tag.HIDDEN_ROOM: (Payload.RAW, 3),
    Tag.FALCON_BOOTS_NEEDED: (Payload.NONE, 0),
    Tag.NPC: (Payload.RAW, 5),
    Tag.OUCH_ROPE: (Payload.OBJECT, 2),
    Tag.ARROW_LAUNCHER: (Payload.OBJECT, 2),
    Tag.SWORDS: (Payload.OBJECT, 2),
    Tag.GHOST_SPAWNER: (Payload.OBJECT, 2),
    Tag.FIREBALL_SPAWNER: (Payload.OBJECT, 2),
    Tag.SHOP_ITEM: (Payload.RAW, 7),
    Tag.UNKNOWN_E1: (Payload.RAW, 9),
    Tag.UNKNOWN_F4: (Payload.RAW, 5),
}


@dataclass(frozen=True)
class ObjectInfo:
    """An object placed on the room's 16x16 grid."""
    x: int
    y: int
    id: int

    def __post_init__(self):
        if not (0 <= self.x < 0x10 and 0 <= self.y < 0x10):
            raise ValueError(f"object location ({self.x}, {self.y}) is off the grid")
        if not 0 <= self.id <= 0xff:
            raise ValueError(f"object id {self.id} does not fit in a byte")

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ObjectInfo':
        return cls(x=data[0] & 0xf, y=data[0] >> 4, id=data[1])

    def to_bytes(self) -> bytes:
        return bytes([self.x | (self.y << 4), self.id])


@dataclass(frozen=True)
class TableEntry:
    """One object table record.

    Exactly one payload field is set, according to ENTRY_LAYOUT[tag]:
    info for object-like tags, arg for door-like tags, data for opaque tags.
    """
    tag: Tag
    info: Optional[ObjectInfo] = None
    arg: Optional[int] = None
    data: bytes = b''

    def __post_init__(self):
        kind, size = ENTRY_LAYOUT[self.tag]
        if (self.info is not None) != (kind == Payload.OBJECT):
            raise ValueError(f"{self.tag.display_name} object info mismatch")
        if (self.arg is not None) != (kind == Payload.BYTE):
            raise ValueError(f"{self.tag.display_name} argument mismatch")
        if kind == Payload.RAW and len(self.data) != size:
            raise ValueError(
                f"{self.tag.display_name} needs {size} bytes, got {len(self.data)}")
        if kind != Payload.RAW and self.data:
            raise ValueError(f"{self.tag.display_name} takes no raw data")

    @classmethod
    def object(cls, x: int, y: int, id: int, tag: Tag = Tag.OBJECT) -> 'TableEntry':
        return cls(tag, info=ObjectInfo(x, y, id))

    @classmethod
    def door(cls, tag: Tag, arg: int) -> 'TableEntry':
        return cls(tag, arg=arg)

    @classmethod
    def raw(cls, tag: Tag, data: bytes) -> 'TableEntry':
        return cls(tag, data=bytes(data))

    def chest_id(self) -> Optional[int]:
        """Chest table slot for a plain chest object, else None."""
        if self.tag != Tag.OBJECT:
            return None
        if CHEST_OBJECT_BASE <= self.info.id < CHEST_OBJECT_BASE + NUM_CHESTS_PER_TABLE:
            return self.info.id - CHEST_OBJECT_BASE
        return None

    def is_conditional(self) -> bool:
        return self.tag == Tag.UNKNOWN_0B

    def loc(self) -> Optional[Tuple[int, int]]:
        """Grid location of a plain object, else None."""
        if self.tag != Tag.OBJECT:
            return None
        return (self.info.x, self.info.y)

    def with_loc(self, x: int, y: int) -> 'TableEntry':
        """Return a copy moved to (x, y); entries without a location are unchanged."""
        if self.tag != Tag.OBJECT:
            return self
        return dataclasses.replace(self, info=dataclasses.replace(self.info, x=x, y=y))

    def __len__(self) -> int:
        return 1 + ENTRY_LAYOUT[self.tag][1]

    def __str__(self) -> str:
        name = self.tag.display_name
        if self.info is not None:
            return f"{name}(x={self.info.x}, y={self.info.y}, id=0x{self.info.id:02x})"
        if self.arg is not None:
            return f"{name}(0x{self.arg:02x})"
        if self.data:
            return f"{name}({self.data.hex(' ')})"
        return name


def parse_entry(data: bytes) -> Tuple[TableEntry, bytes]:
    """Parse one entry from the front of data.

    Returns:
        The entry and the bytes following it.

    Raises:
        ShortRead: data is empty or the payload is truncated.
        UnknownTag: the first byte is not a known tag.
    """
    if not data:
        raise ShortRead("expected an object table entry, found end of data")
    try:
        tag = Tag(data[0])
    except ValueError:
        raise UnknownTag(f"unknown object table tag 0x{data[0]:02x}") from None
    kind, size = ENTRY_LAYOUT[tag]
    payload = bytes(data[1:1 + size])
    if len(payload) < size:
        raise ShortRead(
            f"{tag.display_name} needs {size} payload bytes, {len(payload)} available")

    if kind == Payload.OBJECT:
        entry = TableEntry(tag, info=ObjectInfo.from_bytes(payload))
    elif kind == Payload.BYTE:
        entry = TableEntry(tag, arg=payload[0])
    elif kind == Payload.RAW:
        entry = TableEntry(tag, data=payload)
    else:
        entry = TableEntry(tag)
    return entry, data[1 + size:]


def _scan(data: bytes) -> Tuple[List[TableEntry], bytes]:
    entries = []
    remaining = memoryview(data)
    while remaining:
        try:
            entry, rest = parse_entry(remaining)
        except FormatError:
            break
        entries.append(entry)
        remaining = rest
    return entries, remaining


def parse_object_table(data: bytes) -> List[TableEntry]:
    """Parse a whole, unterminated object table.

    Raises:
        TrailingBytes: some bytes at the end don't form a valid entry.
    """
    entries, remaining = _scan(data)
    if remaining:
        consumed = len(data) - len(remaining)
        raise TrailingBytes(
            f"{len(remaining)} unparsed bytes after {len(entries)} entries: "
            f"{bytes(remaining[:16]).hex(' ')}",
            offset=consumed)
    return entries


def object_table_len(data: bytes) -> int:
    """Length of the terminated object table at the start of data.

    The terminator is not counted. Reading stops at the first byte that does
    not start a valid entry; that byte must be the terminator.

    Raises:
        TrailingBytes: the table is not followed by the terminator.
    """
    entries, remaining = _scan(data)
    consumed = len(data) - len(remaining)
    if remaining and remaining[0] != TABLE_TERMINATOR:
        raise TrailingBytes(
            f"object table ends with 0x{remaining[0]:02x} instead of the terminator",
            offset=consumed)
    return consumed


def write_entry(entry: TableEntry) -> bytes:
    kind, _ = ENTRY_LAYOUT[entry.tag]
    if kind == Payload.OBJECT:
        return bytes([entry.tag]) + entry.info.to_bytes()
    if kind == Payload.BYTE:
        return bytes([entry.tag, entry.arg])
    return bytes([entry.tag]) + entry.data


def write_object_table(entries: List[TableEntry]) -> bytes:
    """Serialize entries back to bytes, without the terminator."""
    return b''.join(write_entry(entry) for entry in entries)
