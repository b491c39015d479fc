"""Tests for the room object table codec."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from rom.errors import ShortRead, TrailingBytes, UnknownTag
from rom.object_table import (
    ENTRY_LAYOUT,
    ObjectInfo,
    TableEntry,
    Tag,
    object_table_len,
    parse_entry,
    parse_object_table,
    write_entry,
    write_object_table,
)

# Encoded entries taken from the game's room data, with the entry they decode to.
ENTRY_SAMPLES = [
    ("00 52 a5", TableEntry.object(2, 5, 0xa5)),
    ("01 02", TableEntry.door(Tag.OPEN_DOOR, 0x02)),
    ("02 01", TableEntry.door(Tag.PUSH_BLOCK_GATED_DOOR, 0x01)),
    ("03 08", TableEntry.door(Tag.ENEMY_GATED_DOOR, 0x08)),
    ("05 0a", TableEntry.door(Tag.BOMBABLE_DOOR, 0x0a)),
    ("06 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.PUSH_BLOCK_GATED_OBJECT)),
    ("07 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.ENEMY_GATED_OBJECT)),
    ("08 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.BELL_GATED_OBJECT)),
    ("09", TableEntry(Tag.DARK_ROOM)),
    ("0a 50", TableEntry.door(Tag.BOSS_DOOR, 0x50)),
    ("0b 46 2a 04", TableEntry.raw(Tag.UNKNOWN_0B, bytes([0x46, 0x2a, 0x04]))),
    ("0c 52 a5", TableEntry.object(2, 5, 0xa5, tag=Tag.BURNABLE)),
    ("0d 14 14 33", TableEntry.raw(Tag.HIDDEN_ROOM, bytes([0x14, 0x14, 0x33]))),
    ("81", TableEntry(Tag.FALCON_BOOTS_NEEDED)),
    ("9a 48 02 03 00 40", TableEntry.raw(Tag.NPC, bytes([0x48, 0x02, 0x03, 0x00, 0x40]))),
    ("bd 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.OUCH_ROPE)),
    ("bf 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.ARROW_LAUNCHER)),
    ("c0 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.SWORDS)),
    ("c1 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.GHOST_SPAWNER)),
    ("c6 25 5a", TableEntry.object(5, 2, 0x5a, tag=Tag.FIREBALL_SPAWNER)),
    ("da 46 00 00 02 00 01 01",
     TableEntry.raw(Tag.SHOP_ITEM, bytes([0x46, 0x00, 0x00, 0x02, 0x00, 0x01, 0x01]))),
    ("e1 48 02 00 7d 41 56 2e 81 01",
     TableEntry.raw(Tag.UNKNOWN_E1,
                    bytes([0x48, 0x02, 0x00, 0x7d, 0x41, 0x56, 0x2e, 0x81, 0x01]))),
    ("f4 a7 02 03 40 43", TableEntry.raw(Tag.UNKNOWN_F4, bytes([0xa7, 0x02, 0x03, 0x40, 0x43]))),
]


@pytest.mark.parametrize("hex_data,expected", ENTRY_SAMPLES)
def test_parse_entry(hex_data, expected):
    data = bytes.fromhex(hex_data)
    entry, remaining = parse_entry(data)
    assert entry == expected
    assert remaining == b''
    assert len(entry) == len(data)


@pytest.mark.parametrize("hex_data,entry", ENTRY_SAMPLES)
def test_write_entry(hex_data, entry):
    assert write_entry(entry) == bytes.fromhex(hex_data)


def test_samples_cover_every_tag():
    assert {entry.tag for _, entry in ENTRY_SAMPLES} == set(ENTRY_LAYOUT)


def test_parse_entry_leaves_rest():
    entry, remaining = parse_entry(bytes.fromhex("01 02 ff"))
    assert entry == TableEntry.door(Tag.OPEN_DOOR, 2)
    assert remaining == b'\xff'


def test_unknown_tag():
    with pytest.raises(UnknownTag):
        parse_entry(bytes([0x04, 0x00]))


def test_truncated_payload():
    with pytest.raises(ShortRead):
        parse_entry(bytes.fromhex("da 46 00"))


def test_empty_entry():
    with pytest.raises(ShortRead):
        parse_entry(b'')


def test_parse_table():
    assert parse_object_table(bytes.fromhex("01 02 02 01")) == [
        TableEntry.door(Tag.OPEN_DOOR, 2),
        TableEntry.door(Tag.PUSH_BLOCK_GATED_DOOR, 1),
    ]


def test_parse_empty_table():
    assert parse_object_table(b'') == []


def test_parse_table_trailing_bytes():
    with pytest.raises(TrailingBytes):
        parse_object_table(bytes.fromhex("01 02 ff"))


def test_parse_table_truncated_last_entry():
    with pytest.raises(TrailingBytes):
        parse_object_table(bytes.fromhex("01 02 00 52"))


def test_table_roundtrip():
    data = bytes.fromhex("0d 14 14 33 00 52 a5 0b 46 2a 04 00 33 4d 09 01 02")
    assert write_object_table(parse_object_table(data)) == data


def test_table_len_stops_at_terminator():
    assert object_table_len(bytes.fromhex("01 02 02 01 ff 00 00")) == 4


def test_table_len_empty_table():
    assert object_table_len(bytes.fromhex("ff 12 34")) == 0


def test_table_len_accepts_end_of_data():
    assert object_table_len(bytes.fromhex("01 02")) == 2


def test_table_len_rejects_garbage():
    with pytest.raises(TrailingBytes):
        object_table_len(bytes.fromhex("01 02 04 ff"))


def test_chest_id():
    assert TableEntry.object(1, 1, 0x4c).chest_id() == 0
    assert TableEntry.object(1, 1, 0x53).chest_id() == 7
    assert TableEntry.object(1, 1, 0x54).chest_id() is None
    assert TableEntry.object(1, 1, 0x4b).chest_id() is None
    # Only plain objects are chests
    assert TableEntry.object(1, 1, 0x4c, tag=Tag.BURNABLE).chest_id() is None


def test_is_conditional():
    assert TableEntry.raw(Tag.UNKNOWN_0B, bytes(3)).is_conditional()
    assert not TableEntry.raw(Tag.HIDDEN_ROOM, bytes(3)).is_conditional()


def test_loc_and_with_loc():
    entry = TableEntry.object(2, 5, 0xa5)
    assert entry.loc() == (2, 5)
    moved = entry.with_loc(7, 9)
    assert moved.loc() == (7, 9)
    assert moved.info.id == 0xa5

    door = TableEntry.door(Tag.OPEN_DOOR, 2)
    assert door.loc() is None
    assert door.with_loc(7, 9) == door


def test_object_info_bytes():
    info = ObjectInfo.from_bytes(bytes([0x52, 0xa5]))
    assert (info.x, info.y, info.id) == (2, 5, 0xa5)
    assert info.to_bytes() == bytes([0x52, 0xa5])


def test_entry_str():
    assert str(TableEntry.object(2, 5, 0xa5)) == "Object(x=2, y=5, id=0xa5)"
    assert str(TableEntry.door(Tag.BOSS_DOOR, 0x50)) == "BossDoor(0x50)"
    assert str(TableEntry(Tag.DARK_ROOM)) == "DarkRoom"
    assert str(TableEntry.raw(Tag.UNKNOWN_0B, bytes([0x46, 0x2a, 0x04]))) == "Unknown0b(46 2a 04)"


def test_payload_must_match_tag():
    with pytest.raises(ValueError):
        TableEntry(Tag.OPEN_DOOR)
    with pytest.raises(ValueError):
        TableEntry.raw(Tag.NPC, bytes(3))
