"""Tests for the check catalog."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from logic.checks import (
    Check,
    Gate,
    LocationId,
    dump_checks,
    gate_for_item,
    generate_checks,
    index_checks,
    is_placeable,
    load_checks,
    parse_checks,
)
from logic.neutopia import ChestRef, Neutopia
from rom import TestRomBuilder
from rom.chest import Chest
from rom.errors import DuplicateLocation, FormatError
from rom.object_table import TableEntry

CATALOG = """[
  {"name": "Crypt 1 - Fire Wand", "area": 4, "room": 18, "index": 0, "gates": ["bell"]},
  {"name": "Land Sphere - Cave", "area": 0, "room": 3, "gates": []},
  {"name": "Crypt 2 - Bridge", "area": 5, "room": 7, "index": 1,
   "gates": ["rainbow-drop", "falcon-shoes"]}
]"""


def test_parse_checks():
    checks = parse_checks(CATALOG)
    assert checks[0] == Check("Crypt 1 - Fire Wand", 4, 18, 0, (Gate.BELL,))
    assert checks[1].index == 0
    assert checks[1].gates == ()
    assert checks[2].loc == LocationId(5, 7, 1)
    assert set(checks[2].gates) == {Gate.RAINBOW_DROP, Gate.FALCON_SHOES}


def test_index_checks_sorted():
    indexed = index_checks(parse_checks(CATALOG))
    assert list(indexed) == [(0, 3, 0), (4, 18, 0), (5, 7, 1)]


def test_duplicate_location():
    checks = parse_checks(CATALOG)
    with pytest.raises(DuplicateLocation):
        index_checks(checks + [Check("Copy", 4, 18)])


@pytest.mark.parametrize("data", [
    "not json",
    '{"name": "x"}',
    '[{"name": "x", "area": 1, "room": 2}]',
    '[{"name": "x", "area": 1, "room": 2, "gates": ["hammer"]}]',
    '[{"name": "x", "area": "one", "room": 2, "gates": []}]',
])
def test_bad_catalog(data):
    with pytest.raises(FormatError):
        parse_checks(data)


def test_load_and_dump(tmp_path):
    path = tmp_path / "checks.json"
    path.write_text(CATALOG)
    checks = load_checks(path)
    assert len(checks) == 3

    dumped = json.loads(dump_checks(checks.values()))
    assert dumped[0] == {"name": "Land Sphere - Cave", "area": 0, "room": 3,
                         "index": 0, "gates": []}
    assert index_checks(parse_checks(dump_checks(checks.values()))) == checks


def test_gate_items():
    assert gate_for_item(0x02) == Gate.FIRE_WAND
    assert gate_for_item(0x03) == Gate.BELL
    assert gate_for_item(0x0b) == Gate.FALCON_SHOES
    assert gate_for_item(0x0c) == Gate.RAINBOW_DROP
    assert gate_for_item(0x0d) is None


def test_is_placeable():
    assert is_placeable(ChestRef(Chest(0x11), 4, 0, 0))
    assert is_placeable(ChestRef(Chest(0x00, 5), 0xf, 0, 0))
    assert not is_placeable(ChestRef(Chest(0x12), 4, 0, 0))
    assert not is_placeable(ChestRef(Chest(0x02), 0x10, 0, 0))


def test_generate_checks():
    data = (TestRomBuilder()
            .with_chest(4, 0, Chest(0x02))
            .with_chest(4, 1, Chest(0x12))
            .with_room_objects(4, 5, [TableEntry.object(1, 1, 0x4c),
                                      TableEntry.object(2, 2, 0x4d)])
            .with_room_objects(0, 1, [TableEntry.object(1, 1, 0x4c)])
            .build())
    checks = generate_checks(Neutopia(data))
    assert checks == [
        Check("Land Sphere - Bombs x1", 0, 1, 0),
        Check("Crypt 1 - Fire Wand", 4, 5, 0),
    ]
