"""Chest records and chest tables.

Each area with treasure owns a table of exactly eight 4-byte chests. A chest
object placed in a room refers to a slot in its area's table (see
TableEntry.chest_id), so the table holds what the player actually receives.
"""

from dataclasses import dataclass
from typing import Iterable, List

from .errors import ShortTable
from .rom_config import CHEST_SIZE, NUM_CHESTS_PER_TABLE

# Item ids
BOMBS = 0x00
MEDICINE = 0x01
FIRE_WAND = 0x02
SKY_BELL = 0x03
WINGS = 0x04
MOONBEAM_MOSS = 0x05
MAGIC_RING = 0x06
SWORD = 0x08
ARMOR = 0x09
SHIELD = 0x0a
FALCON_SHOES = 0x0b
RAINBOW_DROP = 0x0c
BOOK_OF_REVIVAL = 0x0d
CRYSTAL_BALL = 0x10
CRYPT_KEY = 0x11
FIRST_MEDALLION = 0x12
NUM_MEDALLIONS = 8

_ITEM_NAMES = {
    MEDICINE: "Medicine",
    FIRE_WAND: "Fire Wand",
    SKY_BELL: "Sky Bell",
    WINGS: "Wings",
    MOONBEAM_MOSS: "Moonbeam Moss",
    MAGIC_RING: "Magic Ring",
    0x07: "Placeholder",
    FALCON_SHOES: "Falcon Shoes",
    RAINBOW_DROP: "Rainbow Drop",
    BOOK_OF_REVIVAL: "Book of Revival",
    0x0e: "Placeholder",
    0x0f: "Placeholder",
    CRYSTAL_BALL: "Crystal Ball",
    CRYPT_KEY: "Crypt Key",
    FIRST_MEDALLION + NUM_MEDALLIONS: "Placeholder",
}

_EQUIPMENT_NAMES = {SWORD: "Sword", ARMOR: "Armor", SHIELD: "Shield"}

_EQUIPMENT_TIERS = {1: "Starter", 2: "Bronze", 3: "Steel", 4: "Strongest"}


@dataclass(frozen=True, order=True)
class Chest:
    """Contents of a chest slot."""
    item_id: int
    arg: int = 0
    text: int = 0
    unknown: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Chest':
        return cls(item_id=data[0], arg=data[1], text=data[2], unknown=data[3])

    def to_bytes(self) -> bytes:
        return bytes([self.item_id, self.arg, self.text, self.unknown])

    @property
    def is_medallion(self) -> bool:
        return FIRST_MEDALLION <= self.item_id < FIRST_MEDALLION + NUM_MEDALLIONS

    @property
    def item_name(self) -> str:
        if self.item_id == BOMBS:
            return f"Bombs x{self.arg}"
        if self.item_id in _EQUIPMENT_NAMES:
            tier = _EQUIPMENT_TIERS.get(self.arg, "Unknown")
            return f"{tier} {_EQUIPMENT_NAMES[self.item_id]}"
        if self.is_medallion:
            return f"Crypt {self.item_id - FIRST_MEDALLION + 1} Medallion"
        return _ITEM_NAMES.get(self.item_id, "Unknown")

    def __str__(self) -> str:
        return f"{self.item_name} ({self.to_bytes().hex(' ')})"


def parse_chest_table(data: bytes, offset: int = 0) -> List[Chest]:
    """Parse the eight chests starting at data[offset].

    Raises:
        ShortTable: fewer than 8 complete chests are available.
    """
    table_size = NUM_CHESTS_PER_TABLE * CHEST_SIZE
    table = data[offset:offset + table_size]
    if len(table) < table_size:
        raise ShortTable(
            f"chest table needs {table_size} bytes, {len(table)} available",
            offset=offset)
    return [Chest.from_bytes(table[i:i + CHEST_SIZE])
            for i in range(0, table_size, CHEST_SIZE)]


def write_chest_table(chests: Iterable[Chest]) -> bytes:
    chests = list(chests)
    if len(chests) != NUM_CHESTS_PER_TABLE:
        raise ValueError(
            f"chest table needs {NUM_CHESTS_PER_TABLE} chests, got {len(chests)}")
    return b''.join(chest.to_bytes() for chest in chests)
