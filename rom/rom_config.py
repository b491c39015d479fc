"""ROM memory layout configuration.

This module defines the ROM regions read and rewritten by the randomizer.
All addresses are offsets into the unheadered 384KiB image.

Pointer Convention:
    Level data refers to other level data through 3-byte bank-relative
    pointers (see rom.pointer). A decoded pointer is an image offset; the
    encoded form is offset by POINTER_BASE, the start of the mapped window.

When viewing a headered ROM in a hex editor, add HEADER_SIZE to every offset.
"""

from dataclasses import dataclass


# Size of the cartridge image without the optional copier header
ROM_SIZE = 384 * 1024

# Some dumps carry a 512 byte copier header in front of the image
HEADER_SIZE = 0x200

# Encoded pointers are relative to this address
POINTER_BASE = 0x40000

# Bank window bits stored in the top of the third pointer byte
POINTER_WINDOW_BITS = 0x40

NUM_ROOMS_PER_AREA = 0x40
ROOM_POINTER_SIZE = 3
ROOM_DESCRIPTOR_SIZE = 3 * 3
ROOM_ORDER_TABLE_SIZE = 0x40

NUM_CHESTS_PER_TABLE = 8
CHEST_SIZE = 4

# Object ids [CHEST_OBJECT_BASE, CHEST_OBJECT_BASE + 8) are chests; the
# offset from the base is the slot in the area's chest table.
CHEST_OBJECT_BASE = 0x4c

# Enemy and object tables are terminated by this byte
TABLE_TERMINATOR = 0xff

# Area holding the final dungeon; it has no chest table.
ENDGAME_AREA = 0x10

# Areas whose room data is rebuilt by default when the game is written.
DEFAULT_RELOCATE_AREAS = range(0x4, 0x10)

# Crypt areas, shuffled by the crypt-local randomizer.
CRYPT_AREAS = range(0x4, 0xc)


@dataclass(frozen=True)
class RomRegion:
    """Definition of a ROM memory region.

    Attributes:
        file_offset: Offset in the unheadered image
        size: Size of the region in bytes
        count: Number of records the region holds
        description: Human-readable description
    """
    file_offset: int
    size: int
    count: int = 1
    description: str = ""

    @property
    def end_offset(self) -> int:
        """Return the end offset (exclusive) for slicing."""
        return self.file_offset + self.size

    def entry_offset(self, index: int) -> int:
        """Return the offset of the index-th fixed-size record."""
        if not 0 <= index < self.count:
            raise IndexError(
                f"{self.description}: index {index} out of range 0..{self.count}")
        return self.file_offset + index * (self.size // self.count)


class RomLayout:
    """ROM memory layout constants for Neutopia (U).

    Every table here is an array of 3-byte pointers, one per area.
    """

    # ==========================================================================
    # Level data pointer tables
    # ==========================================================================

    # Area pointers: each points at a table of 64 room pointers
    AREA_TABLE = RomRegion(
        file_offset=0x1c5b5, size=0x11 * 3, count=0x11,
        description="Area room pointer table pointers"
    )

    # Room order pointers: each points at a 64 byte room order table
    ROOM_ORDER_TABLE = RomRegion(
        file_offset=0x1c5e8, size=0x11 * 3, count=0x11,
        description="Area room order table pointers"
    )

    # Chest table pointers: each points at 8 chests of 4 bytes.
    # The endgame area has no entry.
    CHEST_TABLE = RomRegion(
        file_offset=0x1c61b, size=0x10 * 3, count=0x10,
        description="Area chest table pointers"
    )

    # ==========================================================================
    # Free space
    # ==========================================================================

    # Unused space at the end of the last bank; rewritten chest tables live
    # here, 0x20 bytes per area.
    CHEST_RELOCATION = RomRegion(
        file_offset=0x4fe00, size=0x10 * NUM_CHESTS_PER_TABLE * CHEST_SIZE,
        count=0x10,
        description="Relocated chest tables"
    )


# Convenience aliases
AREA_TABLE = RomLayout.AREA_TABLE.file_offset
AREA_TABLE_COUNT = RomLayout.AREA_TABLE.count
ROOM_ORDER_TABLE = RomLayout.ROOM_ORDER_TABLE.file_offset
ROOM_ORDER_TABLE_COUNT = RomLayout.ROOM_ORDER_TABLE.count
CHEST_TABLE = RomLayout.CHEST_TABLE.file_offset
CHEST_TABLE_COUNT = RomLayout.CHEST_TABLE.count
CHEST_RELOCATION_BASE = RomLayout.CHEST_RELOCATION.file_offset
