"""Editable game model on top of the decoded ROM.

Neutopia parses every room's object table and, in the areas write()
rebuilds, lifts out "conditional" records: an Unknown0b marker and the
record after it that follow a chest object. They are tied to the chest's contents rather than to the room, so
they are kept aside keyed by Chest and put back next to whichever chest
object holds that Chest when the game is written.

write() rebuilds the room data of a configurable range of areas, packing
them one after another from where the first of them started, and moves all
chest tables into free space.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple
import logging as log

from rom.chest import Chest, write_chest_table
from rom.errors import IncoherentChest, ModelConsumed
from rom.neutopia_rom import NeutopiaRom
from rom.object_table import TableEntry, parse_object_table, write_object_table
from rom.pointer import encode_pointer
from rom.rom_config import (
    DEFAULT_RELOCATE_AREAS,
    NUM_ROOMS_PER_AREA,
    ROOM_DESCRIPTOR_SIZE,
    ROOM_POINTER_SIZE,
    RomLayout,
    TABLE_TERMINATOR,
)
from rom.rom_writer import RomWriter

_AREA_NAMES = [
    "Land Sphere",
    "Subterranean Sphere",
    "Sea Sphere",
    "Sky Sphere",
] + [f"Crypt {i}" for i in range(1, 9)] + [
    "Land Sphere Rooms",
    "Subterranean Sphere Rooms",
    "Sea Sphere Rooms",
    "Sky Sphere Rooms",
    "Endgame",
]


def area_name(area: int) -> str:
    if 0 <= area < len(_AREA_NAMES):
        return _AREA_NAMES[area]
    return f"Area {area:02x}"


def _chest_positions(entries: List[TableEntry]) -> List[Tuple[int, int]]:
    """(position in table, chest slot) of each chest object."""
    return [(pos, entry.chest_id()) for pos, entry in enumerate(entries)
            if entry.chest_id() is not None]


@dataclass(frozen=True)
class ChestRef:
    """A chest object in a room and the Chest it holds.

    index is the ordinal of the chest object among the room's chest objects,
    not its chest table slot.
    """
    info: Chest
    area: int
    room: int
    index: int


@dataclass(frozen=True)
class Conditional:
    """Records lifted from after a chest object, and where they came from."""
    entries: Tuple[TableEntry, ...]
    area: int
    room: int


class Neutopia:
    """Game model: chest tables, parsed object tables and conditionals.

    Args:
        data: Unheadered ROM image
        relocate_areas: Areas whose room data write() rebuilds
    """

    def __init__(self, data: bytes,
                 relocate_areas: Iterable[int] = DEFAULT_RELOCATE_AREAS) -> None:
        self._data = bytes(data)
        self.rom = NeutopiaRom(self._data)

        self.relocate_areas: Tuple[int, ...] = tuple(sorted(set(relocate_areas)))
        for area in self.relocate_areas:
            if not 0 <= area < self.rom.num_areas:
                raise ValueError(f"can't relocate unknown area {area:#x}")

        self.chest_tables: List[List[Chest]] = [
            list(table) for table in self.rom.chest_tables]
        self.object_tables: List[List[List[TableEntry]]] = [
            [parse_object_table(room.object_table) for room in rooms]
            for rooms in self.rom.rooms]
        self.conditionals: Dict[Chest, Conditional] = {}
        self._written = False

        # Rooms outside the rebuilt areas keep their conditionals in place.
        for area in self.relocate_areas:
            if area >= len(self.chest_tables):
                continue
            for room in range(NUM_ROOMS_PER_AREA):
                self._extract_conditional(area, room)
        log.debug(f"Extracted {len(self.conditionals)} conditionals")

    def _extract_conditional(self, area: int, room: int) -> None:
        # Only the first chest followed by a conditional in a room is lifted.
        entries = self.object_tables[area][room]
        if len(entries) <= 2:
            return
        for i in range(len(entries) - 2):
            chest_id = entries[i].chest_id()
            if chest_id is None or not entries[i + 1].is_conditional():
                continue
            chest = self.chest_tables[area][chest_id]
            if chest in self.conditionals:
                previous = self.conditionals[chest]
                log.warning(
                    f"Conditional for {chest} in room {area:02x}:{room:02x} replaces "
                    f"the one from {previous.area:02x}:{previous.room:02x}")
            self.conditionals[chest] = Conditional(
                tuple(entries[i + 1:i + 3]), area, room)
            del entries[i + 1:i + 3]
            return

    # ==========================================================================
    # Chests
    # ==========================================================================

    def _chest_objects(self, area: int, room: int) -> List[Tuple[int, int]]:
        return _chest_positions(self.object_tables[area][room])

    def filter_chests(self, predicate: Callable[[ChestRef], bool]) -> List[ChestRef]:
        """Return every chest object, in area/room order, accepted by predicate."""
        chests = []
        for area, table in enumerate(self.chest_tables):
            for room in range(NUM_ROOMS_PER_AREA):
                for index, (_, chest_id) in enumerate(self._chest_objects(area, room)):
                    ref = ChestRef(table[chest_id], area, room, index)
                    if predicate(ref):
                        chests.append(ref)
        return chests

    def chest_slot(self, area: int, room: int, index: int) -> Optional[int]:
        """Chest table slot of the index-th chest object in a room."""
        if not (0 <= area < len(self.chest_tables) and 0 <= room < NUM_ROOMS_PER_AREA):
            return None
        for i, (_, chest_id) in enumerate(self._chest_objects(area, room)):
            if i == index:
                return chest_id
        return None

    def update_chests(self, refs: Iterable[ChestRef]) -> None:
        """Store each ref's Chest in the slot its chest object points at.

        Raises:
            IncoherentChest: a ref doesn't resolve to a chest object.
        """
        for ref in refs:
            slot = self.chest_slot(ref.area, ref.room, ref.index)
            if slot is None:
                raise IncoherentChest(
                    f"no chest {ref.index} in room {ref.area:02x}:{ref.room:02x}")
            self.chest_tables[ref.area][slot] = ref.info

    # ==========================================================================
    # Writing
    # ==========================================================================

    def write(self) -> bytes:
        """Build the new ROM image. The model can only be written once.

        Raises:
            ModelConsumed: write() was already called.
        """
        if self._written:
            raise ModelConsumed("game model has already been written")
        self._written = True

        writer = RomWriter(self._data)
        self._write_chest_tables(writer)

        if self.relocate_areas:
            placements = self._place_conditionals()
            new_pointers: Dict[int, int] = {}
            cur = self.rom.area_pointers[self.relocate_areas[0]]
            for area in self.relocate_areas:
                new_pointers[area] = cur
                cur = self._write_area(writer, area, cur, placements)
                log.debug(f"Area {area:02x} written to 0x{new_pointers[area]:05x}-0x{cur:05x}")
            self._repoint_mirrored_areas(writer, new_pointers)

        return writer.getvalue()

    def _write_chest_tables(self, writer: RomWriter) -> None:
        for area, table in enumerate(self.chest_tables):
            offset = RomLayout.CHEST_RELOCATION.entry_offset(area)
            writer.seek(offset)
            writer.write(write_chest_table(table))
            writer.backpatch_pointer(RomLayout.CHEST_TABLE.entry_offset(area), offset)

    def _place_conditionals(self) -> Dict[Tuple[int, int], List[Chest]]:
        """Decide which rebuilt room each conditional goes back into.

        A conditional returns to its own room if that room still holds its
        Chest, otherwise to the first rebuilt room that does.
        """
        holders: Dict[Chest, List[Tuple[int, int]]] = {}
        for area in self.relocate_areas:
            if area >= len(self.chest_tables):
                continue
            for room in range(NUM_ROOMS_PER_AREA):
                for _, chest_id in self._chest_objects(area, room):
                    chest = self.chest_tables[area][chest_id]
                    if chest not in self.conditionals:
                        continue
                    rooms = holders.setdefault(chest, [])
                    if (area, room) not in rooms:
                        rooms.append((area, room))

        placements: Dict[Tuple[int, int], List[Chest]] = {}
        for chest, conditional in self.conditionals.items():
            rooms = holders.get(chest)
            if not rooms:
                log.warning(
                    f"Dropping conditional from room {conditional.area:02x}:"
                    f"{conditional.room:02x}: {chest} is not in a rebuilt room")
                continue
            origin = (conditional.area, conditional.room)
            target = origin if origin in rooms else rooms[0]
            placements.setdefault(target, []).append(chest)
        return placements

    def _room_entries(self, area: int, room: int,
                      chests: List[Chest]) -> List[TableEntry]:
        entries = list(self.object_tables[area][room])
        for chest in chests:
            conditional = self.conditionals[chest]
            for pos, chest_id in _chest_positions(entries):
                if self.chest_tables[area][chest_id] != chest:
                    continue
                x, y = entries[pos].loc()
                entries[pos + 1:pos + 1] = [e.with_loc(x, y) for e in conditional.entries]
                break
        return entries

    def _write_area(self, writer: RomWriter, area: int, start: int,
                    placements: Dict[Tuple[int, int], List[Chest]]) -> int:
        """Write an area's room pointer table and rooms at start; return the end."""
        room_pointers = []
        writer.seek(start + NUM_ROOMS_PER_AREA * ROOM_POINTER_SIZE)
        for room_id in range(NUM_ROOMS_PER_AREA):
            room = self.rom.room(area, room_id)
            entries = self._room_entries(area, room_id, placements.get((area, room_id), []))

            descriptor = writer.skip(ROOM_DESCRIPTOR_SIZE)
            room_pointers.append(descriptor)

            warp_ptr = writer.tell()
            writer.write(room.warp_table)
            enemy_ptr = writer.tell()
            writer.write(room.enemy_table + bytes([TABLE_TERMINATOR]))
            object_ptr = writer.tell()
            writer.write(write_object_table(entries) + bytes([TABLE_TERMINATOR]))

            writer.backpatch(descriptor, encode_pointer(warp_ptr)
                             + encode_pointer(enemy_ptr) + encode_pointer(object_ptr))

        end = writer.tell()
        writer.backpatch(start, b''.join(encode_pointer(ptr) for ptr in room_pointers))
        writer.backpatch_pointer(RomLayout.AREA_TABLE.entry_offset(area), start)
        return end

    def _repoint_mirrored_areas(self, writer: RomWriter,
                                new_pointers: Dict[int, int]) -> None:
        # The endgame area reuses a rebuilt area's rooms through its own pointer.
        original = self.rom.area_pointers
        for area in range(self.rom.num_areas):
            if area in new_pointers:
                continue
            for source, pointer in new_pointers.items():
                if original[area] == original[source]:
                    writer.backpatch_pointer(RomLayout.AREA_TABLE.entry_offset(area), pointer)
                    log.debug(f"Area {area:02x} follows area {source:02x} to 0x{pointer:05x}")
                    break


