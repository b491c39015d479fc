"""Read-only model of the level data in a Neutopia ROM image.

The level data is reached through three pointer tables (see RomLayout):

    area table        -> 64 room pointers per area
      room pointer    -> room descriptor: warp, enemy and object table pointers
    room order table  -> 64 bytes per area
    chest table       -> 8 chests per area (no entry for the endgame area)

NeutopiaRom decodes all of it once, keeping the raw tables together with the
pointers they were read from. The raw pointers are provenance only; rooms and
tables are indexed by area and room number.
"""

from dataclasses import dataclass
from typing import Dict, List
import logging as log

from .chest import Chest, parse_chest_table
from .errors import FormatError, TruncatedRom
from .interval import IntervalStore
from .object_table import object_table_len
from .pointer import decode_pointer, decode_pointer_table
from .rom_config import (
    AREA_TABLE,
    AREA_TABLE_COUNT,
    CHEST_TABLE,
    CHEST_TABLE_COUNT,
    NUM_ROOMS_PER_AREA,
    ROOM_DESCRIPTOR_SIZE,
    ROOM_ORDER_TABLE,
    ROOM_ORDER_TABLE_COUNT,
    ROOM_ORDER_TABLE_SIZE,
    ROOM_POINTER_SIZE,
    TABLE_TERMINATOR,
)


@dataclass
class Room:
    """Raw tables of one room and where they were found.

    enemy_table and object_table exclude their 0xFF terminators.
    """
    base_addr: int
    warp_table_pointer: int
    enemy_table_pointer: int
    object_table_pointer: int
    warp_table: bytes
    enemy_table: bytes
    object_table: bytes


def read_until_terminator(data: bytes, offset: int) -> bytes:
    """Return data[offset:] up to, not including, the first 0xFF."""
    end = data.find(bytes([TABLE_TERMINATOR]), offset)
    if end < 0:
        raise TruncatedRom("table has no terminator", offset=offset)
    return bytes(data[offset:end])


def _check_bounds(data: bytes, offset: int, size: int, what: str) -> None:
    if offset + size > len(data):
        raise TruncatedRom(
            f"{what} at 0x{offset:05x} runs past the end of the image "
            f"(0x{len(data):05x} bytes)", offset=offset)


class NeutopiaRom:
    """Decoded level data of a ROM image.

    Attributes:
        area_pointers: Room pointer table offset for each area
        room_order_pointers: Room order table offset for each area
        chest_table_pointers: Chest table offset for each area with chests
        rooms: rooms[area][room] for every area
        room_order_tables: 64 byte room order table per area
        chest_tables: 8 chests per area with chests
        room_info_intervals: Bytes claimed by each area's room data
    """

    def __init__(self, data: bytes) -> None:
        data = bytes(data)
        self.area_pointers: List[int] = decode_pointer_table(
            data, AREA_TABLE_COUNT, AREA_TABLE)
        self.room_order_pointers: List[int] = decode_pointer_table(
            data, ROOM_ORDER_TABLE_COUNT, ROOM_ORDER_TABLE)
        self.chest_table_pointers: List[int] = decode_pointer_table(
            data, CHEST_TABLE_COUNT, CHEST_TABLE)

        self.rooms: List[List[Room]] = []
        self.room_info_intervals: Dict[int, IntervalStore] = {}
        for area, area_ptr in enumerate(self.area_pointers):
            try:
                rooms, intervals = self._parse_area(data, area, area_ptr)
            except FormatError as e:
                if e.area is None:
                    e.at(area)
                raise
            self.rooms.append(rooms)
            self.room_info_intervals[area] = intervals
            log.debug(f"Area {area:02x}: rooms at 0x{area_ptr:05x}, "
                      f"{intervals.total_size()} bytes in {len(intervals)} ranges")

        self.room_order_tables: List[bytes] = []
        for area, ptr in enumerate(self.room_order_pointers):
            _check_bounds(data, ptr, ROOM_ORDER_TABLE_SIZE, "room order table")
            self.room_order_tables.append(data[ptr:ptr + ROOM_ORDER_TABLE_SIZE])

        self.chest_tables: List[List[Chest]] = []
        for area, ptr in enumerate(self.chest_table_pointers):
            try:
                self.chest_tables.append(parse_chest_table(data, ptr))
            except FormatError as e:
                raise e.at(area)

    @property
    def num_areas(self) -> int:
        return len(self.area_pointers)

    def room(self, area: int, room: int) -> Room:
        return self.rooms[area][room]

    def room_data_intervals(self, area: int) -> IntervalStore:
        return self.room_info_intervals[area]

    def _parse_area(self, data: bytes, area: int, area_ptr: int):
        intervals = IntervalStore()
        _check_bounds(data, area_ptr, NUM_ROOMS_PER_AREA * ROOM_POINTER_SIZE,
                      "room pointer table")
        intervals.add(area_ptr, area_ptr + NUM_ROOMS_PER_AREA * ROOM_POINTER_SIZE)

        rooms = []
        for room_id in range(NUM_ROOMS_PER_AREA):
            try:
                room = self._parse_room(data, area_ptr + room_id * ROOM_POINTER_SIZE)
            except FormatError as e:
                raise e.at(area, room_id)
            intervals.add(room.base_addr, room.base_addr + ROOM_DESCRIPTOR_SIZE)
            intervals.add(room.warp_table_pointer,
                          room.warp_table_pointer + len(room.warp_table))
            intervals.add(room.enemy_table_pointer,
                          room.enemy_table_pointer + len(room.enemy_table) + 1)
            intervals.add(room.object_table_pointer,
                          room.object_table_pointer + len(room.object_table) + 1)
            rooms.append(room)
        return rooms, intervals

    @staticmethod
    def _parse_room(data: bytes, room_ptr_offset: int) -> Room:
        base_addr = decode_pointer(data, room_ptr_offset)
        _check_bounds(data, base_addr, ROOM_DESCRIPTOR_SIZE, "room descriptor")
        warp_ptr, enemy_ptr, object_ptr = decode_pointer_table(data, 3, base_addr)

        for ptr, what in ((warp_ptr, "warp table"), (enemy_ptr, "enemy table"),
                          (object_ptr, "object table")):
            _check_bounds(data, ptr, 0, what)
        if enemy_ptr < warp_ptr:
            raise FormatError(
                f"enemy table 0x{enemy_ptr:05x} precedes warp table 0x{warp_ptr:05x}",
                offset=base_addr)

        object_len = object_table_len(memoryview(data)[object_ptr:])
        return Room(
            base_addr=base_addr,
            warp_table_pointer=warp_ptr,
            enemy_table_pointer=enemy_ptr,
            object_table_pointer=object_ptr,
            warp_table=data[warp_ptr:enemy_ptr],
            enemy_table=read_until_terminator(data, enemy_ptr),
            object_table=data[object_ptr:object_ptr + object_len],
        )
