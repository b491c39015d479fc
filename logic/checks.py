"""Check catalog: the places items can be put and what unlocks them.

The catalog is a JSON list of objects:

    {"name": "Crypt 1 - Fire Wand", "area": 4, "room": 18, "index": 0,
     "gates": ["bell"]}

index is the ordinal of the chest object within its room and defaults to 0.
A check is open once every gate it lists has been cleared.
"""

from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import json
import logging as log

from rom.chest import FIRST_MEDALLION
from rom.errors import DuplicateLocation, FormatError
from rom.rom_config import ENDGAME_AREA
from .neutopia import ChestRef, Neutopia, area_name

LocationId = namedtuple('LocationId', ['area', 'room', 'index'])


class Gate(Enum):
    """Progression flag, cleared when its item is placed anywhere."""
    RAINBOW_DROP = 'rainbow-drop'
    FALCON_SHOES = 'falcon-shoes'
    FIRE_WAND = 'fire-wand'
    BELL = 'bell'


# Item id -> gate cleared by placing it
GATE_ITEMS: Dict[int, Gate] = {
    0x02: Gate.FIRE_WAND,
    0x03: Gate.BELL,
    0x0b: Gate.FALCON_SHOES,
    0x0c: Gate.RAINBOW_DROP,
}


def gate_for_item(item_id: int) -> Optional[Gate]:
    return GATE_ITEMS.get(item_id)


@dataclass(frozen=True)
class Check:
    name: str
    area: int
    room: int
    index: int = 0
    gates: tuple = field(default_factory=tuple)

    @property
    def loc(self) -> LocationId:
        return LocationId(self.area, self.room, self.index)

    @classmethod
    def from_json(cls, obj: dict) -> 'Check':
        try:
            return cls(
                name=obj['name'],
                area=int(obj['area']),
                room=int(obj['room']),
                index=int(obj.get('index', 0)),
                gates=tuple(sorted((Gate(g) for g in obj['gates']),
                                   key=lambda gate: gate.value)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FormatError(f"bad check {obj!r}: {e}") from e

    def to_json(self) -> dict:
        return {
            'name': self.name,
            'area': self.area,
            'room': self.room,
            'index': self.index,
            'gates': [gate.value for gate in self.gates],
        }


def index_checks(checks: Iterable[Check]) -> Dict[LocationId, Check]:
    """Key checks by location, in location order.

    Raises:
        DuplicateLocation: two checks share a location.
    """
    indexed: Dict[LocationId, Check] = {}
    for check in checks:
        if check.loc in indexed:
            raise DuplicateLocation(
                f"duplicate location {tuple(check.loc)} for check {check.name!r} "
                f"(already used by {indexed[check.loc].name!r})")
        indexed[check.loc] = check
    return dict(sorted(indexed.items()))


def parse_checks(data: Union[str, bytes]) -> List[Check]:
    try:
        objs = json.loads(data)
    except ValueError as e:
        raise FormatError(f"failed to parse checks JSON: {e}") from e
    if not isinstance(objs, list):
        raise FormatError("checks JSON must be a list")
    return [Check.from_json(obj) for obj in objs]


def load_checks(path: Union[str, Path]) -> Dict[LocationId, Check]:
    checks = index_checks(parse_checks(Path(path).read_bytes()))
    log.info(f"Loaded {len(checks)} checks from {path}")
    return checks


def is_placeable(chest: ChestRef) -> bool:
    """True for chests whose contents take part in placement.

    Medallions and the endgame area stay where they are.
    """
    return chest.area < ENDGAME_AREA and chest.info.item_id < FIRST_MEDALLION


def generate_checks(game: Neutopia) -> List[Check]:
    """Build an ungated catalog with one check per placeable chest."""
    chests = game.filter_chests(is_placeable)
    return [
        Check(name=f"{area_name(chest.area)} - {chest.info.item_name}",
              area=chest.area, room=chest.room, index=chest.index)
        for chest in chests
    ]


def dump_checks(checks: Iterable[Check]) -> str:
    return json.dumps([check.to_json() for check in checks], indent=2)
