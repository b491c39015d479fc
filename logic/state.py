"""Item placement state.

State tracks three pools while items are being placed:

    unassigned checks  - catalog locations without an item yet
    unplaced items     - chest contents still to be placed
    cleared gates      - progression flags unlocked by placed items

Every successful placement removes exactly one check and one item, so the two
pools always have the same size. Pools are kept in a fixed order so that the
same RNG draws always produce the same placements.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
import logging as log

from rom.chest import CRYPT_KEY, CRYSTAL_BALL, Chest
from rom.errors import (
    AreaLockViolation,
    ConsistencyError,
    IncoherentChest,
    ModelConsumed,
    UnknownItem,
    UnknownLocation,
)
from .checks import Check, Gate, LocationId, gate_for_item, index_checks, is_placeable
from .neutopia import ChestRef, Neutopia

# Items that must stay in the area they were found in
AREA_LOCKED_ITEMS = (CRYSTAL_BALL, CRYPT_KEY)


@dataclass(frozen=True)
class Item:
    info: Chest
    area_lock: Optional[int] = None

    def sort_key(self) -> Tuple:
        return (self.info, -1 if self.area_lock is None else self.area_lock)

    def __str__(self) -> str:
        if self.area_lock is None:
            return self.info.item_name
        return f"{self.info.item_name} (area {self.area_lock:02x})"


class State:
    """Placement of items from a game onto a check catalog.

    Args:
        game: Game whose placeable chests supply the items
        checks: Catalog, either indexed by location or as a list

    Raises:
        DuplicateLocation: the catalog list has two checks at one location.
        IncoherentChest: a check does not point at a chest object.
        ConsistencyError: the catalog and the item pool differ in size.
    """

    def __init__(self, game: Neutopia,
                 checks: Union[Mapping[LocationId, Check], Iterable[Check]]) -> None:
        if isinstance(checks, Mapping):
            checks = checks.values()
        self._checks: Dict[LocationId, Check] = index_checks(checks)

        items = []
        for chest in game.filter_chests(is_placeable):
            area_lock = chest.area if chest.info.item_id in AREA_LOCKED_ITEMS else None
            items.append(Item(chest.info, area_lock))
        self._items: List[Item] = sorted(items, key=Item.sort_key)

        for loc, check in self._checks.items():
            if game.chest_slot(*loc) is None:
                raise IncoherentChest(
                    f"check {check.name!r} at {tuple(loc)} is not a chest")
        if len(self._checks) != len(self._items):
            raise ConsistencyError(
                f"catalog has {len(self._checks)} checks for {len(self._items)} items")

        self._cleared_gates: Set[Gate] = set()
        self._assigned: List[ChestRef] = []
        self._game: Optional[Neutopia] = game
        log.debug(f"Placement state with {len(self._items)} items")

    @property
    def cleared_gates(self) -> Set[Gate]:
        return set(self._cleared_gates)

    @property
    def assignments(self) -> List[ChestRef]:
        return list(self._assigned)

    def remaining(self) -> int:
        return len(self._items)

    def is_complete(self) -> bool:
        assert len(self._checks) == len(self._items)
        return not self._checks

    def place_item(self, item: Item, area: int, room: int, index: int = 0) -> None:
        self.place_item_by_loc(item, LocationId(area, room, index))

    def place_item_by_loc(self, item: Item, loc: Tuple[int, int, int]) -> None:
        """Put item at loc.

        Nothing changes if the placement is refused.

        Raises:
            AreaLockViolation: item is locked to another area.
            UnknownLocation: loc is not an unassigned check.
            UnknownItem: item is not an unplaced item.
        """
        loc = LocationId(*loc)
        if item.area_lock is not None and item.area_lock != loc.area:
            raise AreaLockViolation(
                f"attempting to place area locked item {item} in area {loc.area:02x}")
        if loc not in self._checks:
            raise UnknownLocation(f"can't place item at unknown location {tuple(loc)}")
        if item not in self._items:
            raise UnknownItem(f"can't place unknown item {item}")

        check = self._checks.pop(loc)
        self._items.remove(item)

        gate = gate_for_item(item.info.item_id)
        if gate is not None:
            self._cleared_gates.add(gate)

        self._assigned.append(ChestRef(item.info, check.area, check.room, check.index))
        log.debug(f"Placed {item} at {check.name}")

        assert len(self._checks) == len(self._items)

    def filter_items(self, predicate: Callable[[Item], bool]) -> List[Item]:
        return [item for item in self._items if predicate(item)]

    def get_item_by_id(self, item_id: int) -> Item:
        """Return the single unplaced item with item_id.

        Raises:
            UnknownItem: there is no such item, or more than one.
        """
        items = self.filter_items(lambda item: item.info.item_id == item_id)
        if len(items) != 1:
            raise UnknownItem(f"found {len(items)} items with id {item_id:02x}")
        return items[0]

    def _is_open(self, check: Check) -> bool:
        return all(gate in self._cleared_gates for gate in check.gates)

    def filter_checks(self, predicate: Callable[[Check], bool] = lambda check: True
                      ) -> List[Check]:
        """Unassigned checks whose gates are all cleared, in location order."""
        return [check for check in self._checks.values()
                if self._is_open(check) and predicate(check)]

    def filter_checks_gateless(self, predicate: Callable[[Check], bool] = lambda check: True
                               ) -> List[Check]:
        """Unassigned checks in location order, ignoring gates."""
        return [check for check in self._checks.values() if predicate(check)]

    def finalize(self) -> Neutopia:
        """Write the placements into the game and hand it back.

        Raises:
            ModelConsumed: the state was already finalized.
        """
        if self._game is None:
            raise ModelConsumed("placement state has already been finalized")
        game, self._game = self._game, None
        game.update_chests(self._assigned)
        log.info(f"Applied {len(self._assigned)} placements")
        return game
