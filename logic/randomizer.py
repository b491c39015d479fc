"""Randomizer entry points.

randomize() verifies the input ROM, applies the fixed patches and runs one
of the randomization modes:

    local  - shuffle chests within each crypt
    global - place every item anywhere, following the check catalog's gates
    none   - patches only
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging as log

from rng.random_number_generator import RandomNumberGenerator
from rom.chest import BOOK_OF_REVIVAL, MOONBEAM_MOSS
from rom.errors import ConsistencyError, UnrecognizedRom, UnsupportedRegion
from rom.rom_config import CRYPT_AREAS, DEFAULT_RELOCATE_AREAS, ENDGAME_AREA
from rom.verify import Region, strip_header, verify
from .checks import Check, LocationId, gate_for_item, generate_checks, load_checks
from .neutopia import ChestRef, Neutopia
from .patch import Patch
from .patches import apply_patches, load_patches
from .solvers import AssignmentSolver
from .state import State

# Items that keep their vanilla location in global mode
PINNED_ITEMS = (BOOK_OF_REVIVAL, MOONBEAM_MOSS)


class RandoType(Enum):
    LOCAL = 'local'
    GLOBAL = 'global'
    NONE = 'none'

    @classmethod
    def parse(cls, text: str) -> 'RandoType':
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(
                f"Could not parse rando type {text!r}, expected one of "
                f"{', '.join(t.value for t in cls)}") from None


@dataclass
class Config:
    """Randomizer options.

    Attributes:
        ty: Randomization mode
        seed: Base-36 seed name, or None for a random seed
        checks_path: Check catalog for global mode; None generates an
            ungated catalog from the ROM's own chests
        patch_dir: Directory holding the built IPS patches
        patches: Patches to apply instead of loading them from patch_dir
        relocate_areas: Areas whose room data is rebuilt on write
    """
    ty: RandoType = RandoType.GLOBAL
    seed: Optional[str] = None
    checks_path: Optional[Union[str, Path]] = None
    patch_dir: Optional[Union[str, Path]] = None
    patches: Optional[List[Patch]] = None
    relocate_areas: Iterable[int] = field(default_factory=lambda: DEFAULT_RELOCATE_AREAS)


@dataclass(frozen=True)
class RandomizedGame:
    seed: str
    data: bytes

    @property
    def filename(self) -> str:
        return f"neutopia-randomizer-{self.seed}.pce"


def verify_rom(data: bytes) -> bytes:
    """Check the ROM is the NA release and return it without its header.

    Raises:
        InvalidRomSize: data has the wrong size.
        UnrecognizedRom: data is not a known dump.
        UnsupportedRegion: data is a known dump from another region.
    """
    info = verify(data)
    if not info.known:
        raise UnrecognizedRom(f"Rom with MD5 hash {info.md5_hash} is unrecognized.")
    if info.region != Region.NA:
        raise UnsupportedRegion(
            f"Region {info.region.value} rom not supported.  Please use NA rom.")
    log.info(f"Verified {info.desc} (headered: {info.headered})")
    return strip_header(data)


# ==========================================================================
# Crypt-local mode
# ==========================================================================

def crypt_rando(rng: RandomNumberGenerator, data: bytes,
                relocate_areas: Iterable[int] = DEFAULT_RELOCATE_AREAS) -> bytes:
    """Shuffle the chests of each crypt among themselves.

    Medallions stay put and the Book of Revival keeps its chest.
    """
    game = Neutopia(data, relocate_areas)

    for area in CRYPT_AREAS:
        chests = game.filter_chests(
            lambda chest: chest.area == area and not chest.info.is_medallion)
        if len(chests) < 2:
            continue

        locations = [LocationId(chest.area, chest.room, chest.index) for chest in chests]
        solver_seed = rng.randint(1, 2**31 - 1)
        solver = AssignmentSolver(rng)
        solver.add_permutation_problem(
            keys=locations, values=[chest.info for chest in chests],
            shuffle_seed=solver_seed)
        for loc, chest in zip(locations, chests):
            if chest.info.item_id == BOOK_OF_REVIVAL:
                solver.require(loc, chest.info)

        solution = solver.solve(seed=solver_seed, time_limit_seconds=5.0)
        if solution is None:
            raise ConsistencyError(f"no valid chest shuffle for area {area:02x}")

        game.update_chests(ChestRef(solution[loc], *loc) for loc in locations)
        log.debug(f"Area {area:02x}: shuffled {len(chests)} chests")

    return game.write()


# ==========================================================================
# Global mode
# ==========================================================================

def _place_at_random(state: State, rng: RandomNumberGenerator, item, checks: List[Check]) -> None:
    if not checks:
        raise ConsistencyError(
            f"no open check left for {item} with {state.remaining()} items to place")
    state.place_item_by_loc(item, rng.choice(checks).loc)


def place_items(state: State, game: Neutopia, rng: RandomNumberGenerator) -> None:
    """Place every item of state.

    Pinned items go back to their vanilla chests, area locked items to a
    random check of their area, then gate items and finally everything else
    to random open checks.
    """
    for item_id in PINNED_ITEMS:
        refs = game.filter_chests(
            lambda chest: chest.area < ENDGAME_AREA and chest.info.item_id == item_id)
        if not refs:
            log.warning(f"No vanilla chest holds item {item_id:02x}; not pinning it")
            continue
        ref = refs[0]
        state.place_item(state.get_item_by_id(item_id), ref.area, ref.room, ref.index)

    for item in state.filter_items(lambda item: item.area_lock is not None):
        _place_at_random(state, rng, item, state.filter_checks_gateless(
            lambda check: check.area == item.area_lock))
    log.info(f"Placed area locked items, {state.remaining()} left")

    gate_items = state.filter_items(lambda item: gate_for_item(item.info.item_id) is not None)
    rng.shuffle(gate_items)
    for item in gate_items:
        _place_at_random(state, rng, item, state.filter_checks())
    log.info(f"Placed gate items, cleared {len(state.cleared_gates)} gates")

    items = state.filter_items(lambda item: True)
    rng.shuffle(items)
    for item in items:
        _place_at_random(state, rng, item, state.filter_checks())

    if not state.is_complete():
        raise ConsistencyError(f"{state.remaining()} checks left unassigned")


def global_rando(rng: RandomNumberGenerator, data: bytes,
                 checks: Optional[Iterable[Check]] = None,
                 relocate_areas: Iterable[int] = DEFAULT_RELOCATE_AREAS) -> bytes:
    """Distribute all placeable items over the check catalog."""
    game = Neutopia(data, relocate_areas)
    if checks is None:
        checks = generate_checks(game)
        log.info(f"No check catalog given, using {len(checks)} ungated checks")
    state = State(game, checks)
    place_items(state, game, rng)
    return state.finalize().write()


# ==========================================================================
# Entry points
# ==========================================================================

def randomize_image(config: Config, image: bytes) -> RandomizedGame:
    """Patch and randomize an already verified, unheadered image."""
    rng = RandomNumberGenerator.from_seed_name(config.seed)
    log.info(f"Randomizing with seed {rng.seed_name} ({config.ty.value})")

    patches = config.patches if config.patches is not None else load_patches(config.patch_dir)
    buffer = bytearray(image)
    apply_patches(buffer, patches)
    buffer = bytes(buffer)

    if config.ty == RandoType.LOCAL:
        data = crypt_rando(rng, buffer, config.relocate_areas)
    elif config.ty == RandoType.GLOBAL:
        checks = load_checks(config.checks_path).values() if config.checks_path else None
        data = global_rando(rng, buffer, checks, config.relocate_areas)
    else:
        data = buffer

    return RandomizedGame(seed=rng.seed_name, data=data)


def randomize(config: Config, data: bytes) -> RandomizedGame:
    """Verify data, then patch and randomize it according to config."""
    return randomize_image(config, verify_rom(data))
