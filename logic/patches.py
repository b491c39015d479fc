"""Fixed set of IPS patches applied before every randomization.

The patches are prebuilt .ips files, loaded from ips/ or a directory given
with --patch-dir. They are applied in PATCH_NAMES order.
"""

from pathlib import Path
from typing import List, Optional, Union
import logging as log

from .patch import Patch

PATCH_NAMES = [
    'expand-save-state',
    'intro-skip',
    'no-downgrade',
    'open-stairs',
    'text-speedup',
]

DEFAULT_PATCH_DIR = Path(__file__).resolve().parents[1] / 'ips'


def load_patches(patch_dir: Optional[Union[str, Path]] = None) -> List[Patch]:
    """Load every patch in PATCH_NAMES from patch_dir.

    Raises:
        FileNotFoundError: a patch has not been built.
        InvalidPatch: a patch file is malformed.
    """
    patch_dir = Path(patch_dir) if patch_dir is not None else DEFAULT_PATCH_DIR
    patches = []
    for name in PATCH_NAMES:
        path = patch_dir / f"{name}.ips"
        if not path.is_file():
            raise FileNotFoundError(
                f"Patch {path} not found. Copy the prebuilt {name}.ips into {patch_dir} "
                f"or point --patch-dir at the directory holding it (see ips/README.md).")
        patches.append(Patch.FromIPS(path.read_bytes(), name=name))
        log.debug(f"Loaded patch {name} ({len(patches[-1])} hunks)")
    return patches


def apply_patches(buffer: bytearray, patches: List[Patch]) -> None:
    """Apply patches to buffer in order."""
    for patch in patches:
        patch.Apply(buffer, logger=log)
