"""ROM identification.

Neutopia dumps come with or without a 512 byte copier header. verify()
detects the header from the file size and identifies the image by the MD5
of its unheadered contents.
"""

from dataclasses import dataclass
from enum import Enum
import hashlib

from .errors import InvalidRomSize
from .rom_config import HEADER_SIZE, ROM_SIZE


class Region(Enum):
    NA = "NA"
    JP = "JP"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class KnownRom:
    desc: str
    region: Region


UNRECOGNIZED_ROM = KnownRom("Unrecognized ROM", Region.UNKNOWN)

KNOWN_ROMS = {
    "eb0789088fc70be42b2f994c1b66be21": KnownRom("Neutopia (U)", Region.NA),
    "08ae173878d8a3783fa35e80c99a5dc4": KnownRom("Neutopia (J)", Region.JP),
}


@dataclass(frozen=True)
class RomInfo:
    headered: bool
    md5_hash: str
    known: bool
    desc: str
    region: Region


def strip_header(data: bytes) -> bytes:
    """Return the image without its copier header, if it has one.

    Raises:
        InvalidRomSize: data is neither the headered nor unheadered size.
    """
    if len(data) == ROM_SIZE:
        return bytes(data)
    if len(data) == ROM_SIZE + HEADER_SIZE:
        return bytes(data[HEADER_SIZE:])
    raise InvalidRomSize(
        f"Rom size ({len(data)}) is neither the expected size of the "
        f"headered ({ROM_SIZE + HEADER_SIZE}) nor the un-headered ({ROM_SIZE}) rom")


def verify(data: bytes) -> RomInfo:
    """Identify a ROM image.

    Unknown images are reported with known=False rather than raising; deciding
    whether to accept them is up to the caller.
    """
    image = strip_header(data)
    md5_hash = hashlib.md5(image).hexdigest()
    entry = KNOWN_ROMS.get(md5_hash, UNRECOGNIZED_ROM)
    return RomInfo(
        headered=len(data) != len(image),
        md5_hash=md5_hash,
        known=md5_hash in KNOWN_ROMS,
        desc=entry.desc,
        region=entry.region,
    )
