"""Exception hierarchy for ROM parsing, game model and placement failures.

Errors are grouped by who has to act on them:

    FormatError      - the bytes on disk do not match the expected layout.
    ConsistencyError - internal state (catalog, placement, model) is out of sync.
    PolicyError      - the input is well formed but not one we accept.
"""

from typing import Optional


class NeutopiaError(Exception):
    """Base class for all randomizer errors."""


class FormatError(NeutopiaError):
    """ROM or patch data could not be decoded.

    Carries optional (area, room) or byte offset context so that a failure deep
    inside a room's object table can be traced back to its source.
    """

    def __init__(self, message: str, area: Optional[int] = None,
                 room: Optional[int] = None, offset: Optional[int] = None) -> None:
        self.message = message
        self.area = area
        self.room = room
        self.offset = offset
        super().__init__(message)

    def at(self, area: int, room: Optional[int] = None) -> 'FormatError':
        """Attach area/room context and return self for re-raising."""
        self.area = area
        if room is not None:
            self.room = room
        return self

    def __str__(self) -> str:
        context = []
        if self.area is not None:
            if self.room is not None:
                context.append(f"room {self.area:02x}:{self.room:02x}")
            else:
                context.append(f"area {self.area:02x}")
        if self.offset is not None:
            context.append(f"offset 0x{self.offset:05x}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class InvalidPointer(FormatError):
    """Pointer decodes below the cartridge bank window."""


class UnknownTag(FormatError):
    """Object table entry starts with an unrecognized tag byte."""


class ShortRead(FormatError):
    """Input ended before a fixed-size record was complete."""


class TrailingBytes(FormatError):
    """Table parse left bytes it could not account for."""


class TruncatedRom(FormatError):
    """A pointer or table runs past the end of the image."""


class ShortTable(FormatError):
    """A fixed-count table (e.g. a chest table) has too few records."""


class InvalidPatch(FormatError):
    """IPS data is malformed or writes outside the target buffer."""


class ConsistencyError(NeutopiaError):
    """Caller or catalog state disagrees with the game model."""


class IncoherentChest(ConsistencyError):
    """A chest reference no longer resolves to a chest table slot."""


class DuplicateLocation(ConsistencyError):
    """Two catalog checks share the same location."""


class UnknownLocation(ConsistencyError):
    """Placement targets a location that is not pending."""


class UnknownItem(ConsistencyError):
    """Placement uses an item that is not pending."""


class AreaLockViolation(ConsistencyError):
    """An area locked item was placed outside its area."""


class ModelConsumed(ConsistencyError):
    """The game model has already been written out."""


class PolicyError(NeutopiaError):
    """Input is valid but refused by the randomizer."""


class InvalidRomSize(PolicyError):
    """Image is neither the headered nor the unheadered cartridge size."""


class UnrecognizedRom(PolicyError):
    """Image hash is not in the known ROM table."""


class UnsupportedRegion(PolicyError):
    """Image is a known ROM from a region we do not randomize."""
