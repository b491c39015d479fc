"""IPS patches.

IPS (International Patching System) format:
- Header: "PATCH" (5 bytes)
- Records: Each record contains:
  - Offset (3 bytes, big-endian)
  - Size (2 bytes, big-endian)
  - Data (size bytes)
  - Special case: If size is 0, it's an RLE record with count (2 bytes) and value (1 byte)
- Footer: "EOF" (3 bytes)
"""

from typing import List, Tuple, Union
import logging

from rom.errors import InvalidPatch

IPS_HEADER = b'PATCH'
IPS_FOOTER = b'EOF'


class Patch:
  """An ordered list of (address, data) hunks applied on top of a ROM."""

  def __init__(self, name: str = "") -> None:
    self.name = name
    self._hunks: List[Tuple[int, bytes]] = []

  def __add__(self, other):
    """Return a new Patch applying this patch, then other."""
    if not isinstance(other, Patch):
      raise TypeError("Other object is not Patch type")

    patch = Patch(self.name)
    patch += self
    patch += other
    return patch

  def __iadd__(self, other):
    """Append another patch's hunks to this patch in place."""
    if not isinstance(other, Patch):
      raise TypeError("Other object is not Patch type")

    for addr, data in other.hunks:
      self.AddData(addr, data)
    return self

  def __len__(self) -> int:
    return len(self._hunks)

  @property
  def hunks(self) -> List[Tuple[int, bytes]]:
    """List of (address, data) hunks in application order."""
    return list(self._hunks)

  def GetAddresses(self) -> List[int]:
    """Returns a List of all hunk addresses, in application order."""
    return [addr for addr, _ in self._hunks]

  def AddData(self, addr: int, data: Union[bytes, List[int]]) -> None:
    """Add a hunk to the end of the patch.
        :param addr: Address for the start of the data.
        :type addr: int
        :param data: Patch data as raw bytes.
        :type data: bytearray|bytes|list[int]
        """
    if addr < 0:
      raise InvalidPatch(f"negative patch address {addr}")
    self._hunks.append((addr, bytes(data)))

  def Apply(self, rom_data: bytearray, logger=None) -> None:
    """Apply this patch to ROM data in place, hunk by hunk.

    :param rom_data: The ROM data to patch (modified in-place)
    :type rom_data: bytearray
    :param logger: Optional logger (defaults to logging module)
    :type logger: logging.Logger|None
    :raises InvalidPatch: if a hunk writes past the end of rom_data
    """
    log = logger or logging

    for addr, data in self._hunks:
      end = addr + len(data)
      if end > len(rom_data):
        raise InvalidPatch(
            f"{self.name or 'patch'}: hunk 0x{addr:06x}-0x{end:06x} is past the end "
            f"of the {len(rom_data)} byte ROM", offset=addr)
      rom_data[addr:end] = data
    log.debug(f"Applied {self.name or 'patch'}: {len(self._hunks)} hunks")

  def AddFromIPS(self, data: bytes) -> None:
    """Add patch data from the contents of an IPS file.

    :param data: IPS file contents
    :type data: bytes
    :raises InvalidPatch: if the data is not a well formed IPS file
    """
    if data[:len(IPS_HEADER)] != IPS_HEADER:
      raise InvalidPatch(f"Invalid IPS data {self.name} (missing PATCH header)")

    pos = len(IPS_HEADER)

    def read(count: int) -> bytes:
      nonlocal pos
      chunk = data[pos:pos + count]
      if len(chunk) < count:
        raise InvalidPatch(f"Truncated IPS data {self.name}", offset=pos)
      pos += count
      return chunk

    while True:
      offset_bytes = read(3)
      if offset_bytes == IPS_FOOTER:
        break

      offset = int.from_bytes(offset_bytes, 'big')
      size = int.from_bytes(read(2), 'big')

      if size == 0:
        # RLE record: count and value
        count = int.from_bytes(read(2), 'big')
        value = read(1)
        self.AddData(offset, value * count)
      else:
        self.AddData(offset, read(size))

  @classmethod
  def FromIPS(cls, data: bytes, name: str = "") -> 'Patch':
    patch = cls(name)
    patch.AddFromIPS(data)
    return patch
