"""Growable output buffer with a write cursor.

Writing level data is a seek/write/backpatch dance: a room descriptor is
reserved, the tables it points at are written after it, then the cursor
returns to fill in the pointers. RomWriter owns the buffer and the cursor so
exactly one writer builds an image.
"""

from .pointer import encode_pointer


class RomWriter:
    """Cursor over a bytearray that grows when written past its end."""

    def __init__(self, data: bytes) -> None:
        self._buffer = bytearray(data)
        self._pos = 0

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"can't seek to negative offset {offset}")
        self._pos = offset

    def skip(self, count: int) -> int:
        """Advance the cursor past count bytes and return where they start."""
        start = self._pos
        self._pos += count
        return start

    def write(self, data: bytes) -> None:
        end = self._pos + len(data)
        if end > len(self._buffer):
            self._buffer.extend(bytes(end - len(self._buffer)))
        self._buffer[self._pos:end] = data
        self._pos = end

    def write_pointer(self, target: int) -> None:
        self.write(encode_pointer(target))

    def backpatch(self, offset: int, data: bytes) -> None:
        """Write data at offset, leaving the cursor where it was."""
        pos = self._pos
        self.seek(offset)
        self.write(data)
        self._pos = pos

    def backpatch_pointer(self, offset: int, target: int) -> None:
        self.backpatch(offset, encode_pointer(target))

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)
