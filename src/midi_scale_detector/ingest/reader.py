"""Cursor-based big-endian reader over an in-memory byte buffer."""

from __future__ import annotations

# SMF variable-length quantities are at most four bytes (0x0FFFFFFF)
MAX_VARIABLE_LENGTH_BYTES = 4


class MidiFormatError(ValueError):
    """Raised when bytes are not a well-formed Standard MIDI File."""


class ByteReader:
    """Sequential reader with an explicit cursor.

    All multi-byte integers are big-endian, as in the SMF chunk format.
    Reading past the end of the buffer raises MidiFormatError.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        """Initialize the reader.

        Args:
            data: Buffer to read from.
            offset: Initial cursor position.
        """
        self._data = bytes(data)
        self.offset = offset

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return max(0, len(self._data) - self.offset)

    @property
    def at_end(self) -> bool:
        """Whether the cursor has reached the end of the buffer."""
        return self.offset >= len(self._data)

    def _require(self, count: int) -> None:
        if self.offset + count > len(self._data):
            raise MidiFormatError(
                f"Unexpected end of data: need {count} byte(s) at offset "
                f"{self.offset}, buffer is {len(self._data)} bytes"
            )

    def read_u8(self) -> int:
        """Read one unsigned byte."""
        self._require(1)
        value = self._data[self.offset]
        self.offset += 1
        return value

    def read_u16(self) -> int:
        """Read a big-endian 16-bit unsigned integer."""
        self._require(2)
        value = int.from_bytes(self._data[self.offset : self.offset + 2], "big")
        self.offset += 2
        return value

    def read_u32(self) -> int:
        """Read a big-endian 32-bit unsigned integer."""
        self._require(4)
        value = int.from_bytes(self._data[self.offset : self.offset + 4], "big")
        self.offset += 4
        return value

    def read_bytes(self, count: int) -> bytes:
        """Read ``count`` raw bytes."""
        self._require(count)
        value = self._data[self.offset : self.offset + count]
        self.offset += count
        return value

    def read_variable_length(self) -> int:
        """Read a variable-length quantity.

        Seven bits per byte, most significant group first; a set high bit
        means another byte follows.
        """
        value = 0
        for _ in range(MAX_VARIABLE_LENGTH_BYTES):
            byte = self.read_u8()
            value = (value << 7) | (byte & 0x7F)
            if not byte & 0x80:
                return value
        raise MidiFormatError(
            f"Variable-length quantity longer than {MAX_VARIABLE_LENGTH_BYTES} bytes "
            f"at offset {self.offset - MAX_VARIABLE_LENGTH_BYTES}"
        )

    def skip(self, count: int) -> None:
        """Advance the cursor by ``count`` bytes."""
        self._require(count)
        self.offset += count

    def rewind(self, count: int = 1) -> None:
        """Move the cursor back by ``count`` bytes."""
        if count > self.offset:
            raise ValueError(f"Cannot rewind {count} byte(s) from offset {self.offset}")
        self.offset -= count

    def expect(self, marker: bytes) -> None:
        """Consume ``marker`` or raise MidiFormatError.

        Args:
            marker: Exact bytes expected at the cursor (e.g. b"MThd").
        """
        start = self.offset
        found = self._data[start : start + len(marker)]
        if found != marker:
            raise MidiFormatError(
                f"Missing {marker.decode('latin-1')} marker at offset {start}"
            )
        self.offset += len(marker)
