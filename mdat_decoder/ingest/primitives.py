"""
Fixed-width unsigned reads from an .mdat byte stream.

The stream is big-endian at 16-bit word granularity. Multi-word values
("entries") are 48 bits wide and stored low word first.
"""
from __future__ import annotations

from typing import BinaryIO

from mdat_decoder.ingest.errors import TruncatedStream


WORD_BYTES = 2
ENTRY_BYTES = 3 * WORD_BYTES


def swap16(word: int) -> int:
    """Reverse the byte order of a 16-bit word."""
    return ((word & 0xFF) << 8) | ((word >> 8) & 0xFF)


def compose_entry(low: int, mid: int, high: int) -> int:
    return int(low) | (int(mid) << 16) | (int(high) << 32)


class PrimitiveReader:
    """
    Cursor over a binary stream (anything with read(n)).

    Every read consumes exactly the requested width or raises TruncatedStream;
    there are no retries and no partial values.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._offset = 0
        self._peeked = b""

    @property
    def offset(self) -> int:
        """Bytes consumed so far."""
        return self._offset

    def _read_exact(self, n: int) -> bytes:
        data = self._peeked[:n]
        self._peeked = self._peeked[n:]
        while len(data) < n:
            chunk = self._stream.read(n - len(data))
            if not chunk:
                break
            data += chunk
        if len(data) < n:
            raise TruncatedStream(self._offset, n, len(data))
        self._offset += n
        return data

    def at_eof(self) -> bool:
        """True if no byte remains. Does not advance the cursor."""
        if self._peeked:
            return False
        self._peeked = self._stream.read(1)
        return not self._peeked

    def skip(self, n: int) -> None:
        self._read_exact(int(n))

    def read_byte(self) -> int:
        return self._read_exact(1)[0]

    def read_word(self) -> int:
        # Wire order is big-endian: first byte is the high byte.
        first, second = self._read_exact(WORD_BYTES)
        return swap16(first | (second << 8))

    def read_entry(self) -> int:
        low = self.read_word()
        mid = self.read_word()
        high = self.read_word()
        return compose_entry(low, mid, high)
