from __future__ import annotations

from typing import Optional

from mdat_decoder.models.records import BufferHeader


class MdatDecodeError(ValueError):
    """Base class for fatal decode errors."""


class TruncatedStream(MdatDecodeError):
    """Fewer bytes remained than a primitive read requires."""

    def __init__(self, offset: int, requested: int, available: int):
        self.offset = int(offset)
        self.requested = int(requested)
        self.available = int(available)
        super().__init__(
            f"truncated stream at byte {self.offset}: needed {self.requested} bytes, got {self.available}"
        )


class MalformedEventCount(MdatDecodeError):
    """A buffer_length shorter than the buffer header itself."""

    def __init__(self, header: BufferHeader, offset: Optional[int] = None):
        self.header = header
        self.offset = offset
        where = f" (header ends at byte {offset})" if offset is not None else ""
        super().__init__(
            f"buffer {header.buffer_number}: buffer_length={header.buffer_length} "
            f"is shorter than the 21-word header{where}"
        )
