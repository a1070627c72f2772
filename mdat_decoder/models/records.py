from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple

import pandas as pd


# Word count of the header fields preceding the event payload, and of one event entry.
HEADER_WORDS = 21
ENTRY_WORDS = 3


@dataclass(frozen=True)
class BufferHeader:
    """
    Header of one framed buffer.

    Attributes
    ----------
    buffer_length:
        Total word count of the buffer (header + events), used to derive the event count.
    buffer_type:
        Type tag; only 0x0002 marks a data buffer.
    header_length, buffer_number, run_id:
        Acquisition metadata, not used for decoding.
    device_id:
        MCPD id (1 for segment 1, 2 for segment 2).
    status:
        Status byte.
    header_timestamp:
        48-bit base time of the buffer, in 12.5 ns clock ticks.
    param0 .. param3:
        Opaque 48-bit parameters, passed through unchanged.
    """
    buffer_length: int
    buffer_type: int
    header_length: int
    buffer_number: int
    run_id: int
    device_id: int
    status: int
    header_timestamp: int
    param0: int
    param1: int
    param2: int
    param3: int

    @property
    def expected_events(self) -> int:
        """
        Event count implied by buffer_length.

        Division truncates toward zero, so a buffer_length below HEADER_WORDS can
        give a negative count; the driver decides what to do with it.
        """
        return int((self.buffer_length - HEADER_WORDS) / ENTRY_WORDS)


@dataclass(frozen=True)
class EventRecord:
    """
    One decoded event word.

    x_pos is the wire number, y_pos the stripe number, amplitude the time over
    threshold in clock cycles. event_kind is 0 for real events and 1 for self
    triggers. absolute_time = buffer_relative_time + header_timestamp of the
    owning buffer (no wraparound).
    """
    x_pos: int
    y_pos: int
    amplitude: int
    event_kind: int
    buffer_relative_time: int
    absolute_time: int

    @property
    def is_self_trigger(self) -> bool:
        return self.event_kind == 1


# Output column order and dtypes of one flat record.
EVENT_COLUMNS: Dict[str, str] = {
    "x_pos": "uint16",
    "y_pos": "uint16",
    "amplitude": "uint16",
    "absolute_time": "uint64",
    "event_kind": "uint8",
    "buffer_relative_time": "uint32",
    "device_id": "uint8",
    "status": "uint8",
    "param0": "uint64",
    "param1": "uint64",
    "param2": "uint64",
    "param3": "uint64",
}


def flat_record(header: BufferHeader, event: EventRecord) -> Dict[str, int]:
    """Merge an event with the header fields carried into every output row."""
    row = asdict(event)
    row.update(
        device_id=header.device_id,
        status=header.status,
        param0=header.param0,
        param1=header.param1,
        param2=header.param2,
        param3=header.param3,
    )
    return {k: row[k] for k in EVENT_COLUMNS}


class Termination(str, Enum):
    """How a decode run ended."""
    END_OF_STREAM = "end_of_stream"  # buffer with an unrecognized type tag
    END_OF_FILE = "end_of_file"      # no bytes left at a buffer boundary
    TRUNCATED = "truncated"          # short read, only when truncation is tolerated


@dataclass(frozen=True)
class DecodeSummary:
    n_buffers: int
    n_events: int
    termination: Termination
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EventFrame:
    """
    In-memory representation of one decoded .mdat file.

    Notes
    - df has one row per event, in stream order, with the EVENT_COLUMNS dtypes.
    - warnings collects non-fatal findings (underflowing buffers, tolerated truncation).
    """
    source_path: Path
    df: pd.DataFrame
    n_buffers: int
    termination: Termination
    warnings: Tuple[str, ...] = ()

    @property
    def n_events(self) -> int:
        return int(len(self.df))
