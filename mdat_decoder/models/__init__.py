from .records import (
    EVENT_COLUMNS,
    BufferHeader,
    DecodeSummary,
    EventFrame,
    EventRecord,
    Termination,
    flat_record,
)

__all__ = [
    "EVENT_COLUMNS",
    "BufferHeader",
    "DecodeSummary",
    "EventFrame",
    "EventRecord",
    "Termination",
    "flat_record",
]
