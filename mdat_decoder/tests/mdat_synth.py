"""Builders for synthetic .mdat byte streams used by the tests."""
from __future__ import annotations

import struct
from typing import Iterable, Sequence


PREAMBLE = bytes(range(58))


def word(w: int) -> bytes:
    return struct.pack(">H", w)


def entry(v: int) -> bytes:
    return word(v & 0xFFFF) + word((v >> 16) & 0xFFFF) + word((v >> 32) & 0xFFFF)


def pack_event(x: int = 0, y: int = 0, amp: int = 0, t: int = 0, kind: int = 0) -> int:
    return (kind << 47) | (amp << 39) | (y << 29) | (x << 19) | t


def header(
    n_events: int = 0,
    *,
    buffer_length: int | None = None,
    buffer_type: int = 0x0002,
    header_length: int = 21,
    buffer_number: int = 0,
    run_id: int = 1,
    device_id: int = 1,
    status: int = 0,
    ts: int = 0,
    params: Sequence[int] = (0, 0, 0, 0),
) -> bytes:
    if buffer_length is None:
        buffer_length = 21 + 3 * n_events
    return (
        word(buffer_length)
        + word(buffer_type)
        + word(header_length)
        + word(buffer_number)
        + word(run_id)
        + bytes([device_id, status])
        + entry(ts)
        + b"".join(entry(p) for p in params)
    )


def buffer(events: Iterable[int], *, padding: Sequence[int] = (0, 0xFFFF, 0, 0xFFFF), **kw) -> bytes:
    events = list(events)
    return header(len(events), **kw) + b"".join(entry(e) for e in events) + b"".join(word(p) for p in padding)


def end_marker() -> bytes:
    """A header whose type tag is not a data buffer."""
    return word(21) + word(0x0003)
