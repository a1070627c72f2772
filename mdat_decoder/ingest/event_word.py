"""
Unpacking of 48-bit event words.

Bit layout, most significant first::

    47      event_kind            1 bit
    46..39  amplitude             8 bit mask, 7 significant bits
    38..29  y_pos                10 bits
    28..19  x_pos                10 bits
    18..0   buffer_relative_time 19 bits

All fields are described once in EVENT_FIELDS and extracted by the same
mask-and-shift routine, for single words and for numpy arrays of words.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple, Union

import numpy as np

from mdat_decoder.ingest.primitives import PrimitiveReader
from mdat_decoder.models.records import EventRecord


WORD_BITS = 48


@dataclass(frozen=True)
class BitField:
    name: str
    shift: int
    width: int

    @property
    def mask(self) -> int:
        return ((1 << self.width) - 1) << self.shift


EVENT_FIELDS: Tuple[BitField, ...] = (
    BitField("event_kind", shift=47, width=1),
    BitField("amplitude", shift=39, width=8),
    BitField("y_pos", shift=29, width=10),
    BitField("x_pos", shift=19, width=10),
    BitField("buffer_relative_time", shift=0, width=19),
)

FIELDS_BY_NAME: Dict[str, BitField] = {f.name: f for f in EVENT_FIELDS}


def _check_layout(fields: Tuple[BitField, ...], word_bits: int) -> None:
    covered = 0
    for f in fields:
        if f.width <= 0 or f.shift < 0 or f.shift + f.width > word_bits:
            raise ValueError(f"bit field {f.name} out of range: shift={f.shift}, width={f.width}")
        if covered & f.mask:
            raise ValueError(f"bit field {f.name} overlaps another field")
        covered |= f.mask
    if covered != (1 << word_bits) - 1:
        raise ValueError(f"bit fields do not cover all {word_bits} bits: {covered:#x}")


_check_layout(EVENT_FIELDS, WORD_BITS)


Word = Union[int, np.ndarray]


def extract_field(word: Word, field: BitField) -> Word:
    """(word & mask) >> shift, for a Python int or a uint64 array."""
    if isinstance(word, np.ndarray):
        return (word & np.uint64(field.mask)) >> np.uint64(field.shift)
    return (int(word) & field.mask) >> field.shift


def decode_event_word(word: int, header_timestamp: int) -> EventRecord:
    values = {f.name: extract_field(word, f) for f in EVENT_FIELDS}
    rel = values["buffer_relative_time"]
    return EventRecord(
        x_pos=values["x_pos"],
        y_pos=values["y_pos"],
        amplitude=values["amplitude"],
        event_kind=values["event_kind"],
        buffer_relative_time=rel,
        absolute_time=rel + int(header_timestamp),
    )


def decode_event(reader: PrimitiveReader, header_timestamp: int) -> EventRecord:
    """Read one entry from the stream and unpack it."""
    return decode_event_word(reader.read_entry(), header_timestamp)


def unpack_event_words(words: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Vectorized unpacking of an array of 48-bit words.

    Returns one uint64 array per field in EVENT_FIELDS.
    """
    w = np.asarray(words, dtype=np.uint64)
    return {f.name: extract_field(w, f) for f in EVENT_FIELDS}
