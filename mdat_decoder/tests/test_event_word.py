import io

import numpy as np
import pytest

from mdat_decoder.ingest.errors import TruncatedStream
from mdat_decoder.ingest.event_word import (
    EVENT_FIELDS,
    FIELDS_BY_NAME,
    WORD_BITS,
    BitField,
    _check_layout,
    decode_event,
    decode_event_word,
    extract_field,
    unpack_event_words,
)
from mdat_decoder.ingest.primitives import PrimitiveReader

from mdat_synth import entry, pack_event


def test_field_table_matches_layout() -> None:
    assert FIELDS_BY_NAME["event_kind"].mask == 1 << 47
    assert FIELDS_BY_NAME["amplitude"].mask == 0b11111111 << 39
    assert FIELDS_BY_NAME["y_pos"].mask == 0x3FF << 29
    assert FIELDS_BY_NAME["x_pos"].mask == 0x3FF << 19
    assert FIELDS_BY_NAME["buffer_relative_time"].mask == (1 << 19) - 1
    assert sum(f.width for f in EVENT_FIELDS) == WORD_BITS


def test_layout_check_rejects_overlap_and_gaps() -> None:
    with pytest.raises(ValueError):
        _check_layout((BitField("a", 0, 8), BitField("b", 4, 8)), 12)
    with pytest.raises(ValueError):
        _check_layout((BitField("a", 0, 4),), 8)
    with pytest.raises(ValueError):
        _check_layout((BitField("a", 4, 8),), 8)


def test_only_event_kind_bit() -> None:
    ev = decode_event_word(1 << 47, header_timestamp=0)
    assert ev.event_kind == 1
    assert ev.is_self_trigger
    assert (ev.x_pos, ev.y_pos, ev.amplitude, ev.buffer_relative_time, ev.absolute_time) == (0, 0, 0, 0, 0)


def test_known_fields_round_trip() -> None:
    w = pack_event(x=5, y=7, amp=3, t=100)
    ev = decode_event_word(w, header_timestamp=0)
    assert (ev.x_pos, ev.y_pos, ev.amplitude, ev.buffer_relative_time) == (5, 7, 3, 100)
    assert ev.event_kind == 0


def test_all_ones_saturates_each_field() -> None:
    ev = decode_event_word((1 << 48) - 1, header_timestamp=0)
    assert ev.event_kind == 1
    assert ev.amplitude == 0xFF
    assert ev.x_pos == 0x3FF
    assert ev.y_pos == 0x3FF
    assert ev.buffer_relative_time == (1 << 19) - 1


@pytest.mark.parametrize("ts", [0, 1, 12345678, (1 << 48) - 1])
@pytest.mark.parametrize("t", [0, 100, (1 << 19) - 1])
def test_absolute_time_is_plain_sum(ts: int, t: int) -> None:
    ev = decode_event_word(pack_event(t=t), header_timestamp=ts)
    assert ev.absolute_time == ts + t
    assert ev.absolute_time < 1 << 64


def test_decode_event_reads_one_entry() -> None:
    r = PrimitiveReader(io.BytesIO(entry(pack_event(x=1023, y=512, amp=127, t=7)) + b"\x00"))
    ev = decode_event(r, header_timestamp=1000)
    assert (ev.x_pos, ev.y_pos, ev.amplitude, ev.absolute_time) == (1023, 512, 127, 1007)
    assert r.offset == 6


def test_decode_event_truncated_raises() -> None:
    r = PrimitiveReader(io.BytesIO(entry(pack_event(x=1))[:5]))
    with pytest.raises(TruncatedStream):
        decode_event(r, header_timestamp=0)


def test_vectorized_unpack_matches_scalar() -> None:
    rng = np.random.default_rng(0)
    words = rng.integers(0, 1 << 48, size=200, dtype=np.uint64)
    cols = unpack_event_words(words)
    for i in range(0, 200, 17):
        ev = decode_event_word(int(words[i]), header_timestamp=0)
        assert int(cols["x_pos"][i]) == ev.x_pos
        assert int(cols["y_pos"][i]) == ev.y_pos
        assert int(cols["amplitude"][i]) == ev.amplitude
        assert int(cols["event_kind"][i]) == ev.event_kind
        assert int(cols["buffer_relative_time"][i]) == ev.buffer_relative_time


def test_extract_field_int_and_array_agree() -> None:
    f = FIELDS_BY_NAME["y_pos"]
    w = pack_event(y=777)
    assert extract_field(w, f) == 777
    assert int(extract_field(np.array([w], dtype=np.uint64), f)[0]) == 777
