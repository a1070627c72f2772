import io
import unittest

from mdat_decoder.ingest.buffer_header import END_OF_STREAM, decode_buffer_header
from mdat_decoder.ingest.errors import TruncatedStream
from mdat_decoder.ingest.primitives import PrimitiveReader
from mdat_decoder.models.records import BufferHeader

from mdat_synth import end_marker, header


class TestBufferHeader(unittest.TestCase):
    def test_decodes_all_fields(self):
        raw = header(
            4,
            header_length=21,
            buffer_number=9,
            run_id=42,
            device_id=2,
            status=0x81,
            ts=0xABCD_1234_5678,
            params=(1, 2, (1 << 48) - 1, 0x1_0000),
        )
        self.assertEqual(len(raw), 42)  # 21 words
        r = PrimitiveReader(io.BytesIO(raw))
        h = decode_buffer_header(r)
        self.assertIsInstance(h, BufferHeader)
        self.assertEqual(h.buffer_length, 33)
        self.assertEqual(h.buffer_type, 0x0002)
        self.assertEqual(h.header_length, 21)
        self.assertEqual(h.buffer_number, 9)
        self.assertEqual(h.run_id, 42)
        self.assertEqual(h.device_id, 2)
        self.assertEqual(h.status, 0x81)
        self.assertEqual(h.header_timestamp, 0xABCD_1234_5678)
        self.assertEqual((h.param0, h.param1, h.param2, h.param3), (1, 2, (1 << 48) - 1, 0x1_0000))
        self.assertEqual(h.expected_events, 4)
        self.assertEqual(r.offset, 42)

    def test_wrong_type_stops_after_tag(self):
        r = PrimitiveReader(io.BytesIO(end_marker() + b"\xff" * 40))
        self.assertIs(decode_buffer_header(r), END_OF_STREAM)
        self.assertEqual(r.offset, 4)

    def test_sentinel_is_falsy_singleton(self):
        self.assertFalse(END_OF_STREAM)
        self.assertEqual(repr(END_OF_STREAM), "END_OF_STREAM")
        self.assertIs(type(END_OF_STREAM)(), END_OF_STREAM)

    def test_truncated_header(self):
        raw = header(0)[:20]
        with self.assertRaises(TruncatedStream):
            decode_buffer_header(PrimitiveReader(io.BytesIO(raw)))

    def test_expected_events_truncates(self):
        h = decode_buffer_header(PrimitiveReader(io.BytesIO(header(buffer_length=26))))
        self.assertEqual(h.expected_events, 1)
        h = decode_buffer_header(PrimitiveReader(io.BytesIO(header(buffer_length=20))))
        # (20 - 21) / 3 truncates to 0 toward zero
        self.assertEqual(h.expected_events, 0)
        h = decode_buffer_header(PrimitiveReader(io.BytesIO(header(buffer_length=15))))
        self.assertEqual(h.expected_events, -2)


if __name__ == "__main__":
    unittest.main()
