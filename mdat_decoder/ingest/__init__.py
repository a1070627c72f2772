"""Ingest package - .mdat stream decoding.

This package handles:
- Primitive reads of bytes, big-endian words and 48-bit entries
- Buffer header decoding with the buffer-type sentinel
- Unpacking of 48-bit event words via a single bit-field table
- Driving buffer after buffer until the end of the stream
- Reading whole .mdat files into an EventFrame

Key classes:
- PrimitiveReader: byte-order normalizing cursor over a binary stream
- BufferDriver: per-buffer loop, hands events to a sink
- MdatReader: file-level reader producing a typed pandas DataFrame

Design principle:
- Headers and events are immutable values, one per decode step
- The decoder never prints; diagnostics go through a DecodeObserver
"""
from .buffer_driver import BufferDriver, DecoderConfig, decode_stream
from .buffer_header import DATA_BUFFER_TYPE, END_OF_STREAM, decode_buffer_header
from .diagnostics import DecodeObserver, LoggingObserver, Verbosity
from .errors import MalformedEventCount, MdatDecodeError, TruncatedStream
from .event_word import EVENT_FIELDS, BitField, decode_event, decode_event_word, extract_field, unpack_event_words
from .primitives import PrimitiveReader
from .readers_mdat import ColumnarSink, MdatReader, MdatReaderConfig

__all__ = [
    "BitField",
    "BufferDriver",
    "ColumnarSink",
    "DATA_BUFFER_TYPE",
    "DecodeObserver",
    "DecoderConfig",
    "END_OF_STREAM",
    "EVENT_FIELDS",
    "LoggingObserver",
    "MalformedEventCount",
    "MdatDecodeError",
    "MdatReader",
    "MdatReaderConfig",
    "PrimitiveReader",
    "TruncatedStream",
    "Verbosity",
    "decode_buffer_header",
    "decode_event",
    "decode_event_word",
    "decode_stream",
    "extract_field",
    "unpack_event_words",
]
