from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, List, Literal, Optional, Tuple

from mdat_decoder.ingest.buffer_header import DATA_BUFFER_TYPE, END_OF_STREAM, decode_buffer_header
from mdat_decoder.ingest.diagnostics import DecodeObserver
from mdat_decoder.ingest.errors import MalformedEventCount
from mdat_decoder.ingest.event_word import decode_event
from mdat_decoder.ingest.primitives import PrimitiveReader
from mdat_decoder.models.records import HEADER_WORDS, BufferHeader, DecodeSummary, EventRecord, Termination


logger = logging.getLogger(__name__)

UnderflowPolicy = Literal["error", "zero"]
EventSink = Callable[[BufferHeader, EventRecord], None]


@dataclass(frozen=True)
class DecoderConfig:
    """
    Buffer driver configuration.

    underflow_policy:
      What to do with a buffer_length below the 21 header words (no room for events).
      - "error": raise MalformedEventCount (default).
      - "zero": decode no events for that buffer, skip its padding and continue;
                a warning is recorded.
    preamble_bytes:
      Size of the opaque file preamble skipped before the first buffer.
    padding_words:
      Words discarded after the event payload of every buffer.
    buffer_type:
      Type tag of a data buffer; any other tag ends the stream.
    """
    underflow_policy: UnderflowPolicy = "error"
    preamble_bytes: int = 58
    padding_words: int = 4
    buffer_type: int = DATA_BUFFER_TYPE

    def __post_init__(self) -> None:
        if self.underflow_policy not in ("error", "zero"):
            raise ValueError(f"underflow_policy must be 'error' or 'zero', got {self.underflow_policy!r}")
        if self.preamble_bytes < 0 or self.padding_words < 0:
            raise ValueError("preamble_bytes and padding_words must be >= 0")


class BufferDriver:
    """
    Decodes buffers one after the other until the type sentinel or a clean EOF.

    Per buffer: header, (buffer_length - 21) // 3 events, then padding words.
    Counters and the termination reason are available after iteration, and
    as a DecodeSummary from run().
    """

    def __init__(
        self,
        reader: PrimitiveReader,
        config: Optional[DecoderConfig] = None,
        observer: Optional[DecodeObserver] = None,
    ):
        self.reader = reader
        self.config = config or DecoderConfig()
        self.observer = observer or DecodeObserver()
        self.n_buffers = 0
        self.n_events = 0
        self.termination: Optional[Termination] = None
        self.warnings: List[str] = []

    def _event_count(self, header: BufferHeader) -> int:
        if header.buffer_length >= HEADER_WORDS:
            return header.expected_events
        if self.config.underflow_policy == "error":
            raise MalformedEventCount(header, offset=self.reader.offset)
        msg = (
            f"buffer {header.buffer_number}: buffer_length={header.buffer_length} < 21; "
            "decoded as zero events"
        )
        self.warnings.append(msg)
        return 0

    def _read_padding(self, header: BufferHeader) -> None:
        words = tuple(self.reader.read_word() for _ in range(self.config.padding_words))
        self.observer.on_padding(header, words)

    def iter_buffer(self, header: BufferHeader) -> Iterator[EventRecord]:
        """Events of one buffer whose header was just read, followed by its padding."""
        ts = header.header_timestamp
        for _ in range(self._event_count(header)):
            event = decode_event(self.reader, ts)
            self.n_events += 1
            self.observer.on_event(header, event)
            yield event
        self._read_padding(header)

    def iter_events(self) -> Iterator[Tuple[BufferHeader, EventRecord]]:
        while True:
            if self.reader.at_eof():
                self.termination = Termination.END_OF_FILE
                break
            header = decode_buffer_header(self.reader, buffer_type=self.config.buffer_type)
            if header is END_OF_STREAM:
                self.termination = Termination.END_OF_STREAM
                break
            self.n_buffers += 1
            self.observer.on_buffer(header)
            for event in self.iter_buffer(header):
                yield header, event

        logger.debug(
            "decode finished (%s): %d events from %d buffers",
            self.termination.value,
            self.n_events,
            self.n_buffers,
        )

    def summary(self) -> DecodeSummary:
        if self.termination is None:
            raise RuntimeError("decode has not finished")
        return DecodeSummary(
            n_buffers=self.n_buffers,
            n_events=self.n_events,
            termination=self.termination,
            warnings=tuple(self.warnings),
        )

    def run(self, sink: EventSink) -> DecodeSummary:
        """Hand every event to ``sink`` as it is decoded and return the summary."""
        for header, event in self.iter_events():
            sink(header, event)
        return self.summary()


def decode_stream(
    stream: BinaryIO,
    sink: EventSink,
    *,
    config: Optional[DecoderConfig] = None,
    observer: Optional[DecodeObserver] = None,
    skip_preamble: bool = True,
) -> DecodeSummary:
    """
    Decode a whole .mdat byte stream into ``sink``.

    With skip_preamble the fixed file preamble is discarded first. Raises
    TruncatedStream on a short read; events already passed to the sink stay there.
    """
    cfg = config or DecoderConfig()
    reader = PrimitiveReader(stream)
    if skip_preamble:
        reader.skip(cfg.preamble_bytes)
    return BufferDriver(reader, cfg, observer).run(sink)
