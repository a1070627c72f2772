from __future__ import annotations

import logging
from enum import Flag
from typing import Optional, Sequence

from mdat_decoder.models.records import BufferHeader, EventRecord


class Verbosity(Flag):
    """
    Which decoded units are reported by LoggingObserver.

    The legacy converter took an integer debug mask (1 buffers, 2 events,
    4 padding, 7 all); from_debug_mask() accepts that form.
    """
    NONE = 0
    BUFFERS = 1
    EVENTS = 2
    PADDING = 4
    ALL = BUFFERS | EVENTS | PADDING

    @classmethod
    def from_debug_mask(cls, mask: int) -> "Verbosity":
        mask = int(mask)
        if mask < 0 or mask & ~cls.ALL.value:
            raise ValueError(f"debug mask must be within 0..{cls.ALL.value}, got {mask}")
        return cls(mask)

    @classmethod
    def from_names(cls, names: str | Sequence[str]) -> "Verbosity":
        if isinstance(names, str):
            names = [n for n in names.replace(" ", "").split(",") if n]
        out = cls.NONE
        for n in names:
            try:
                out |= cls[n.upper()]
            except KeyError:
                valid = ", ".join(m.name.lower() for m in (cls.BUFFERS, cls.EVENTS, cls.PADDING, cls.ALL))
                raise ValueError(f"unknown verbosity flag '{n}' (valid: {valid})") from None
        return out


class DecodeObserver:
    """Hooks called by the buffer driver for each decoded unit. Default: no-op."""

    def on_buffer(self, header: BufferHeader) -> None:
        pass

    def on_event(self, header: BufferHeader, event: EventRecord) -> None:
        pass

    def on_padding(self, header: BufferHeader, words: Sequence[int]) -> None:
        pass


_RULE = "-" * 52


def format_buffer(header: BufferHeader) -> str:
    lines = [
        _RULE,
        f"Buffer number: {header.buffer_number}",
        f"Buffer length: {header.buffer_length}",
        f"Expected number of entries: {header.expected_events}",
        f"Header length: {header.header_length}",
        f"Run ID: {header.run_id}",
        f"MCPD ID: {header.device_id}",
        f"Status: {header.status}",
        f"Header timestamp: {header.header_timestamp}",
        f"Parameter 0: {header.param0}",
        f"Parameter 1: {header.param1}",
        f"Parameter 2: {header.param2}",
        f"Parameter 3: {header.param3}",
        _RULE,
    ]
    return "\n".join(lines)


def format_event(event: EventRecord) -> str:
    lines = [
        _RULE,
        f"EventID: {event.event_kind}",
        f"xpos: {event.x_pos}",
        f"ypos: {event.y_pos}",
        f"amp: {event.amplitude}",
        f"time stamp: {event.buffer_relative_time}",
        f"absolute time: {event.absolute_time}",
        _RULE,
    ]
    return "\n".join(lines)


def format_padding(words: Sequence[int]) -> str:
    return "--- Buffer padding ---\n" + "\n".join(f"{w:x}" for w in words)


class LoggingObserver(DecodeObserver):
    """
    Logs buffer, event and padding summaries selected by ``verbosity`` at DEBUG
    level, and a progress line at INFO every ``progress_every`` events.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NONE,
        logger: Optional[logging.Logger] = None,
        progress_every: int = 10_000,
    ):
        self.verbosity = verbosity
        self.logger = logger or logging.getLogger("mdat_decoder")
        self.progress_every = int(progress_every)
        self.n_events = 0

    def on_buffer(self, header: BufferHeader) -> None:
        if self.verbosity & Verbosity.BUFFERS:
            self.logger.debug(format_buffer(header))

    def on_event(self, header: BufferHeader, event: EventRecord) -> None:
        self.n_events += 1
        if self.verbosity & Verbosity.EVENTS:
            self.logger.debug(format_event(event))
        if self.progress_every > 0 and self.n_events % self.progress_every == 0:
            self.logger.info("Processing entry number: %d", self.n_events)

    def on_padding(self, header: BufferHeader, words: Sequence[int]) -> None:
        if self.verbosity & Verbosity.PADDING:
            self.logger.debug(format_padding(words))
