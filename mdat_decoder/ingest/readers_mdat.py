from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from mdat_decoder.ingest.buffer_driver import BufferDriver, DecoderConfig
from mdat_decoder.ingest.diagnostics import DecodeObserver
from mdat_decoder.ingest.errors import TruncatedStream
from mdat_decoder.ingest.primitives import PrimitiveReader
from mdat_decoder.models.records import (
    EVENT_COLUMNS,
    BufferHeader,
    EventFrame,
    EventRecord,
    Termination,
    flat_record,
)


@dataclass(frozen=True)
class MdatReaderConfig:
    """
    Reader configuration for .mdat list-mode files.

    allow_truncated:
      - False: a short read anywhere raises TruncatedStream (default).
      - True: stop at the short read and return the events decoded so far,
              with termination=TRUNCATED and a warning. A file shorter than the
              preamble always raises.
    decoder:
      Buffer driver settings (event-count underflow policy, format constants).
    """
    allow_truncated: bool = False
    decoder: DecoderConfig = field(default_factory=DecoderConfig)


class ColumnarSink:
    """
    Event sink that appends flat records column by column.

    to_frame() returns a DataFrame with the EVENT_COLUMNS dtypes, one row per
    event in arrival order.
    """

    def __init__(self):
        self._cols: Dict[str, List[int]] = {name: [] for name in EVENT_COLUMNS}

    def __call__(self, header: BufferHeader, event: EventRecord) -> None:
        for k, v in flat_record(header, event).items():
            self._cols[k].append(v)

    def __len__(self) -> int:
        return len(self._cols["x_pos"])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {name: np.asarray(self._cols[name], dtype=dtype) for name, dtype in EVENT_COLUMNS.items()}
        )


class MdatReader:
    """
    Reader for detector .mdat files: a fixed preamble followed by framed buffers
    of packed 48-bit event words.

    The file is read strictly forward once; the decoder never seeks.
    """

    def __init__(self, config: Optional[MdatReaderConfig] = None, observer: Optional[DecodeObserver] = None):
        self.config = config or MdatReaderConfig()
        self.observer = observer

    def read(self, file_path: str | Path) -> EventFrame:
        path = Path(file_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(str(path))

        cfg = self.config
        sink = ColumnarSink()
        warnings: List[str] = []

        with path.open("rb") as fh:
            reader = PrimitiveReader(fh)
            reader.skip(cfg.decoder.preamble_bytes)
            driver = BufferDriver(reader, cfg.decoder, self.observer)
            try:
                summary = driver.run(sink)
                termination = summary.termination
            except TruncatedStream as e:
                if not cfg.allow_truncated:
                    raise
                termination = Termination.TRUNCATED
                warnings.append(
                    f"{path.name}: {e}; kept {len(sink)} events from {driver.n_buffers} buffers "
                    "(last buffer may be incomplete)"
                )
            warnings[:0] = driver.warnings

        return EventFrame(
            source_path=path,
            df=sink.to_frame(),
            n_buffers=driver.n_buffers,
            termination=termination,
            warnings=tuple(warnings),
        )
