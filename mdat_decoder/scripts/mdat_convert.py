"""
Convert an .mdat list-mode file into a columnar event table.

Each decoded event becomes one row with the columns:
  x_pos, y_pos, amplitude, absolute_time, event_kind, buffer_relative_time,
  device_id, status, param0, param1, param2, param3

Examples
--------
Command line:
$ python -m mdat_decoder.scripts.mdat_convert run042.mdat --format parquet --debug 1

From Python:
>>> from mdat_decoder.scripts.mdat_convert import convert
>>> # frame, out_path = convert("run042.mdat")
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Literal, Optional, Sequence, Tuple

import pandas as pd

from mdat_decoder.ingest.buffer_driver import DecoderConfig
from mdat_decoder.ingest.diagnostics import LoggingObserver, Verbosity
from mdat_decoder.ingest.errors import MdatDecodeError
from mdat_decoder.ingest.readers_mdat import MdatReader, MdatReaderConfig
from mdat_decoder.models.records import EventFrame


logger = logging.getLogger("mdat_decoder")

ExportFormat = Literal["csv", "parquet"]


def default_output_path(input_path: str | Path, fmt: ExportFormat) -> Path:
    """
    Output path next to the input: '.mdat' is replaced by the format suffix.

    Examples
    --------
    >>> default_output_path("data/run042.mdat", "parquet").name
    'run042.parquet'
    """
    p = Path(input_path)
    if p.suffix.lower() == ".mdat":
        return p.with_suffix(f".{fmt}")
    return p.with_name(f"{p.name}.{fmt}")


def export_dataframe(df: pd.DataFrame, path: str | Path, fmt: ExportFormat) -> None:
    """
    Export a DataFrame to CSV or Parquet.

    Parquet requires `pyarrow`.

    Examples
    --------
    >>> # export_dataframe(frame.df, "processed_data/run042.parquet", "parquet")
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        df.to_csv(out, index=False)
        return

    if fmt == "parquet":
        try:
            df.to_parquet(out, index=False, engine="pyarrow")
        except ImportError as e:
            raise RuntimeError(f"Parquet export requires 'pyarrow'. Original error: {e}") from e
        return

    raise ValueError(f"Unknown export format: {fmt}")


def convert(
    input_path: str | Path,
    output_path: Optional[str | Path] = None,
    *,
    fmt: ExportFormat = "parquet",
    verbosity: Verbosity = Verbosity.NONE,
    config: Optional[MdatReaderConfig] = None,
) -> Tuple[EventFrame, Path]:
    """Decode ``input_path`` and write its event table. Returns (frame, output path)."""
    out = Path(output_path) if output_path is not None else default_output_path(input_path, fmt)
    reader = MdatReader(config, observer=LoggingObserver(verbosity, logger=logger))
    frame = reader.read(input_path)
    for w in frame.warnings:
        logger.warning(w)
    export_dataframe(frame.df, out, fmt)
    return frame, out


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="mdat-convert",
        description="Decode an .mdat detector list-mode file into a CSV or Parquet event table.",
    )
    ap.add_argument("input", help="input .mdat file")
    ap.add_argument("-o", "--output", default=None, help="output file (default: input with .mdat replaced)")
    ap.add_argument("--format", dest="fmt", choices=("parquet", "csv"), default="parquet")
    ap.add_argument(
        "--debug",
        type=int,
        default=0,
        help="legacy debug mask: 1 buffers, 2 events, 4 padding, 7 all",
    )
    ap.add_argument(
        "--verbose",
        default="",
        help="comma separated diagnostics to log: buffers, events, padding, all",
    )
    ap.add_argument(
        "--underflow",
        choices=("error", "zero"),
        default="error",
        help="buffers with length < 21: fail, or decode as zero events",
    )
    ap.add_argument(
        "--allow-truncated",
        action="store_true",
        help="keep the events decoded before a truncated end of file",
    )
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    try:
        verbosity = Verbosity.from_debug_mask(args.debug) | Verbosity.from_names(args.verbose)
    except ValueError as e:
        ap.error(str(e))

    logging.basicConfig(
        level=logging.DEBUG if verbosity else logging.INFO,
        format="%(message)s",
    )

    cfg = MdatReaderConfig(
        allow_truncated=args.allow_truncated,
        decoder=DecoderConfig(underflow_policy=args.underflow),
    )

    try:
        frame, out = convert(args.input, args.output, fmt=args.fmt, verbosity=verbosity, config=cfg)
    except (MdatDecodeError, FileNotFoundError) as e:
        logger.error("Decoding %s failed: %s", args.input, e)
        return 1

    lines: List[str] = [
        "-" * 57,
        f"A total of {frame.n_events} events were read from {frame.n_buffers} buffers",
        "-" * 57,
    ]
    for line in lines:
        logger.info(line)
    logger.info("Wrote %s (%s)", out, frame.termination.value)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
