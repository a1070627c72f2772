"""mdat_decoder -- decoding of detector list-mode (.mdat) acquisition files.

An .mdat file is a 58-byte preamble followed by framed buffers. Each buffer
carries a header (length, type tag, MCPD id, 48-bit timestamp, parameters),
a run of packed 48-bit event words and four padding words.

This package provides tools for:
- Decoding the byte stream buffer by buffer into immutable header/event values
- Reconstructing absolute event times from buffer timestamps
- Collecting events into typed pandas DataFrames
- Exporting event tables to CSV or Parquet

Main subpackages:
- ingest: primitive reads, header/event decoders, buffer driver, file reader
- models: BufferHeader, EventRecord, EventFrame
- scripts: mdat-convert command line tool
"""

__all__ = []
