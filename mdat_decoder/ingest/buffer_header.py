from __future__ import annotations

from typing import Union

from mdat_decoder.ingest.primitives import PrimitiveReader
from mdat_decoder.models.records import BufferHeader


DATA_BUFFER_TYPE = 0x0002


class _EndOfStream:
    """Sentinel returned when a buffer's type tag is not a data buffer."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END_OF_STREAM"

    def __bool__(self) -> bool:
        return False


END_OF_STREAM = _EndOfStream()


def decode_buffer_header(
    reader: PrimitiveReader,
    *,
    buffer_type: int = DATA_BUFFER_TYPE,
) -> Union[BufferHeader, _EndOfStream]:
    """
    Decode one buffer header.

    Reads buffer_length and the type tag first. If the tag is not ``buffer_type``
    nothing more is consumed and END_OF_STREAM is returned. The tag is the only
    field validated.
    """
    buffer_length = reader.read_word()
    tag = reader.read_word()
    if tag != buffer_type:
        return END_OF_STREAM

    header_length = reader.read_word()
    buffer_number = reader.read_word()
    run_id = reader.read_word()
    device_id = reader.read_byte()
    status = reader.read_byte()
    header_timestamp = reader.read_entry()
    param0 = reader.read_entry()
    param1 = reader.read_entry()
    param2 = reader.read_entry()
    param3 = reader.read_entry()

    return BufferHeader(
        buffer_length=buffer_length,
        buffer_type=tag,
        header_length=header_length,
        buffer_number=buffer_number,
        run_id=run_id,
        device_id=device_id,
        status=status,
        header_timestamp=header_timestamp,
        param0=param0,
        param1=param1,
        param2=param2,
        param3=param3,
    )
