"""
Streaming gzip transform over a byte sink.

    raw sink  ◄── GzipSink.write(data)
                  │
                  ├── flush(): zlib Z_SYNC_FLUSH, then raw.flush()
                  │            everything written so far reaches the client
                  │            as a decodable prefix of the stream
                  │
                  └── close(): gzip trailer (CRC32 + size), then raw.close()

The gzip member header is written to the raw sink as soon as the GzipSink
is constructed.
"""

import gzip
import logging
from typing import BinaryIO


logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 6


class GzipSink:
    """
    Gzip-compressing sink that owns the sink it wraps.

    Usage:
        with GzipSink(response.output) as sink:
            sink.write(b"hello")
            sink.flush()          # client can already decode "hello"
            sink.write(b" world")
        # trailer written, response.output closed
    """

    def __init__(self, raw: BinaryIO, level: int = DEFAULT_LEVEL):
        if not 0 <= level <= 9:
            raise ValueError(f"gzip level must be 0-9, got {level}")
        self._raw = raw
        self.level = level
        self._gzip = gzip.GzipFile(fileobj=raw, mode="wb", compresslevel=level)
        self.closed = False

    @property
    def raw(self) -> BinaryIO:
        return self._raw

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed gzip sink")
        return self._gzip.write(data)

    def flush(self) -> None:
        if self.closed:
            return
        # GzipFile.flush() defaults to Z_SYNC_FLUSH and flushes the raw sink
        self._gzip.flush()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._gzip.close()
        finally:
            self.closed = True
            self._raw.close()
        logger.debug("Closed gzip sink")

    def __enter__(self) -> "GzipSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
