"""
Built-in serializers.

Mirrors how the response helpers pick a body format:

    bytes / bytearray / memoryview  → written as-is
    readable binary file object     → copied in chunks
    dict / list                     → JSON, UTF-8
    anything else                   → str(value), UTF-8  (catch-all)
"""

import io
import json
import shutil
from typing import Any, BinaryIO

from .base import CATCH_ALL, FIRST, NORMAL, Serializer


class BytesSerializer(Serializer):
    """Writes raw byte buffers unchanged."""

    priority = FIRST

    def handles(self, value: Any) -> bool:
        return isinstance(value, (bytes, bytearray, memoryview))

    def write(self, sink: BinaryIO, value: Any) -> None:
        sink.write(value)


class StreamSerializer(Serializer):
    """
    Copies a readable binary stream to the sink.

    The stream is read to exhaustion but not closed; whoever opened it
    closes it.
    """

    priority = FIRST + 10

    def __init__(self, chunk_size: int = 64 * 1024):
        self.chunk_size = chunk_size

    def handles(self, value: Any) -> bool:
        if not isinstance(value, io.IOBase) or isinstance(value, io.TextIOBase):
            return False
        return not value.closed and value.readable()

    def write(self, sink: BinaryIO, value: Any) -> None:
        shutil.copyfileobj(value, sink, self.chunk_size)


class JsonSerializer(Serializer):
    """Writes dicts and lists as UTF-8 JSON."""

    priority = NORMAL

    def __init__(self, pretty: bool = False):
        self.indent = 2 if pretty else None

    def handles(self, value: Any) -> bool:
        return isinstance(value, (dict, list))

    def write(self, sink: BinaryIO, value: Any) -> None:
        # Non-ASCII text is written literally, not as escapes
        sink.write(json.dumps(value, indent=self.indent, ensure_ascii=False).encode("utf-8"))


class DefaultSerializer(Serializer):
    """
    Catch-all: writes ``str(value)`` encoded as UTF-8.

    handles() is True for every value, so this serializer shadows anything
    consulted after it. SerializerRegistry always consults it last.
    """

    priority = CATCH_ALL

    def handles(self, value: Any) -> bool:
        return True

    def write(self, sink: BinaryIO, value: Any) -> None:
        sink.write(str(value).encode("utf-8"))
