"""
Serializers: turn response values into bytes.

    from httpcodec.serialization import default_registry

    registry = default_registry()
    registry.write(sink, {"id": 1})     # JSON
    registry.write(sink, "hello")       # str → UTF-8
"""

from .base import Serializer, FIRST, NORMAL, CATCH_ALL
from .serializers import (
    BytesSerializer,
    StreamSerializer,
    JsonSerializer,
    DefaultSerializer,
)
from .registry import SerializerRegistry, NoSerializerError, default_registry

__all__ = [
    # Contract
    "Serializer",
    "FIRST",
    "NORMAL",
    "CATCH_ALL",

    # Built-in serializers
    "BytesSerializer",
    "StreamSerializer",
    "JsonSerializer",
    "DefaultSerializer",

    # Lookup
    "SerializerRegistry",
    "NoSerializerError",
    "default_registry",
]
