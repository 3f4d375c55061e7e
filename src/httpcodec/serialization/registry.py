"""
=============================================================================
SERIALIZER REGISTRY
=============================================================================

An ordered set of serializers. The first one whose handles() accepts the
value writes it.

=============================================================================
ORDERING
=============================================================================

Serializers are consulted by ascending priority; registration order breaks
ties. A catch-all (priority CATCH_ALL) therefore sorts last no matter when
it was registered:

    registry.register(DefaultSerializer())   # registered first...
    registry.register(BytesSerializer())
    registry.register(JsonSerializer())

    consulted:  BytesSerializer → JsonSerializer → DefaultSerializer
                                                   └── ...consulted last

Only one catch-all may be registered; a second would never be reached.

=============================================================================
THREAD SAFETY
=============================================================================

register() swaps in a new sorted tuple under a lock. find() reads whatever
tuple is current, so lookups never block and never see a half-built list.

=============================================================================
"""

import logging
import threading
from typing import Any, BinaryIO, Iterable, Iterator, Optional, Tuple

from .base import Serializer
from .serializers import (
    BytesSerializer,
    DefaultSerializer,
    JsonSerializer,
    StreamSerializer,
)


logger = logging.getLogger(__name__)


class NoSerializerError(LookupError):
    """Raised when no registered serializer handles a value."""

    def __init__(self, value: Any):
        super().__init__(f"No serializer for value of type {type(value).__name__}")
        self.value = value


class SerializerRegistry:
    """
    Priority-ordered serializer lookup.

    Usage:
        registry = SerializerRegistry([BytesSerializer(), DefaultSerializer()])
        registry.write(sink, b"raw")        # BytesSerializer
        registry.write(sink, 42)            # DefaultSerializer
    """

    def __init__(self, serializers: Optional[Iterable[Serializer]] = None):
        self._lock = threading.Lock()
        self._entries: Tuple[Tuple[int, int, Serializer], ...] = ()
        self._counter = 0
        for serializer in serializers or ():
            self.register(serializer)

    def register(self, serializer: Serializer) -> "SerializerRegistry":
        """
        Add a serializer.

        Returns:
            Self for method chaining

        Raises:
            ValueError: If a catch-all is already registered and this is
                another one.
        """
        with self._lock:
            if serializer.is_catch_all and any(s.is_catch_all for _, _, s in self._entries):
                raise ValueError(
                    f"{serializer.name}: a catch-all serializer is already registered"
                )
            entry = (serializer.priority, self._counter, serializer)
            self._counter += 1
            self._entries = tuple(sorted(self._entries + (entry,), key=lambda e: e[:2]))

        logger.debug(f"Registered serializer: {serializer.name} (priority {serializer.priority})")
        return self

    def find(self, value: Any) -> Optional[Serializer]:
        """Return the first serializer that handles ``value``, or None."""
        for _, _, serializer in self._entries:
            if serializer.handles(value):
                return serializer
        return None

    def write(self, sink: BinaryIO, value: Any) -> Serializer:
        """
        Write ``value`` with the first matching serializer.

        Returns:
            The serializer that wrote the value.

        Raises:
            NoSerializerError: If nothing handles the value.
            OSError: If the sink rejects the write.
        """
        serializer = self.find(value)
        if serializer is None:
            raise NoSerializerError(value)

        logger.debug(f"Serializing {type(value).__name__} with {serializer.name}")
        serializer.write(sink, value)
        return serializer

    @property
    def has_catch_all(self) -> bool:
        return any(s.is_catch_all for _, _, s in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Serializer]:
        return iter([s for _, _, s in self._entries])


def default_registry() -> SerializerRegistry:
    """A registry of the built-in serializers, ending with DefaultSerializer."""
    return SerializerRegistry([
        BytesSerializer(),
        StreamSerializer(),
        JsonSerializer(),
        DefaultSerializer(),
    ])
