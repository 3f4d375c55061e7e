"""
=============================================================================
SERIALIZER CONTRACT
=============================================================================

A serializer turns an in-memory value into bytes on an output sink.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       SERIALIZER CONTRACT                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   handles(value) -> bool                                            │
    │       "Can I write this value?"                                     │
    │       Pure. Must not raise for None, "", 0 or any other value.      │
    │                                                                      │
    │   write(sink, value) -> None                                        │
    │       Write the bytes for value to sink.                            │
    │       OSError from the sink propagates to the caller.               │
    │                                                                      │
    │   priority: int                                                      │
    │       Lower runs first. CATCH_ALL is reserved for serializers       │
    │       whose handles() is always True.                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Serializers carry no per-call state, so one instance can be shared by every
request thread.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO


# Priority bands. Gaps leave room for application serializers in between.
FIRST = 0
NORMAL = 100
CATCH_ALL = 2 ** 31 - 1


class Serializer(ABC):
    """Abstract base class for serializers."""

    priority: int = NORMAL

    @abstractmethod
    def handles(self, value: Any) -> bool:
        """Return True if this serializer can write ``value``."""

    @abstractmethod
    def write(self, sink: BinaryIO, value: Any) -> None:
        """
        Write ``value`` to ``sink``.

        Raises:
            OSError: If the sink rejects the write.
        """

    @property
    def name(self) -> str:
        """Get the serializer name for logging."""
        return self.__class__.__name__

    @property
    def is_catch_all(self) -> bool:
        return self.priority >= CATCH_ALL

    def __repr__(self) -> str:
        return f"<{self.name} priority={self.priority}>"
