"""Infrastructure protocols.

Domain code depends on these abstractions; infrastructure implements them.
Failures come back as Ok | Err[PersistenceError], never as exceptions.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from swapkeeper.core.errors import PersistenceError
from swapkeeper.core.result import Err, Ok


@runtime_checkable
class EventBus(Protocol):
    """Append-only event transport.

    Messages are keyed for deterministic partitioning (by trade id). Values
    are opaque bytes; serialization is the caller's responsibility.
    """

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]: ...
