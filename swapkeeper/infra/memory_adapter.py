"""In-memory EventBus. A test double, not production code."""

from __future__ import annotations

from typing import final

from swapkeeper.core.errors import PersistenceError
from swapkeeper.core.result import Err, Ok


@final
class InMemoryEventBus:
    """Messages stored per topic as (key, value) pairs, in publish order."""

    def __init__(self) -> None:
        self._topics: dict[str, list[tuple[str, bytes]]] = {}

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]:
        self._topics.setdefault(topic, []).append((key, value))
        return Ok(None)

    def get_messages(self, topic: str) -> list[tuple[str, bytes]]:
        """Test-only helper."""
        return list(self._topics.get(topic, []))

    def topic_count(self) -> int:
        """Test-only helper."""
        return len(self._topics)
