"""Bounded first-writer-wins caches and the in-flight prefetch set."""

from __future__ import annotations

from collections import OrderedDict
from typing import Any

DEFAULT_CAPACITY = 64


class FifoCache:
    """Fixed-capacity key/value store evicting strictly by insertion order.

    ``put`` on an existing key is a no-op: the first stored value and its
    position are kept, and reads never refresh recency.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity if capacity > 0 else DEFAULT_CAPACITY
        self._items: OrderedDict[str, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def keys(self) -> list[str]:
        return list(self._items)

    def get(self, key: str) -> Any | None:
        return self._items.get(key)

    def has(self, key: str) -> bool:
        return key in self._items

    def put(self, key: str, value: Any) -> bool:
        """Insert ``value`` unless ``key`` is present; return whether stored."""
        if value is None or key in self._items:
            return False
        if len(self._items) >= self.capacity:
            self._items.popitem(last=False)
        self._items[key] = value
        return True


class PrefetchTracker:
    """Paths with a background listing read currently outstanding."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def __contains__(self, key: object) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    def begin(self, key: str) -> bool:
        """Mark ``key`` in flight; return ``False`` when it already was."""
        if key in self._in_flight:
            return False
        self._in_flight.add(key)
        return True

    def finish(self, key: str) -> None:
        self._in_flight.discard(key)


__all__ = ["DEFAULT_CAPACITY", "FifoCache", "PrefetchTracker"]
