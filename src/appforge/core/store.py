"""
Keyed Stores
Explicit get/put/list/delete interface for in-process state, so a persistent
backing store can replace the in-memory one without touching callers.
"""

import threading
from collections import OrderedDict
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class Store(Protocol[T]):
    """Protocol for keyed stores."""

    def get(self, key: str) -> T | None:
        """Return the stored value or None."""
        ...

    def put(self, key: str, value: T) -> None:
        """Insert or replace a value."""
        ...

    def list(self) -> list[T]:
        """Return all values, oldest first."""
        ...

    def delete(self, key: str) -> bool:
        """Remove a value. Returns False if the key was absent."""
        ...


class MemoryStore(Generic[T]):
    """
    Thread-safe in-memory store with an optional size bound.

    Examples:
        >>> store = MemoryStore[str](max_size=2)
        >>> store.put("a", "1")
        >>> store.get("a")
        '1'
    """

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self._items: OrderedDict[str, T] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._items.get(key)

    def put(self, key: str, value: T) -> None:
        with self._lock:
            if key in self._items:
                del self._items[key]
            self._items[key] = value

            # Oldest entries go first
            if self.max_size is not None and len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def list(self) -> list[T]:
        with self._lock:
            return list(self._items.values())

    def delete(self, key: str) -> bool:
        with self._lock:
            if key in self._items:
                del self._items[key]
                return True
            return False

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items


__all__ = ["Store", "MemoryStore"]
