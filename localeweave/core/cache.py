"""
LRU translation cache

Bounded, thread-safe least-recently-used store with an optional time-to-live.
Entries live only in process memory.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple


class Cache:
    """
    Thread-safe LRU cache with configurable capacity and optional TTL.

    Example:
        >>> cache = Cache(capacity=100)
        >>> cache.set("hello:it", "ciao")
        'ciao'
        >>> cache.get("hello:it")
        'ciao'
    """

    def __init__(
        self,
        capacity: int = 1000,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize a new cache.

        Args:
            capacity: Maximum number of entries
            ttl: Time to live in seconds (None = no expiration)
            clock: Time source, monotonic seconds
        """
        if capacity <= 0:
            raise ValueError("Cache capacity must be positive")
        self.capacity = capacity
        self.ttl = ttl
        self._clock = clock
        # key -> (value, created_at); order is least to most recently used
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value, promoting it to most recently used.

        Expired entries are removed and reported as absent.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, created_at = entry
            if self.ttl is not None and self._clock() - created_at > self.ttl:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> Any:
        """
        Store a value, evicting the least recently used entry when full.

        Args:
            key: Cache key
            value: Value to cache

        Returns:
            The cached value
        """
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)

            self._entries[key] = (value, self._clock())
            return value

    def has(self, key: str) -> bool:
        """Check if a non-expired entry exists (counts as an access)."""
        return self.get(key) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.has(key)
