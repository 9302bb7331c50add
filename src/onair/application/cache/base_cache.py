"""Process-local TTL cache.

Hey future me - one instance of this lives per process, owned by whoever constructs it
(CoverCache in practice). Serverless cold starts and multiple workers each warm their
own copy; nothing is shared and nothing is persisted.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry[V]:
    """A stored value plus the clock reading it was stored at."""

    value: V
    stored_at: float
    ttl_seconds: int

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl_seconds

    # "now" comes from the owning cache's clock so tests can jump forward without sleeping.
    # A clock that jumps backwards just keeps entries alive a little longer.
    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryCache[K, V]:
    """Dict-backed cache with per-entry TTL and lazy eviction.

    Expired entries disappear on their next read; there is no sweeper task.
    Every TTL is explicit - the cache has no default of its own.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """clock: seconds source, time.monotonic unless a test passes a fake."""
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()
        self._clock: Clock = clock or time.monotonic

    # Use this, not get(), when a falsy value is a legitimate hit ("" = cached miss).
    async def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Live entry for key, or None (expired entries are dropped here)."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                entry = None
            return entry

    async def get(self, key: K) -> V | None:
        entry = await self.get_entry(key)
        return None if entry is None else entry.value

    async def set(self, key: K, value: V, ttl_seconds: int) -> None:
        """Store value, replacing any previous entry and its TTL."""
        async with self._lock:
            self._entries[key] = CacheEntry(value, self._clock(), ttl_seconds)

    async def delete(self, key: K) -> bool:
        """Returns True if the key was present."""
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._entries = {}

    # Sync and unlocked - it's a snapshot for the readiness probe, not a consistent read.
    def get_stats(self) -> dict[str, int]:
        """Entry counts; "expired_entries" are the ones the next read will evict."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        return {
            "total_entries": len(self._entries),
            "active_entries": len(self._entries) - len(expired),
            "expired_entries": len(expired),
        }
