"""Cover artwork cache for the fallback search tier.

Hey future me - this cache ONLY holds results of the artwork search (tier 4)!
Locked/file/url covers already live in the item store; caching them here too would
just mean two places to invalidate when an operator edits a cover.

Two TTLs:
- HIT (url found): 6h by default, artwork basically never changes
- MISS (""): cached too! Otherwise every poll tick for an obscure white-label
  track hammers iTunes again. Must be >= the poll interval (Settings enforces it).

Keyed by TrackIdentity.key, so "DAFT PUNK - One More Time" and "daft punk - one more time"
share an entry.
"""

from dataclasses import dataclass

from onair.application.cache.base_cache import Clock, InMemoryCache


@dataclass(frozen=True)
class CachedCover:
    """A cached lookup result. url == "" is a negative entry."""

    url: str
    expires_at: float

    @property
    def is_negative(self) -> bool:
        return not self.url


class CoverCache:
    """Positive + negative cache of artwork search results."""

    DEFAULT_TTL = 21600  # 6 hours
    DEFAULT_NEGATIVE_TTL = 21600

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL,
        negative_ttl_seconds: int = DEFAULT_NEGATIVE_TTL,
        clock: Clock | None = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.negative_ttl_seconds = negative_ttl_seconds
        self._cache: InMemoryCache[str, str] = InMemoryCache(clock=clock)

    @staticmethod
    def _make_key(track_key: str) -> str:
        return f"cover:{track_key}"

    async def get(self, track_key: str) -> CachedCover | None:
        """Return the cached result for a track key, or None on miss/expiry."""
        entry = await self._cache.get_entry(self._make_key(track_key))
        if entry is None:
            return None
        return CachedCover(url=entry.value, expires_at=entry.expires_at)

    async def store(self, track_key: str, url: str | None) -> None:
        """Cache a lookup result; None/"" is stored as a negative entry."""
        value = url or ""
        ttl = self.ttl_seconds if value else self.negative_ttl_seconds
        await self._cache.set(self._make_key(track_key), value, ttl)

    async def invalidate(self, track_key: str) -> bool:
        """Drop a cached result (e.g. after an operator edited the cover)."""
        return await self._cache.delete(self._make_key(track_key))

    async def clear(self) -> None:
        await self._cache.clear()

    def get_stats(self) -> dict[str, int]:
        return self._cache.get_stats()
