"""Caching layer - in-process caches that keep the artwork search quiet."""

from onair.application.cache.base_cache import CacheEntry, Clock, InMemoryCache
from onair.application.cache.cover_cache import CachedCover, CoverCache

__all__ = [
    "CacheEntry",
    "CachedCover",
    "Clock",
    "CoverCache",
    "InMemoryCache",
]
