"""Domain ports (interfaces)."""

from onair.domain.ports.artwork_search import IArtworkSearch
from onair.domain.ports.track_store import IPlayLogRepository, ITrackRepository

__all__ = ["IArtworkSearch", "IPlayLogRepository", "ITrackRepository"]
