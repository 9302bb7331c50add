"""Persistence layer - repositories over the Directus item store."""

from onair.infrastructure.persistence.repositories import (
    PlayLogRepository,
    TrackRepository,
)

__all__ = ["PlayLogRepository", "TrackRepository"]
