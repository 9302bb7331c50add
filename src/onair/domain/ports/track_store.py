"""Item store ports - the interfaces services talk to.

Hey future me - services NEVER import the Directus client directly! They get these
interfaces injected, which is what lets the unit tests swap in dict-backed fakes.

Implementations:
- infrastructure/persistence/repositories.py (Directus REST)

Every method may raise StoreUnavailableError. There are no transactions: each call
is one independent REST request.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from onair.domain.entities import PlayLogEntry, TrackRecord


class ITrackRepository(ABC):
    """Track records keyed by track_key."""

    @abstractmethod
    async def get_by_key(self, track_key: str) -> TrackRecord | None:
        """Return the record for a track key, or None."""
        ...

    @abstractmethod
    async def get_many(self, track_keys: list[str]) -> dict[str, TrackRecord]:
        """Batch lookup, keyed by track_key. Missing keys are simply absent."""
        ...

    @abstractmethod
    async def create(self, track_key: str, artist: str, title: str) -> TrackRecord:
        """Create a record with no cover fields and both operator flags off."""
        ...

    @abstractmethod
    async def update_cover_url(
        self, record_id: str | int, cover_url: str, resolved_at: datetime
    ) -> None:
        """Persist an automatically resolved cover URL."""
        ...

    @abstractmethod
    async def update_cover_file(
        self, record_id: str | int, file_id: str, resolved_at: datetime
    ) -> None:
        """Persist an uploaded cover file id."""
        ...

    @abstractmethod
    async def store_cover_file(
        self,
        record_id: str | int,
        filename: str,
        content: bytes,
        content_type: str,
        resolved_at: datetime,
    ) -> str:
        """Upload image bytes, attach the new file to the record, return the file id."""
        ...


class IPlayLogRepository(ABC):
    """Append-only play history."""

    @abstractmethod
    async def latest(self, limit: int = 1) -> list[PlayLogEntry]:
        """Most recent entries, played_at descending."""
        ...

    @abstractmethod
    async def append(self, entry: PlayLogEntry) -> None:
        """Insert one entry."""
        ...
