"""Domain entities.

Both entities are OWNED by the external item store - we only shape them.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


def format_utc(value: datetime) -> str:
    """ISO-8601 with an explicit Z offset, millisecond precision."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_utc(value: Any) -> datetime | None:
    """Parse a store timestamp into an aware UTC datetime.

    Hey future me - Directus returns "2026-02-14T20:15:03.000Z" for timestamp fields but
    "2026-02-14T20:15:03" (NO offset!) for plain datetime fields. Naive values are treated
    as UTC, never local time.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


# Hey future me, cover_locked and cover_override are OPERATOR flags set by hand in the CMS!
# locked = "never touch my cover fields", override = "my cover_url wins, forever". The resolver
# must treat both as read-only authority - no backfill writes, no search results on top.
@dataclass
class TrackRecord:
    """A track row in the item store."""

    id: str | int
    track_key: str
    artist: str = ""
    title: str = ""
    cover_file_id: str | None = None
    cover_url: str | None = None
    cover_override: bool = False
    cover_locked: bool = False
    cover_resolved_at: datetime | None = None

    @property
    def is_cover_protected(self) -> bool:
        """Operator flags that make the stored cover authoritative."""
        return self.cover_locked or self.cover_override

    @property
    def has_stored_cover(self) -> bool:
        return bool(self.cover_file_id) or bool(self.cover_url)


@dataclass
class PlayLogEntry:
    """One row of the append-only play history."""

    track_key: str
    artist: str
    title: str
    played_at: datetime
    raw: str = ""
    id: str | int | None = None

    @property
    def played_at_iso(self) -> str:
        return format_utc(self.played_at)

    @property
    def played_at_ms(self) -> int:
        return int(self.played_at.timestamp() * 1000)


__all__ = ["PlayLogEntry", "TrackRecord", "format_utc", "parse_utc"]
