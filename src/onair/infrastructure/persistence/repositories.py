"""Repository implementations backed by the Directus item store."""

from datetime import datetime
from typing import Any

from onair.config.settings import DirectusSettings
from onair.domain.entities import PlayLogEntry, TrackRecord, format_utc, parse_utc
from onair.domain.ports import IPlayLogRepository, ITrackRepository
from onair.infrastructure.integrations.directus_client import DirectusClient

TRACK_FIELDS: tuple[str, ...] = (
    "id",
    "track_key",
    "artist",
    "title",
    "cover_url",
    "cover_override",
    "cover_locked",
    "cover_resolved_at",
)

PLAY_FIELDS: tuple[str, ...] = ("id", "track_key", "artist", "title", "played_at", "raw")


def _file_id(value: Any) -> str | None:
    # Directus returns the bare uuid, or the expanded file object when fields=field.*
    if isinstance(value, dict):
        value = value.get("id")
    return str(value) if value else None


class TrackRepository(ITrackRepository):
    """Track records in the tracks collection."""

    def __init__(self, client: DirectusClient, settings: DirectusSettings) -> None:
        self.client = client
        self.collection = settings.tracks_collection
        self.cover_file_field = settings.cover_file_field

    # Hey future me - the store field for the cover file is configurable (the CMS calls it
    # "cover_art"), the entity always calls it cover_file_id. Map ONLY here.
    def _to_entity(self, row: dict[str, Any]) -> TrackRecord:
        return TrackRecord(
            id=row.get("id", ""),
            track_key=str(row.get("track_key") or ""),
            artist=str(row.get("artist") or ""),
            title=str(row.get("title") or ""),
            cover_file_id=_file_id(row.get(self.cover_file_field)),
            cover_url=str(row.get("cover_url") or "").strip() or None,
            cover_override=bool(row.get("cover_override")),
            cover_locked=bool(row.get("cover_locked")),
            cover_resolved_at=parse_utc(row.get("cover_resolved_at")),
        )

    async def get_by_key(self, track_key: str) -> TrackRecord | None:
        rows = await self.client.list_items(
            self.collection,
            filters={"track_key": track_key},
            limit=1,
            fields=[*TRACK_FIELDS, self.cover_file_field],
        )
        return self._to_entity(rows[0]) if rows else None

    # One request for the whole history page. Keys with commas ("crosby, stills & nash - ...")
    # are fine, build_query sends _in filters in the JSON form.
    async def get_many(self, track_keys: list[str]) -> dict[str, TrackRecord]:
        keys = sorted({key for key in track_keys if key})
        if not keys:
            return {}
        rows = await self.client.list_items(
            self.collection,
            filters={"track_key": keys},
            limit=len(keys),
            fields=[*TRACK_FIELDS, self.cover_file_field],
        )
        records = (self._to_entity(row) for row in rows)
        return {record.track_key: record for record in records}

    async def create(self, track_key: str, artist: str, title: str) -> TrackRecord:
        row = await self.client.create_item(
            self.collection,
            {
                "track_key": track_key,
                "artist": artist,
                "title": title,
                "cover_override": False,
                "cover_locked": False,
            },
        )
        return self._to_entity(row)

    async def update_cover_url(
        self, record_id: str | int, cover_url: str, resolved_at: datetime
    ) -> None:
        await self.client.update_item(
            self.collection,
            record_id,
            {"cover_url": cover_url, "cover_resolved_at": format_utc(resolved_at)},
        )

    async def update_cover_file(
        self, record_id: str | int, file_id: str, resolved_at: datetime
    ) -> None:
        await self.client.update_item(
            self.collection,
            record_id,
            {
                self.cover_file_field: file_id,
                "cover_resolved_at": format_utc(resolved_at),
            },
        )

    async def store_cover_file(
        self,
        record_id: str | int,
        filename: str,
        content: bytes,
        content_type: str,
        resolved_at: datetime,
    ) -> str:
        file_id = await self.client.upload_file(filename, content, content_type)
        await self.update_cover_file(record_id, file_id, resolved_at)
        return file_id


class PlayLogRepository(IPlayLogRepository):
    """Play history in the plays collection."""

    def __init__(self, client: DirectusClient, settings: DirectusSettings) -> None:
        self.client = client
        self.collection = settings.plays_collection

    @staticmethod
    def _to_entity(row: dict[str, Any]) -> PlayLogEntry | None:
        played_at = parse_utc(row.get("played_at"))
        if played_at is None:
            return None
        return PlayLogEntry(
            id=row.get("id"),
            track_key=str(row.get("track_key") or ""),
            artist=str(row.get("artist") or ""),
            title=str(row.get("title") or ""),
            played_at=played_at,
            raw=str(row.get("raw") or ""),
        )

    async def latest(self, limit: int = 1) -> list[PlayLogEntry]:
        rows = await self.client.list_items(
            self.collection,
            sort=["-played_at"],
            limit=limit,
            fields=PLAY_FIELDS,
        )
        entries = (self._to_entity(row) for row in rows)
        return [entry for entry in entries if entry is not None]

    async def append(self, entry: PlayLogEntry) -> None:
        await self.client.create_item(
            self.collection,
            {
                "track_key": entry.track_key,
                "artist": entry.artist,
                "title": entry.title,
                "played_at": entry.played_at_iso,
                "raw": entry.raw,
            },
        )
