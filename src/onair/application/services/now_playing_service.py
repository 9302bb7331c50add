"""Now-playing orchestration.

Hey future me - one call to snapshot() is one /api/nowplaying request. Strict order, because
each step feeds the next:

    poll feed -> TrackIdentity -> TrackRecord -> maybe log play -> history -> covers

Covers are the only part that fans out (asyncio.gather over now + history items).

Degradation table (nothing here ever crashes the widget):

    feed down               -> "now" = last logged play (or None), nothing logged
    store down (identity)   -> no record, cover from iTunes only, no play logged
    store down (log write)  -> swallowed, logged
    store down (history)    -> empty history
    feed AND store down     -> ServiceUnavailableError (the only hard failure)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from onair.application.services.cover_resolution_service import CoverResolutionService
from onair.application.services.play_log_service import PlayLogService
from onair.application.services.track_identity_service import TrackIdentityService
from onair.domain.entities import PlayLogEntry, TrackRecord, format_utc
from onair.domain.exceptions import (
    ServiceUnavailableError,
    StoreUnavailableError,
    UpstreamUnavailableError,
)
from onair.domain.ports import ITrackRepository
from onair.domain.value_objects import TrackIdentity, pretty_title
from onair.infrastructure.integrations.icecast_client import IcecastStatusClient

logger = logging.getLogger(__name__)


@dataclass
class NowPlayingItem:
    """One track as shown by the widget (now or history row)."""

    artist: str
    title: str
    track_key: str
    played_at: datetime
    cover_url: str = ""

    @property
    def display_title(self) -> str:
        return pretty_title(self.title) if self.title else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "artist": self.artist,
            "title": self.title,
            "display_title": self.display_title,
            "track_key": self.track_key,
            "played_at": format_utc(self.played_at),
            "played_at_ms": int(self.played_at.timestamp() * 1000),
            "cover_url": self.cover_url,
        }


@dataclass
class NowPlayingSnapshot:
    """Everything one poll produced."""

    now: NowPlayingItem | None
    history: list[NowPlayingItem] = field(default_factory=list)
    upstream_ok: bool = True
    store_ok: bool = True
    logged: bool = False


class NowPlayingService:
    """Runs one poll -> identity -> log -> cover cycle."""

    def __init__(
        self,
        status_client: IcecastStatusClient,
        identity_service: TrackIdentityService,
        play_log_service: PlayLogService,
        cover_service: CoverResolutionService,
        track_repository: ITrackRepository,
    ) -> None:
        self.status = status_client
        self.identities = identity_service
        self.play_log = play_log_service
        self.covers = cover_service
        self.tracks = track_repository

    async def _poll(self) -> tuple[TrackIdentity | None, bool]:
        """Returns (identity or None, upstream_ok). ConfigurationError propagates."""
        try:
            raw = await self.status.fetch_raw()
        except UpstreamUnavailableError as e:
            logger.warning("Status feed unavailable, serving last known: %s", e.message)
            return None, False

        identity = TrackIdentity.from_raw(raw)
        return (None if identity.is_empty else identity), True

    async def snapshot(self, limit: object = None) -> NowPlayingSnapshot:
        """Build the now-playing payload.

        Args:
            limit: History size, clamped like the query parameter

        Raises:
            ServiceUnavailableError: status feed AND item store both unreachable
            ConfigurationError: status feed URL missing
        """
        now = datetime.now(UTC)
        size = self.play_log.clamp(limit)

        identity, upstream_ok = await self._poll()
        store_ok = True
        record: TrackRecord | None = None
        logged = False

        if identity is not None:
            try:
                record = await self.identities.resolve(identity)
            except StoreUnavailableError as e:
                store_ok = False
                logger.warning("Track store unavailable, degraded mode: %s", e.message)

            if store_ok:
                try:
                    logged = await self.play_log.maybe_log_play(identity, now)
                except StoreUnavailableError as e:
                    store_ok = False
                    logger.warning("Play log write failed: %s", e.message)

        entries: list[PlayLogEntry] = []
        if store_ok:
            try:
                # +1: when the feed is down the newest entry becomes "now"
                entries = await self.play_log.recent(size + 1)
            except StoreUnavailableError as e:
                store_ok = False
                logger.warning("Play history unavailable: %s", e.message)

        if not upstream_ok and not store_ok:
            raise ServiceUnavailableError(
                "Status feed and item store are both unavailable"
            )

        now_played_at = now
        if identity is not None:
            if entries and entries[0].track_key == identity.key:
                now_played_at = entries[0].played_at
        elif not upstream_ok and entries:
            last_known = entries.pop(0)
            identity = TrackIdentity.from_parts(last_known.artist, last_known.title)
            now_played_at = last_known.played_at

        history = self.play_log.select_history(entries, size, exclude=identity, now=now)

        now_item, history_items = await self._resolve_covers(
            identity, record, now_played_at, history, store_ok
        )
        return NowPlayingSnapshot(
            now=now_item,
            history=history_items,
            upstream_ok=upstream_ok,
            store_ok=store_ok,
            logged=logged,
        )

    async def _resolve_covers(
        self,
        identity: TrackIdentity | None,
        record: TrackRecord | None,
        now_played_at: datetime,
        history: list[PlayLogEntry],
        store_ok: bool,
    ) -> tuple[NowPlayingItem | None, list[NowPlayingItem]]:
        history_ids = [TrackIdentity.from_parts(e.artist, e.title) for e in history]

        keys = [i.key for i in history_ids]
        if identity is not None and record is None:
            # feed down: "now" is the last logged play, fetch its record with the batch
            keys.append(identity.key)

        records: dict[str, TrackRecord] = {}
        if store_ok and keys:
            try:
                records = await self.tracks.get_many(keys)
            except StoreUnavailableError as e:
                logger.warning("History cover lookup degraded: %s", e.message)
        if record is not None:
            records[record.track_key] = record
        elif identity is not None:
            record = records.get(identity.key)

        jobs = [self.covers.resolve_cover(records.get(i.key), i) for i in history_ids]
        if identity is not None:
            jobs.append(self.covers.resolve_cover(record, identity))
        urls = await asyncio.gather(*jobs)

        now_item = None
        if identity is not None:
            now_item = NowPlayingItem(
                artist=identity.artist,
                title=identity.title,
                track_key=identity.key,
                played_at=now_played_at,
                cover_url=urls[-1],
            )

        history_items = [
            NowPlayingItem(
                artist=entry.artist,
                title=entry.title,
                track_key=entry.track_key or ident.key,
                played_at=entry.played_at,
                cover_url=url,
            )
            for entry, ident, url in zip(history, history_ids, urls, strict=False)
        ]
        return now_item, history_items
