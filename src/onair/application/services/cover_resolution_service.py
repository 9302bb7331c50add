"""Cover art resolution through a prioritized tier chain.

Hey future me - this is the part that got rewritten a dozen times on the old site, each
version with a different idea of priority. The order is now POLICY (ArtworkSettings.tier_order),
default:

    locked  -> cover_locked/cover_override record with a stored cover: stored value, verbatim
    file    -> stored cover file id -> absolute asset URL
    url     -> stored cover_url
    search  -> iTunes search (cached in-process, hits AND misses)

First non-empty wins. "locked" is always first (settings enforce it).

Only "search" results go into the CoverCache - the other tiers come straight from the
record we already fetched, caching them again would just go stale when an operator edits
the cover in the CMS.

When "search" finds something for a record with no cover at all, we write it back to the
store in the background (fire-and-forget) so the next resolution is a tier 2/3 hit and iTunes
never sees that track again. That write can fail all it wants - the response never waits on it.
"""

import asyncio
import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime

from onair.application.cache.cover_cache import CoverCache
from onair.config.settings import DEFAULT_TIER_ORDER, ArtworkSettings
from onair.domain.entities import TrackRecord
from onair.domain.exceptions import (
    ExternalServiceError,
    FallbackLookupFailedError,
)
from onair.domain.ports import IArtworkSearch, ITrackRepository
from onair.domain.value_objects import TrackIdentity, strip_title_suffixes

logger = logging.getLogger(__name__)

AssetUrlBuilder = Callable[[str], str]

_UNSAFE_FILENAME = re.compile(r"[^a-z0-9]+")


class CoverResolutionService:
    """Resolve a cover URL for a track; "" means no cover."""

    def __init__(
        self,
        artwork_search: IArtworkSearch,
        cover_cache: CoverCache,
        asset_url: AssetUrlBuilder,
        track_repository: ITrackRepository | None = None,
        settings: ArtworkSettings | None = None,
    ) -> None:
        self.search = artwork_search
        self.cache = cover_cache
        self.asset_url = asset_url
        self.tracks = track_repository
        self.settings = settings or ArtworkSettings()
        self.tier_order = list(self.settings.tier_order or DEFAULT_TIER_ORDER)
        # Strong refs - asyncio only keeps weak refs to tasks, an unreferenced backfill
        # task can be garbage collected mid-flight.
        self._background: set[asyncio.Task[None]] = set()
        self._inflight: dict[str, asyncio.Task[str]] = {}
        self._backfilling: set[str] = set()

    async def resolve_cover(
        self, record: TrackRecord | None, identity: TrackIdentity
    ) -> str:
        """Walk the tier chain.

        Args:
            record: Store record, None in degraded mode (store down / nothing persisted)
            identity: Track identity (cache key + search term)

        Returns:
            Absolute image URL, or "" when no tier produced one
        """
        for tier in self.tier_order:
            if tier == "locked":
                url = self._from_protected(record)
            elif tier == "file":
                url = self._from_file(record)
            elif tier == "url":
                url = self._from_url(record)
            else:
                url = await self._from_search(record, identity)

            if url:
                return url

        return ""

    # =========================================================================
    # STORED TIERS (no I/O, the record was already fetched)
    # =========================================================================

    def _from_protected(self, record: TrackRecord | None) -> str:
        if record is None or not record.is_cover_protected:
            return ""
        # override = the operator's URL wins over everything, even an uploaded file
        if record.cover_override and record.cover_url:
            return record.cover_url
        if record.cover_file_id:
            return self.asset_url(record.cover_file_id)
        return record.cover_url or ""

    def _from_file(self, record: TrackRecord | None) -> str:
        if record is None or not record.cover_file_id:
            return ""
        return self.asset_url(record.cover_file_id)

    def _from_url(self, record: TrackRecord | None) -> str:
        if record is None or not record.cover_url:
            return ""
        return record.cover_url

    # =========================================================================
    # SEARCH TIER (cached)
    # =========================================================================

    async def _from_search(
        self, record: TrackRecord | None, identity: TrackIdentity
    ) -> str:
        if identity.is_empty:
            return ""

        cached = await self.cache.get(identity.key)
        if cached is not None:
            url = cached.url
        else:
            url = await self._shared_lookup(identity)

        # Cache hits backfill too: the record may have been created after the lookup
        # (store was down back then) or an earlier write may have failed.
        if url and record is not None:
            self._maybe_backfill(record, identity, url)
        return url

    # Hey future me - the history fan-out can ask for the same key several times in one
    # request (a track that played twice). Share ONE lookup instead of racing N of them.
    async def _shared_lookup(self, identity: TrackIdentity) -> str:
        task = self._inflight.get(identity.key)
        if task is None:
            task = asyncio.create_task(self._lookup_and_cache(identity))
            self._inflight[identity.key] = task
            task.add_done_callback(
                lambda _task, key=identity.key: self._inflight.pop(key, None)
            )
        return await asyncio.shield(task)

    async def _lookup_and_cache(self, identity: TrackIdentity) -> str:
        url = ""
        try:
            url = await self._search_with_retry(identity)
        except FallbackLookupFailedError as e:
            logger.debug("Artwork search failed for %r: %s", identity.key, e.message)

        await self.cache.store(identity.key, url)
        return url

    async def _search_with_retry(self, identity: TrackIdentity) -> str:
        url = await self.search.find_artwork(identity.search_term)
        if url:
            return url

        # "(Club Mix)" / "[Radio Edit]" rarely match - retry ONCE with the bare title
        stripped = strip_title_suffixes(identity.title)
        if stripped and stripped != identity.title:
            url = await self.search.find_artwork(f"{identity.artist} {stripped}".strip())
        return url or ""

    # =========================================================================
    # BACKFILL (fire-and-forget)
    # =========================================================================

    def _should_backfill(self, record: TrackRecord) -> bool:
        return (
            self.settings.backfill_enabled
            and not record.is_cover_protected
            and not record.has_stored_cover
        )

    def _maybe_backfill(
        self, record: TrackRecord, identity: TrackIdentity, url: str
    ) -> None:
        tracks = self.tracks
        if tracks is None or not self._should_backfill(record):
            return
        # one write per track at a time, every poll tick hits the cache while it is in flight
        if identity.key in self._backfilling:
            return
        self._backfilling.add(identity.key)
        task = asyncio.create_task(self._backfill(tracks, record, identity, url))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        task.add_done_callback(
            lambda _task, key=identity.key: self._backfilling.discard(key)
        )

    async def _backfill(
        self,
        tracks: ITrackRepository,
        record: TrackRecord,
        identity: TrackIdentity,
        url: str,
    ) -> None:
        resolved_at = datetime.now(UTC)
        try:
            if self.settings.backfill_mode == "file":
                image = await self.search.fetch_image(url)
                if image is not None:
                    content, content_type = image
                    file_id = await tracks.store_cover_file(
                        record.id,
                        self._filename(identity, content_type),
                        content,
                        content_type,
                        resolved_at,
                    )
                    record.cover_file_id = file_id
                    record.cover_resolved_at = resolved_at
                    logger.info("Backfilled cover file %s for %r", file_id, identity.key)
                    return

            await tracks.update_cover_url(record.id, url, resolved_at)
            record.cover_url = url
            record.cover_resolved_at = resolved_at
            logger.info("Backfilled cover URL for %r", identity.key)
        except ExternalServiceError as e:
            logger.warning("Cover backfill failed for %r: %s", identity.key, e.message)
        except Exception:
            logger.exception("Unexpected error during cover backfill for %r", identity.key)

    @staticmethod
    def _filename(identity: TrackIdentity, content_type: str) -> str:
        stem = _UNSAFE_FILENAME.sub("-", identity.key).strip("-") or "cover"
        extension = "png" if content_type.endswith("png") else "jpg"
        return f"{stem[:80]}.{extension}"

    async def drain(self) -> None:
        """Wait for pending backfill writes (shutdown + tests)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    @property
    def pending_backfills(self) -> int:
        return len(self._background)
