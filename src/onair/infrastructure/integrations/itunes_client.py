"""iTunes Search API client - the last-resort artwork source.

Hey future me - iTunes Search is free, keyless and has surprisingly good coverage for radio
playlists. Request:

    GET https://itunes.apple.com/search?term=daft+punk+one+more+time&media=music&entity=song&limit=1

Response: {"resultCount": 1, "results": [{"artworkUrl100": ".../100x100bb.jpg", ...}]}

The artwork URLs embed the render size ("100x100bb"). Apple renders any size on demand,
so we swap the size marker for a bigger one - that's the whole "upgrade" trick.

GOTCHA: Apple throttles to roughly 20 req/min per IP. That's WHY the cover cache keeps
negative results too.
"""

import logging
import re
from typing import Any

import httpx

from onair.config.settings import ArtworkSettings
from onair.domain.exceptions import FallbackLookupFailedError
from onair.domain.ports import IArtworkSearch
from onair.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

ARTWORK_FIELDS: tuple[str, ...] = ("artworkUrl100", "artworkUrl60", "artworkUrl30")

SIZE_MARKER = re.compile(r"/(\d{2,4})x(\d{2,4})(bb|sr|cc)?(\.\w+)$")


def upgrade_artwork_url(url: str, size: int = 600) -> str:
    """Ask the artwork CDN for a bigger render.

    Examples:
        >>> upgrade_artwork_url("https://is1.mzstatic.com/a/100x100bb.jpg")
        'https://is1.mzstatic.com/a/600x600bb.jpg'
    """
    if not url:
        return ""

    upgraded, count = SIZE_MARKER.subn(
        lambda m: f"/{size}x{size}{m.group(3) or ''}{m.group(4)}", url
    )
    if count:
        return upgraded
    # unknown URL layout - plain marker replace, same as the CDN docs suggest
    return url.replace("100x100", f"{size}x{size}")


def first_artwork(payload: Any) -> str:
    """Thumbnail artwork URL of the first search result, "" if none."""
    if not isinstance(payload, dict):
        return ""
    results = payload.get("results")
    if not isinstance(results, list):
        return ""
    for result in results[:1]:
        if not isinstance(result, dict):
            continue
        for field_name in ARTWORK_FIELDS:
            value = result.get(field_name)
            if isinstance(value, str) and value:
                return value
    return ""


class ITunesSearchClient(IArtworkSearch):
    """Artwork lookup via the iTunes Search API."""

    def __init__(
        self,
        settings: ArtworkSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    async def find_artwork(self, term: str) -> str | None:
        """Search a song and return its upgraded artwork URL.

        Returns:
            Large artwork URL, or None when nothing matched

        Raises:
            FallbackLookupFailedError: transport error, timeout, non-2xx or bad JSON
        """
        term = (term or "").strip()
        if not term:
            return None

        client = await self._get_client()
        try:
            response = await client.get(
                self.settings.search_url,
                params={
                    "term": term,
                    "media": "music",
                    "entity": "song",
                    "limit": "1",
                    "country": self.settings.country,
                },
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise FallbackLookupFailedError(f"Artwork search failed: {e!r}") from e

        if response.status_code >= 400:
            raise FallbackLookupFailedError(
                f"Artwork search HTTP {response.status_code}",
                http_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FallbackLookupFailedError("Artwork search returned malformed JSON") from e

        thumbnail = first_artwork(payload)
        if not thumbnail:
            logger.debug("No artwork hit for %r", term)
            return None
        return upgrade_artwork_url(thumbnail, self.settings.size)

    async def fetch_image(self, url: str) -> tuple[bytes, str] | None:
        """Download an artwork image for the file backfill mode."""
        client = await self._get_client()
        try:
            response = await client.get(url, timeout=self.settings.timeout_seconds)
        except httpx.HTTPError as e:
            raise FallbackLookupFailedError(f"Artwork download failed: {e!r}") from e

        if response.status_code >= 400 or not response.content:
            return None
        content_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return response.content, content_type
