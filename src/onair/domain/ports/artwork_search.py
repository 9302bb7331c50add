"""Artwork search port - the last-resort cover source."""

from abc import ABC, abstractmethod


class IArtworkSearch(ABC):
    """Free-text artwork lookup (iTunes Search in production)."""

    @abstractmethod
    async def find_artwork(self, term: str) -> str | None:
        """Return a large artwork URL for the first hit, or None.

        Raises:
            FallbackLookupFailedError: transport error, timeout, non-2xx, bad JSON
        """
        ...

    async def fetch_image(self, url: str) -> tuple[bytes, str] | None:
        """Download an artwork image as (content, content_type).

        Only needed for the "file" backfill mode; providers that can't download
        return None and the backfill falls back to storing the URL.
        """
        return None
