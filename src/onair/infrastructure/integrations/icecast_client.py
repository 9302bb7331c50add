"""Icecast status feed client.

Hey future me - Icecast's status-json.xsl is NOT a stable format! Depending on the server
version and how many mounts are configured you get:

    {"icestats": {"source": {...}}}          one mount
    {"icestats": {"source": [{...}, ...]}}   several mounts -> we take the first

and the "now playing" text lives in one of:
- title                  (what most source clients send)
- yp_currently_playing   (directory listing field, set by some encoders)
- stream_title / streamtitle (raw ICY StreamTitle, rare)

Everything is free text "Artist - Title". Some encoders also send a separate "artist" key.

Failure policy: fetch_now_playing() NEVER raises - a dead feed is "no change", not an error.
Use fetch_raw() when you need to know WHY nothing came back.
"""

import logging
from typing import Any

import httpx

from onair.config.settings import StatusFeedSettings
from onair.domain.exceptions import ConfigurationError, UpstreamUnavailableError
from onair.domain.value_objects import SEPARATOR, TrackIdentity
from onair.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

NOW_PLAYING_FIELDS: tuple[str, ...] = (
    "title",
    "yp_currently_playing",
    "stream_title",
    "streamtitle",
)


def extract_now_playing(payload: Any) -> str:
    """Pull the free-text now-playing string out of a status document.

    Returns:
        The first non-empty candidate field, or "" when the shape is unknown
    """
    if not isinstance(payload, dict):
        return ""

    icestats = payload.get("icestats")
    if not isinstance(icestats, dict):
        return ""

    source = icestats.get("source")
    if isinstance(source, list):
        source = source[0] if source else None
    if not isinstance(source, dict):
        return ""

    for field_name in NOW_PLAYING_FIELDS:
        value = source.get(field_name)
        if isinstance(value, str | int | float) and str(value).strip():
            text = str(value).strip()
            artist = source.get("artist")
            # separate artist key + bare title -> glue them back together
            if (
                field_name == "title"
                and isinstance(artist, str)
                and artist.strip()
                and SEPARATOR not in text
            ):
                return f"{artist.strip()}{SEPARATOR}{text}"
            return text

    return ""


class IcecastStatusClient:
    """Polls the Icecast status document and turns it into a TrackIdentity."""

    def __init__(
        self,
        settings: StatusFeedSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    async def fetch_raw(self) -> str:
        """Fetch the status document and return the raw now-playing text.

        Returns:
            Raw text ("" when the feed is up but nothing is playing)

        Raises:
            ConfigurationError: STATUS_FEED_URL not set
            UpstreamUnavailableError: transport error, timeout, non-2xx or bad JSON
        """
        if not self.settings.is_configured:
            raise ConfigurationError("STATUS_FEED_URL is not set")

        client = await self._get_client()
        try:
            response = await client.get(
                self.settings.url,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(
                f"Status feed timed out after {self.settings.timeout_seconds:.0f}s"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Status feed unreachable: {e}") from e

        if response.status_code >= 400:
            raise UpstreamUnavailableError(
                f"Upstream HTTP {response.status_code}", http_status=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Status feed returned malformed JSON") from e

        return extract_now_playing(payload)

    async def fetch_now_playing(self) -> TrackIdentity | None:
        """Fetch + clean + split the current track.

        Returns:
            TrackIdentity, or None if the feed failed or nothing usable is playing
        """
        try:
            raw = await self.fetch_raw()
        except UpstreamUnavailableError as e:
            logger.warning("Status feed poll failed: %s", e.message)
            return None

        identity = TrackIdentity.from_raw(raw)
        if identity.is_empty:
            logger.debug("Status feed returned no now-playing text")
            return None
        return identity
