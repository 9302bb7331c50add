"""Tests for the iTunes Search artwork client."""

import re

import httpx
import pytest
from pytest_httpx import HTTPXMock

from onair.config.settings import ArtworkSettings
from onair.domain.exceptions import FallbackLookupFailedError
from onair.infrastructure.integrations.itunes_client import (
    ITunesSearchClient,
    first_artwork,
    upgrade_artwork_url,
)

SEARCH = re.compile(r"https://itunes\.apple\.com/search\?.*")
THUMB = "https://is1-ssl.mzstatic.com/image/thumb/Music/v4/ab/cd/100x100bb.jpg"


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def itunes(http_client: httpx.AsyncClient) -> ITunesSearchClient:
    return ITunesSearchClient(ArtworkSettings(), client=http_client)


class TestArtworkHelpers:
    """Test URL upgrade and result parsing."""

    def test_upgrade_size_marker(self) -> None:
        assert upgrade_artwork_url(THUMB) == THUMB.replace("100x100bb", "600x600bb")

    def test_upgrade_custom_size(self) -> None:
        assert upgrade_artwork_url("https://x/60x60bb.png", 1000).endswith("/1000x1000bb.png")

    def test_upgrade_unknown_layout(self) -> None:
        assert upgrade_artwork_url("https://x/100x100/art") == "https://x/600x600/art"

    def test_upgrade_empty(self) -> None:
        assert upgrade_artwork_url("") == ""

    def test_first_artwork(self) -> None:
        payload = {"results": [{"artworkUrl60": "https://x/60x60bb.jpg"}]}
        assert first_artwork(payload) == "https://x/60x60bb.jpg"
        assert first_artwork({"results": []}) == ""
        assert first_artwork("nope") == ""


class TestFindArtwork:
    """Test the search call."""

    async def test_found(self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=SEARCH, json={"resultCount": 1, "results": [{"artworkUrl100": THUMB}]}
        )

        url = await itunes.find_artwork("Daft Punk One More Time")

        assert url == THUMB.replace("100x100bb", "600x600bb")
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["term"] == "Daft Punk One More Time"
        assert request.url.params["media"] == "music"
        assert request.url.params["entity"] == "song"
        assert request.url.params["limit"] == "1"
        assert request.url.params["country"] == "US"

    async def test_no_results(self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=SEARCH, json={"resultCount": 0, "results": []})
        assert await itunes.find_artwork("Nobody White Label") is None

    async def test_blank_term_skips_request(self, itunes: ITunesSearchClient) -> None:
        assert await itunes.find_artwork("   ") is None

    async def test_throttled(self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=SEARCH, status_code=403)

        with pytest.raises(FallbackLookupFailedError) as exc_info:
            await itunes.find_artwork("Moby Porcelain")
        assert exc_info.value.http_status == 403

    async def test_transport_error(
        self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))

        with pytest.raises(FallbackLookupFailedError):
            await itunes.find_artwork("Moby Porcelain")


class TestFetchImage:
    """Test downloading artwork for file backfill."""

    async def test_fetch_image(self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url="https://x/600x600bb.jpg",
            content=b"\xff\xd8\xff",
            headers={"Content-Type": "image/jpeg; charset=binary"},
        )

        assert await itunes.fetch_image("https://x/600x600bb.jpg") == (
            b"\xff\xd8\xff",
            "image/jpeg",
        )

    async def test_fetch_image_missing(
        self, itunes: ITunesSearchClient, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(url="https://x/gone.jpg", status_code=404)
        assert await itunes.fetch_image("https://x/gone.jpg") is None
