"""Tests for the now-playing, debug and health endpoints.

Hey future me - the app gets a pre-built ServiceContainer full of fakes, so the lifespan
never builds real HTTP clients and nothing leaves the process.
"""

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from onair.application.services import (
    CoverResolutionService,
    NowPlayingService,
    PlayLogService,
    TrackIdentityService,
)
from onair.config import DirectusSettings, Settings, StatusFeedSettings
from onair.domain.entities import PlayLogEntry, TrackRecord
from onair.domain.exceptions import ConfigurationError
from onair.domain.value_objects import TrackIdentity
from onair.infrastructure.lifecycle import ServiceContainer
from onair.main import create_app
from tests.fakes import FakeArtworkSearch

DAFT_PUNK_ART = "https://is1.mzstatic.com/daftpunk/600x600bb.jpg"


def make_settings(**overrides) -> Settings:
    return Settings(
        status_feed=StatusFeedSettings(url="http://radio.example/status-json.xsl"),
        directus=DirectusSettings(url="https://cms.example"),
        **overrides,
    )


@pytest.fixture
def container(
    status_client, track_repository, play_log_repository, cover_cache
) -> ServiceContainer:
    settings = make_settings()
    search = FakeArtworkSearch({"Daft Punk One More Time": DAFT_PUNK_ART})
    cover_service = CoverResolutionService(
        search,
        cover_cache,
        lambda file_id: f"https://cms.example/assets/{file_id}",
        track_repository=track_repository,
        settings=settings.artwork,
    )
    identity_service = TrackIdentityService(track_repository)
    play_log_service = PlayLogService(play_log_repository, settings.play_log)

    status_client.raw = "Daft Punk - One More Time"
    return ServiceContainer(
        settings=settings,
        directus=None,  # type: ignore[arg-type]
        status_client=status_client,
        track_repository=track_repository,
        play_log_repository=play_log_repository,
        cover_cache=cover_cache,
        cover_service=cover_service,
        identity_service=identity_service,
        play_log_service=play_log_service,
        now_playing_service=NowPlayingService(
            status_client=status_client,
            identity_service=identity_service,
            play_log_service=play_log_service,
            cover_service=cover_service,
            track_repository=track_repository,
        ),
    )


def client_for(container: ServiceContainer, settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings=settings, services=container)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(container: ServiceContainer) -> Iterator[TestClient]:
    yield from client_for(container, container.settings)


@pytest.fixture
def debug_client(container: ServiceContainer) -> Iterator[TestClient]:
    yield from client_for(container, make_settings(debug=True))


class TestNowPlayingEndpoint:
    """GET /api/nowplaying."""

    def test_now_playing(self, client: TestClient) -> None:
        response = client.get("/api/nowplaying")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["now"]["artist"] == "Daft Punk"
        assert body["now"]["title"] == "One More Time"
        assert body["now"]["track_key"] == "daft punk - one more time"
        assert body["now"]["cover_url"] == DAFT_PUNK_ART
        assert body["now"]["played_at"].endswith("Z")
        assert body["history"] == []

    def test_cache_control_header(self, client: TestClient) -> None:
        response = client.get("/api/nowplaying")
        assert response.headers["Cache-Control"] == "s-maxage=5, stale-while-revalidate=25"

    def test_limit_clamped_to_thirty(self, client: TestClient, play_log_repository) -> None:
        base = datetime.now(UTC) - timedelta(hours=5)
        for i in range(40):
            identity = TrackIdentity.from_raw(f"Artist {i} - Song {i}")
            play_log_repository.entries.append(
                PlayLogEntry(
                    track_key=identity.key,
                    artist=identity.artist,
                    title=identity.title,
                    played_at=base + timedelta(minutes=4 * i),
                )
            )

        response = client.get("/api/nowplaying", params={"limit": "50"})

        assert response.status_code == 200
        assert len(response.json()["history"]) == 30

    def test_garbage_limit_is_not_rejected(self, client: TestClient) -> None:
        response = client.get("/api/nowplaying", params={"limit": "abc"})
        assert response.status_code == 200

    def test_feed_and_store_down(
        self, client: TestClient, status_client, track_repository, play_log_repository
    ) -> None:
        status_client.down = True
        track_repository.down = True
        play_log_repository.down = True

        response = client.get("/api/nowplaying")

        assert response.status_code == 503
        assert response.json() == {
            "ok": False,
            "error": "Status feed and item store are both unavailable",
        }
        assert response.headers["Cache-Control"] == "no-store"

    def test_missing_feed_url(self, client: TestClient, status_client, mocker) -> None:
        mocker.patch.object(
            status_client,
            "fetch_raw",
            side_effect=ConfigurationError("STATUS_FEED_URL is not set"),
        )

        response = client.get("/api/nowplaying")

        assert response.status_code == 500
        assert response.json()["ok"] is False

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/api/nowplaying", headers={"X-Correlation-ID": "req-123"})
        assert response.headers["X-Correlation-ID"] == "req-123"


class TestDebugEndpoint:
    """GET /api/debug/tracks."""

    def test_disabled_without_debug(self, client: TestClient) -> None:
        response = client.get("/api/debug/tracks", params={"q": "Moby - Porcelain"})

        assert response.status_code == 404
        assert response.json()["ok"] is False

    def test_shows_record(self, debug_client: TestClient, track_repository) -> None:
        track_repository.records["moby - porcelain"] = TrackRecord(
            id=3,
            track_key="moby - porcelain",
            artist="Moby",
            title="Porcelain",
            cover_url="https://cdn.example/moby.jpg",
            cover_resolved_at=datetime(2026, 2, 14, 20, 15, 3, tzinfo=UTC),
        )

        response = debug_client.get(
            "/api/debug/tracks", params={"q": "undefined - MOBY - Porcelain"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["track_key"] == "moby - porcelain"
        assert body["record"]["id"] == 3
        assert body["record"]["cover_resolved_at"] == "2026-02-14T20:15:03.000Z"
        assert body["cached_cover"] is None

    def test_requires_query(self, debug_client: TestClient) -> None:
        response = debug_client.get("/api/debug/tracks")

        assert response.status_code == 422
        assert response.json()["ok"] is False


class TestHealthEndpoints:
    """Liveness and readiness probes."""

    def test_live(self, client: TestClient) -> None:
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_ready(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["status_feed_configured"] is True
        assert body["store_configured"] is True

    def test_not_ready_without_feed(self, container: ServiceContainer) -> None:
        settings = Settings(status_feed=StatusFeedSettings(url=""))

        for test_client in client_for(container, settings):
            response = test_client.get("/health/ready")

            assert response.status_code == 503
            assert response.json()["status"] == "not_ready"
