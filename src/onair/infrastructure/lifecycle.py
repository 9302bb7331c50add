"""Application lifecycle management for startup and shutdown tasks.

Hey future me - there are NO background workers in this service. Everything is
request-driven; the lifespan only wires the object graph once per process and tears
it down cleanly:

    startup:  logging -> clients -> repositories -> cover cache -> services -> app.state
    shutdown: wait for in-flight cover backfills -> close the shared HTTP client

The cover cache lives on the CoverResolutionService instance, so it survives across
requests for the lifetime of the process and nothing else.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import FastAPI

from onair.application.cache import CoverCache
from onair.application.services import (
    CoverResolutionService,
    NowPlayingService,
    PlayLogService,
    TrackIdentityService,
)
from onair.config import Settings, get_settings
from onair.infrastructure.integrations import (
    DirectusClient,
    HttpClientPool,
    ITunesSearchClient,
    IcecastStatusClient,
)
from onair.infrastructure.observability import configure_logging
from onair.infrastructure.persistence import PlayLogRepository, TrackRepository

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_TIMEOUT = 5.0


@dataclass
class ServiceContainer:
    """Everything the routers need, built once per process."""

    settings: Settings
    directus: DirectusClient
    status_client: IcecastStatusClient
    track_repository: TrackRepository
    play_log_repository: PlayLogRepository
    cover_cache: CoverCache
    cover_service: CoverResolutionService
    identity_service: TrackIdentityService
    play_log_service: PlayLogService
    now_playing_service: NowPlayingService


def build_services(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> ServiceContainer:
    """Wire the object graph.

    Args:
        settings: Application settings
        client: Optional HTTP client for every integration (tests pass one);
            None means the shared HttpClientPool
    """
    directus = DirectusClient(settings.directus, client=client)
    status_client = IcecastStatusClient(settings.status_feed, client=client)
    artwork_search = ITunesSearchClient(settings.artwork, client=client)

    track_repository = TrackRepository(directus, settings.directus)
    play_log_repository = PlayLogRepository(directus, settings.directus)

    cover_cache = CoverCache(
        ttl_seconds=settings.artwork.cache_ttl_seconds,
        negative_ttl_seconds=settings.artwork.negative_cache_ttl_seconds,
    )

    def asset_url(file_id: str) -> str:
        return directus.asset_url(
            file_id,
            width=settings.artwork.asset_width,
            height=settings.artwork.asset_height,
            fit=settings.artwork.asset_fit,
            quality=settings.artwork.asset_quality,
        )

    cover_service = CoverResolutionService(
        artwork_search=artwork_search,
        cover_cache=cover_cache,
        asset_url=asset_url,
        track_repository=track_repository,
        settings=settings.artwork,
    )
    identity_service = TrackIdentityService(track_repository)
    play_log_service = PlayLogService(play_log_repository, settings.play_log)

    now_playing_service = NowPlayingService(
        status_client=status_client,
        identity_service=identity_service,
        play_log_service=play_log_service,
        cover_service=cover_service,
        track_repository=track_repository,
    )

    return ServiceContainer(
        settings=settings,
        directus=directus,
        status_client=status_client,
        track_repository=track_repository,
        play_log_repository=play_log_repository,
        cover_cache=cover_cache,
        cover_service=cover_service,
        identity_service=identity_service,
        play_log_service=play_log_service,
        now_playing_service=now_playing_service,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    if not settings.status_feed.is_configured:
        logger.warning("STATUS_FEED_URL is not set - /api/nowplaying will return 500")
    if not settings.directus.is_configured:
        logger.warning("DIRECTUS_URL is not set - running without play log or stored covers")

    # tests pre-seed app.state.services with fakes - don't clobber them
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)

    try:
        yield
    finally:
        logger.info("Shutting down application")

        services: ServiceContainer | None = getattr(app.state, "services", None)
        if services is not None and services.cover_service.pending_backfills:
            try:
                await asyncio.wait_for(
                    services.cover_service.drain(), timeout=SHUTDOWN_DRAIN_TIMEOUT
                )
            except TimeoutError:
                logger.warning("Cover backfills still pending at shutdown, abandoning")

        try:
            await HttpClientPool.close()
        except Exception as e:
            logger.exception("Error closing HTTP client pool: %s", e)
