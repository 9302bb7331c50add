"""Now-playing endpoint for the site widget."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from onair.api.dependencies import get_app_settings, get_now_playing_service
from onair.api.schemas import ErrorResponse, NowPlayingResponse
from onair.application.services import NowPlayingService
from onair.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Now Playing"])


# Hey future me - limit is a plain string! "?limit=abc" or "?limit=50" must be
# CLAMPED (to 12 / 30), never rejected with a 422. An int Query would make FastAPI reject it
# before we get a say.
@router.get(
    "/nowplaying",
    response_model=NowPlayingResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Status feed not configured"},
        503: {"model": ErrorResponse, "description": "Feed and store both down"},
    },
)
async def get_now_playing(
    limit: str | None = Query(default=None, description="History size, clamped to 1..30"),
    service: NowPlayingService = Depends(get_now_playing_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Current track plus recent play history, with cover URLs.

    Short shared-cache freshness with a longer stale-while-revalidate window:
    a CDN in front absorbs the widget polling.
    """
    snapshot = await service.snapshot(limit)

    if not snapshot.upstream_ok or not snapshot.store_ok:
        logger.info(
            "Served degraded now-playing (upstream_ok=%s, store_ok=%s)",
            snapshot.upstream_ok,
            snapshot.store_ok,
        )

    body = NowPlayingResponse.from_snapshot(snapshot)
    return JSONResponse(
        content=body.model_dump(),
        headers={"Cache-Control": settings.api.cache_control},
    )
