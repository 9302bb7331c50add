# Hey future me - dieser Router ist für Docker/Kubernetes Health Checks!
#
# Endpoints:
# - /health/live   → Liveness probe (process is up, no dependency checks)
# - /health/ready  → Readiness probe (config present, service graph built)
#
# NO outbound calls here: probing Icecast/Directus on every probe tick doubles the load
# on both. The widget route degrades on its own.
"""Health check endpoints for Docker/Kubernetes probes."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from onair import __version__

router = APIRouter()


class LivenessStatus(BaseModel):
    """Simple liveness probe response."""

    status: str = Field(description="alive")
    timestamp: str = Field(description="ISO timestamp")


class ReadinessStatus(BaseModel):
    """Readiness probe response."""

    status: str = Field(description="ready or not_ready")
    timestamp: str = Field(description="ISO timestamp")
    version: str = Field(default=__version__)
    status_feed_configured: bool = Field(description="STATUS_FEED_URL set")
    store_configured: bool = Field(description="DIRECTUS_URL set")
    cover_cache: dict[str, int] = Field(default_factory=dict)


@router.get("/live", response_model=LivenessStatus)
async def liveness_probe() -> LivenessStatus:
    """Returns 200 while the process is running."""
    return LivenessStatus(status="alive", timestamp=datetime.now(UTC).isoformat())


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_probe(request: Request) -> JSONResponse:
    """Returns 200 when the service can answer /api/nowplaying, 503 otherwise.

    Store missing is NOT fatal (history and stored covers degrade), the status
    feed missing is.
    """
    services = getattr(request.app.state, "services", None)
    settings = getattr(request.app.state, "settings", None)

    feed_ok = bool(settings and settings.status_feed.is_configured)
    store_ok = bool(settings and settings.directus.is_configured)
    is_ready = services is not None and feed_ok

    response = ReadinessStatus(
        status="ready" if is_ready else "not_ready",
        timestamp=datetime.now(UTC).isoformat(),
        status_feed_configured=feed_ok,
        store_configured=store_ok,
        cover_cache=services.cover_cache.get_stats() if services is not None else {},
    )
    status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=status_code)
