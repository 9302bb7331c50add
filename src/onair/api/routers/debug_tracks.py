"""Debug endpoint: what does the store hold for a given track?

Hey future me - this exists because "why does this track show the wrong cover?" is THE
recurring support question. Pass the text exactly as the stream shows it:

    GET /api/debug/tracks?q=Blue 6 - Sweeter Love (Sax Mix)

Disabled (404) unless DEBUG=true - it exposes raw store rows.
"""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from onair.api.dependencies import get_app_settings, get_services
from onair.config import Settings
from onair.domain.entities import TrackRecord, format_utc
from onair.domain.value_objects import TrackIdentity
from onair.infrastructure.lifecycle import ServiceContainer

router = APIRouter(prefix="/debug", tags=["Debug"])


def _record_to_dict(record: TrackRecord) -> dict[str, Any]:
    data = asdict(record)
    if record.cover_resolved_at is not None:
        data["cover_resolved_at"] = format_utc(record.cover_resolved_at)
    return data


@router.get("/tracks")
async def debug_tracks(
    q: str = Query(..., min_length=1, description="Raw 'Artist - Title' text"),
    services: ServiceContainer = Depends(get_services),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Resolve q to a track key and show the matching record and cached cover."""
    if not settings.debug:
        raise HTTPException(status_code=404, detail="Not Found")

    identity = TrackIdentity.from_raw(q)
    record = await services.track_repository.get_by_key(identity.key)
    cached = await services.cover_cache.get(identity.key)

    return {
        "ok": True,
        "q": q,
        "artist": identity.artist,
        "title": identity.title,
        "track_key": identity.key,
        "record": _record_to_dict(record) if record else None,
        "cached_cover": (
            {"url": cached.url, "negative": cached.is_negative} if cached else None
        ),
    }
