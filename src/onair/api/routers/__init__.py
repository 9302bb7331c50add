"""API router initialization."""

# Hey future me, api_router is mounted under /api in main.py, so /nowplaying becomes
# /api/nowplaying and /debug/tracks becomes /api/debug/tracks. The health router is NOT
# part of it - probes live at /health/* without the /api prefix.

from fastapi import APIRouter

from onair.api.routers import debug_tracks, health, nowplaying

api_router = APIRouter()
api_router.include_router(nowplaying.router)
api_router.include_router(debug_tracks.router)

__all__ = ["api_router", "debug_tracks", "health", "nowplaying"]
