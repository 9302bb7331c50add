"""Pydantic request/response schemas."""

from onair.api.schemas.nowplaying import (
    ErrorResponse,
    NowPlayingResponse,
    NowPlayingTrack,
)

__all__ = ["ErrorResponse", "NowPlayingResponse", "NowPlayingTrack"]
