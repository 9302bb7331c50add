"""Application services."""

from onair.application.services.cover_resolution_service import CoverResolutionService
from onair.application.services.now_playing_service import (
    NowPlayingItem,
    NowPlayingService,
    NowPlayingSnapshot,
)
from onair.application.services.play_log_service import (
    PlayLogService,
    clamp_limit,
    collapse_adjacent,
)
from onair.application.services.track_identity_service import TrackIdentityService

__all__ = [
    "CoverResolutionService",
    "NowPlayingItem",
    "NowPlayingService",
    "NowPlayingSnapshot",
    "PlayLogService",
    "TrackIdentityService",
    "clamp_limit",
    "collapse_adjacent",
]
