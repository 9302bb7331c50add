"""Now-playing response schemas."""

from pydantic import BaseModel, Field

from onair.application.services.now_playing_service import (
    NowPlayingItem,
    NowPlayingSnapshot,
)


class NowPlayingTrack(BaseModel):
    """One track row (now or history)."""

    artist: str = Field(description="Artist as sent by the stream")
    title: str = Field(description="Title as sent by the stream")
    display_title: str = Field(default="", description="Title without mix suffixes, title-cased")
    track_key: str = Field(description="Normalized 'artist - title' identity")
    played_at: str = Field(description="ISO-8601 UTC timestamp with Z")
    played_at_ms: int = Field(description="played_at as epoch milliseconds")
    cover_url: str = Field(default="", description="Absolute image URL, empty if none")

    @classmethod
    def from_item(cls, item: NowPlayingItem) -> "NowPlayingTrack":
        return cls(**item.to_dict())


class NowPlayingResponse(BaseModel):
    """GET /api/nowplaying payload."""

    ok: bool = True
    now: NowPlayingTrack | None = None
    history: list[NowPlayingTrack] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: NowPlayingSnapshot) -> "NowPlayingResponse":
        return cls(
            ok=True,
            now=NowPlayingTrack.from_item(snapshot.now) if snapshot.now else None,
            history=[NowPlayingTrack.from_item(item) for item in snapshot.history],
        )


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    ok: bool = False
    error: str
