"""Application settings loaded from environment variables.

Hey future me - every section is its own BaseSettings with an env prefix, so
STATUS_FEED_URL, DIRECTUS_TOKEN, ARTWORK_CACHE_TTL_SECONDS etc. all work without any
nesting delimiter gymnastics. A .env file in the working directory is picked up too.
get_settings() is cached - tests that need different values build Settings(...) directly
and pass them in, they do NOT monkeypatch env + clear the cache.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CoverTier = Literal["locked", "file", "url", "search"]

DEFAULT_TIER_ORDER: list[CoverTier] = ["locked", "file", "url", "search"]


def _strip_trailing_slash(value: str) -> str:
    return value.strip().rstrip("/")


class StatusFeedSettings(BaseSettings):
    """Icecast status feed."""

    model_config = SettingsConfigDict(
        env_prefix="STATUS_FEED_", env_file=".env", extra="ignore"
    )

    url: str = Field(default="", description="Icecast status-json.xsl URL")
    timeout_seconds: float = Field(default=8.0, gt=0, le=30)
    poll_interval_seconds: int = Field(
        default=15, ge=1, description="How often clients poll /api/nowplaying"
    )
    user_agent: str = Field(default="onair-nowplaying/1.0")

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return value.strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


class DirectusSettings(BaseSettings):
    """Item store (Directus) connection and collection names."""

    model_config = SettingsConfigDict(
        env_prefix="DIRECTUS_", env_file=".env", extra="ignore"
    )

    url: str = Field(default="", description="Base URL, no trailing slash")
    token: str = Field(default="", description="Static bearer token")
    timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    tracks_collection: str = "tracks"
    plays_collection: str = "plays"
    cover_file_field: str = Field(
        default="cover_art", description="Tracks field holding the cover file id"
    )

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return _strip_trailing_slash(value)

    @property
    def is_configured(self) -> bool:
        return bool(self.url)


class ArtworkSettings(BaseSettings):
    """Cover resolution policy and the fallback search API."""

    model_config = SettingsConfigDict(
        env_prefix="ARTWORK_", env_file=".env", extra="ignore"
    )

    search_url: str = "https://itunes.apple.com/search"
    country: str = "US"
    size: int = Field(default=600, ge=100, le=3000)
    timeout_seconds: float = Field(default=6.0, gt=0, le=30)
    cache_ttl_seconds: int = Field(default=21600, ge=1)  # 6 hours
    negative_cache_ttl_seconds: int = Field(default=21600, ge=1)
    tier_order: list[CoverTier] = Field(default_factory=lambda: list(DEFAULT_TIER_ORDER))
    backfill_enabled: bool = True
    backfill_mode: Literal["url", "file"] = "url"
    asset_width: int | None = None
    asset_height: int | None = None
    asset_fit: Literal["cover", "contain", "inside", "outside"] | None = None
    asset_quality: int | None = Field(default=None, ge=1, le=100)

    # Hey future me - "locked" is ALWAYS evaluated first, whatever the env says. Operator
    # covers are authoritative; a config typo must not let iTunes win over them.
    @field_validator("tier_order")
    @classmethod
    def _locked_first(cls, value: list[CoverTier]) -> list[CoverTier]:
        if len(set(value)) != len(value):
            raise ValueError("tier_order must not repeat a tier")
        return ["locked", *(tier for tier in value if tier != "locked")]


class PlayLogSettings(BaseSettings):
    """Play history bounds."""

    model_config = SettingsConfigDict(
        env_prefix="PLAY_LOG_", env_file=".env", extra="ignore"
    )

    default_limit: int = Field(default=12, ge=1)
    max_limit: int = Field(default=30, ge=1)
    exclude_window_seconds: int = Field(default=120, ge=0)

    @model_validator(mode="after")
    def _default_within_max(self) -> "PlayLogSettings":
        if self.default_limit > self.max_limit:
            raise ValueError("PLAY_LOG_DEFAULT_LIMIT must be <= PLAY_LOG_MAX_LIMIT")
        return self


class ApiSettings(BaseSettings):
    """HTTP surface."""

    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", extra="ignore")

    cache_control: str = "s-maxage=5, stale-while-revalidate=25"


class ObservabilitySettings(BaseSettings):
    """Logging output."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_json_format: bool = False


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "onair"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    debug: bool = False

    status_feed: StatusFeedSettings = Field(default_factory=StatusFeedSettings)
    directus: DirectusSettings = Field(default_factory=DirectusSettings)
    artwork: ArtworkSettings = Field(default_factory=ArtworkSettings)
    play_log: PlayLogSettings = Field(default_factory=PlayLogSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    # Hey future me - a negative TTL shorter than the poll interval means EVERY poll
    # tick re-queries iTunes for covers that don't exist. Refuse to start like that.
    @model_validator(mode="after")
    def _negative_ttl_covers_poll_interval(self) -> "Settings":
        if self.artwork.negative_cache_ttl_seconds < self.status_feed.poll_interval_seconds:
            raise ValueError(
                "ARTWORK_NEGATIVE_CACHE_TTL_SECONDS must be >= "
                "STATUS_FEED_POLL_INTERVAL_SECONDS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
