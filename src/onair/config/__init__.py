"""Configuration module for OnAir."""

from .settings import (
    ApiSettings,
    ArtworkSettings,
    DirectusSettings,
    ObservabilitySettings,
    PlayLogSettings,
    Settings,
    StatusFeedSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "ArtworkSettings",
    "DirectusSettings",
    "ObservabilitySettings",
    "PlayLogSettings",
    "Settings",
    "StatusFeedSettings",
    "get_settings",
]
