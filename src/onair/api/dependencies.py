"""Dependency injection for API routes.

Hey future me - the object graph is built ONCE in the lifespan (infrastructure/lifecycle.py)
and parked on app.state.services. These functions just hand pieces of it to the routes.
Tests override them with app.dependency_overrides, no monkeypatching needed.
"""

from fastapi import HTTPException, Request

from onair.application.services import NowPlayingService
from onair.config import Settings, get_settings
from onair.infrastructure.lifecycle import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """The per-process service container."""
    services: ServiceContainer | None = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Application is still starting")
    return services


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to the env-based ones)."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_now_playing_service(request: Request) -> NowPlayingService:
    return get_services(request).now_playing_service
