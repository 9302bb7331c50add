"""FastAPI application factory.

Run with:
    uvicorn onair.main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onair import __version__
from onair.api import api_router, health
from onair.api.exception_handlers import register_exception_handlers
from onair.config import Settings
from onair.infrastructure.lifecycle import ServiceContainer, lifespan
from onair.infrastructure.observability import RequestLoggingMiddleware


def create_app(
    settings: Settings | None = None,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """Create the application.

    Args:
        settings: Settings to use; None reads the environment at startup
        services: Pre-built service container (tests); None builds one at startup
    """
    app = FastAPI(
        title="OnAir",
        description="Now-playing metadata, play history and cover art for the station site",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    # The widget is embedded on the station site, which lives on another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router, prefix="/health", tags=["Health"])

    return app


app = create_app()
