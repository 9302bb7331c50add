"""API module for OnAir.

Struktur:
- routers/: nowplaying, debug, health
- schemas/: Pydantic response models
- dependencies.py: Dependency Injection (service container from app.state)
- exception_handlers.py: Globale Error-Handler ({"ok": false, "error": ...})
"""

from onair.api.routers import api_router, health

__all__ = ["api_router", "health"]
