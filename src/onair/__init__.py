"""OnAir - now-playing resolution and cover cache service."""

__version__ = "1.0.0"
