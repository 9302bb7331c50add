"""Shared HTTP client pool for connection reuse across integrations.

Hey future me - the status feed, the item store and the artwork search all go through ONE
httpx.AsyncClient. Every /api/nowplaying request does 2-15 outbound calls, so keep-alive
matters a lot more than it looks. Each integration passes its OWN timeout per request
(client.get(..., timeout=...)), the pool default is just the ceiling.

Usage in integrations:
    client = await HttpClientPool.get_client()
    response = await client.get(url, timeout=8.0)

HttpClientPool.close() runs at app shutdown (see infrastructure/lifecycle.py).
"""

import asyncio
import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Singleton HTTP client pool.

    - Lazy initialization (created on first use)
    - asyncio.Lock around create/close
    - Proper cleanup at shutdown
    """

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    DEFAULT_TIMEOUT: ClassVar[float] = 15.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 10
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 30

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        # asyncio.Lock() binds to the running loop on first use, so create it lazily
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(cls) -> httpx.AsyncClient:
        """Get the shared HTTP client instance, creating it on first call."""
        async with cls._ensure_lock():
            if cls._client is None or cls._client.is_closed:
                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(cls.DEFAULT_TIMEOUT),
                    limits=httpx.Limits(
                        max_keepalive_connections=cls.DEFAULT_MAX_KEEPALIVE,
                        max_connections=cls.DEFAULT_MAX_CONNECTIONS,
                    ),
                    # Icecast behind a CDN and the artwork CDN both like HTTP/2
                    http2=True,
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    cls.DEFAULT_TIMEOUT,
                    cls.DEFAULT_MAX_KEEPALIVE,
                    cls.DEFAULT_MAX_CONNECTIONS,
                )

            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client. A later get_client() creates a fresh one."""
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._client is not None and not cls._client.is_closed
