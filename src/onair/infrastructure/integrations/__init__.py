"""External service integrations (status feed, item store, artwork search)."""

from onair.infrastructure.integrations.directus_client import DirectusClient
from onair.infrastructure.integrations.http_pool import HttpClientPool
from onair.infrastructure.integrations.icecast_client import IcecastStatusClient
from onair.infrastructure.integrations.itunes_client import ITunesSearchClient

__all__ = [
    "DirectusClient",
    "HttpClientPool",
    "ITunesSearchClient",
    "IcecastStatusClient",
]
