"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # The *args lets subclasses pass extra context. This is your base class - DON'T raise it directly!
    # Always use a specific subclass (StoreUnavailable, Validation, etc) so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised when caller input cannot be used even after clamping
    (e.g. a naive datetime handed to the play log).

    HTTP Status: 422

    Example:
        raise ValidationError("played_at must be timezone-aware")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid.

    HTTP Status: 500

    Example:
        raise ConfigurationError("STATUS_FEED_URL is not set")
    """

    pass


class ExternalServiceError(DomainException):
    """External service (status feed, item store, artwork search) returned an error.

    HTTP Status: 502 (Bad Gateway)
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.http_status = http_status  # upstream status, None for transport errors


class UpstreamUnavailableError(ExternalServiceError):
    """The stream status feed is unreachable or returned garbage.

    Hey future me - this is NEVER fatal on its own! The now-playing flow falls back
    to the last logged play (or an empty "now") and keeps serving.
    """

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message, service="status_feed", http_status=http_status)


class StoreUnavailableError(ExternalServiceError):
    """The item store (Directus) is unreachable or rejected the request.

    Callers degrade: no track record, cover from the search fallback only,
    empty history. Only surfaced when the status feed is ALSO down.
    """

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message, service="item_store", http_status=http_status)


class FallbackLookupFailedError(ExternalServiceError):
    """The artwork search failed. Always swallowed and cached as "no cover"."""

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message, service="artwork_search", http_status=http_status)


class ServiceUnavailableError(DomainException):
    """Neither the status feed nor the item store could be reached.

    This is the one case where there is nothing meaningful to return.

    HTTP Status: 503
    """

    pass


__all__ = [
    "ConfigurationError",
    "DomainException",
    "ExternalServiceError",
    "FallbackLookupFailedError",
    "ServiceUnavailableError",
    "StoreUnavailableError",
    "UpstreamUnavailableError",
    "ValidationError",
]
