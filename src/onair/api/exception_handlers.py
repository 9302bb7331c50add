"""Custom exception handlers for FastAPI application.

Every error leaves the API in the same envelope the widget already understands:

    {"ok": false, "error": "<message>"}

Hey future me - the now-playing route degrades on its own and almost never raises. What DOES
reach these handlers is configuration trouble (500), the "feed AND store down" case (503),
and direct store failures from the debug route (502).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from onair.domain.exceptions import (
    ConfigurationError,
    DomainException,
    ExternalServiceError,
    ServiceUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message},
        headers=NO_STORE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation and HTTP exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning("Validation error at %s: %s", request.url.path, exc.message)
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error at %s: %s", request.url.path, exc.message)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(ServiceUnavailableError)
    async def service_unavailable_handler(
        request: Request, exc: ServiceUnavailableError
    ) -> JSONResponse:
        logger.error("Service unavailable at %s: %s", request.url.path, exc.message)
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.warning(
            "External service error at %s: %s",
            request.url.path,
            exc.message,
            extra={"service": exc.service, "upstream_status": exc.http_status},
        )
        return error_response(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        logger.error("Unhandled domain error at %s: %s", request.url.path, exc.message)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid request')}".strip(": ")
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("HTTP %d at %s: %s", exc.status_code, request.url.path, exc.detail)
        return error_response(exc.status_code, str(exc.detail))
