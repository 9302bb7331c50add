"""Logging setup: correlation ids, JSON for shipping, compact text for terminals."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, every /api/nowplaying request fans out to Icecast, Directus and iTunes. When a
# widget shows a stale cover you grep for the request's correlation_id and see the whole chain.
# Backfill tasks spawned with create_task COPY the context, so their logs carry the id of the
# request that found the artwork.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hpack", "asyncio", "uvicorn.access")

TEXT_FORMAT = "%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s"
JSON_FORMAT = "%(message)s"


def get_correlation_id() -> str:
    """Correlation id of the current request, "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context.

    Args:
        correlation_id: Id from the caller (X-Correlation-ID); None or "" mints a UUID4

    Returns:
        The id now in effect
    """
    value = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamps record.correlation_id so both formatters can use it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def format_exception_chain(exc_value: BaseException | None, package: str = "onair") -> str:
    """Render an exception chain root cause first, keeping only our own frames.

        ╰─► httpx.ConnectError: All connection attempts failed
        ╰─► StoreUnavailableError: Directus POST /items/plays failed
            File "directus_client.py", line 104, in _request
    """
    chain: list[BaseException] = []
    current = exc_value
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__

    lines: list[str] = []
    for exc in reversed(chain):
        lines.append(f"╰─► {exc.__class__.__name__}: {exc}")
        for frame in traceback.extract_tb(exc.__traceback__):
            if "/site-packages/" in frame.filename or package not in frame.filename:
                continue
            lines.append(
                f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
            )
            if frame.line:
                lines.append(f"      {frame.line.strip()}")
    return "\n".join(lines)


class CompactExceptionFormatter(logging.Formatter):
    """Terminal formatter; tracebacks go through format_exception_chain()."""

    def formatException(self, ei: Any) -> str:
        return format_exception_chain(ei[1])


class ServiceJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """One JSON object per line, stamped with the app name.

    Fields: timestamp, level, logger, app, source ("module.function:line"),
    correlation_id (when inside a request), error (compact chain) and any extra={...}.
    """

    def __init__(self, *args: Any, app_name: str = "onair", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.app_name = app_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            app=self.app_name,
            source=f"{record.module}.{record.funcName}:{record.lineno}",
        )
        if getattr(record, "correlation_id", ""):
            log_record["correlation_id"] = record.correlation_id
        if record.exc_info:
            log_record.pop("exc_info", None)
            log_record["error"] = format_exception_chain(record.exc_info[1])


def _build_formatter(json_format: bool, app_name: str) -> logging.Formatter:
    if json_format:
        return ServiceJsonFormatter(
            JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z", app_name=app_name
        )
    return CompactExceptionFormatter(fmt=TEXT_FORMAT, datefmt="%H:%M:%S")


# Listen future me, the lifespan calls this once per startup. It REPLACES the root handlers, so
# test runs and reloads that call it again don't print every line twice. httpx logs every
# request at INFO - with a 15s widget poll that buries our own lines, hence the WARNING floor.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "onair",
) -> None:
    """Install the stdout handler on the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown -> INFO)
        json_format: JSON lines for log shipping instead of the terminal format
        app_name: Stamped on every JSON line as "app"
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(_build_formatter(json_format, app_name))

    root_logger = logging.getLogger()
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured (level=%s, json=%s, app=%s)", log_level, json_format, app_name
    )
