"""
Structured logging for the trial issue tracker.

Every event is a structlog key/value record. Development (DEBUG=true or
ENV=development) renders coloured console lines; anything else renders one
JSON object per line.

    from core.logging import import_logger

    import_logger.info("csv_import_completed", total=12, created=11, failed=1)

The API binds a ``request_id`` per request; the CLI binds ``source_file``
while importing. Both show up on every event logged inside that scope.
"""

import logging
import os
import sys
import time
import uuid
from collections.abc import Callable, Mapping, MutableMapping
from functools import lru_cache, wraps
from typing import Any, TypeVar

import structlog
from structlog.types import Processor

from core import __version__

F = TypeVar("F", bound=Callable[..., Any])

SERVICE_NAME = "trial_issue_tracker"


def _use_console_renderer() -> bool:
    from .config import get_settings

    return get_settings().debug or os.getenv("ENV", "development") == "development"


def _add_service(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]:
    """Stamp every event with the service name and version."""
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = __version__
    return event_dict


def get_processors() -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _add_service,
    ]

    if _use_console_renderer():
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return processors


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog through the stdlib root logger at ``level``.

    Cached, so the API startup and each CLI invocation can call it freely.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


# =============================================================================
# Context
# =============================================================================


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind keys for the duration of a block.

        with LogContext(source_file="site-101.csv"):
            import_csv(raw_text, create_fn)   # events carry source_file
    """

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs

    def __enter__(self):
        structlog.contextvars.bind_contextvars(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        structlog.contextvars.unbind_contextvars(*self.kwargs)
        return False


def log_timing(
    operation: str, logger: structlog.stdlib.BoundLogger | None = None
) -> Callable[[F], F]:
    """
    Log ``operation_complete`` or ``operation_failed`` with the elapsed time.

    Exceptions are logged and re-raised unchanged.
    """

    def decorator(func: F) -> F:
        _logger = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _logger.error(
                    "operation_failed",
                    operation=operation,
                    duration_seconds=round(time.perf_counter() - start, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            _logger.info(
                "operation_complete",
                operation=operation,
                duration_seconds=round(time.perf_counter() - start, 3),
            )
            return result

        return wrapper  # type: ignore

    return decorator


# =============================================================================
# HTTP
# =============================================================================


class RequestLoggingMiddleware:
    """
    ASGI middleware logging ``request_started`` / ``request_complete``.

    Completion is logged at info below 400, warning for 4xx, error for 5xx.
    The request's log context is cleared once the response is sent.
    """

    def __init__(self, app):
        self.app = app
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            self._logger = get_logger("http")
        return self._logger

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # RequestIDMiddleware normally binds one first
        if "request_id" not in structlog.contextvars.get_contextvars():
            bind_context(request_id=str(uuid.uuid4()))

        method = scope.get("method", "")
        path = scope.get("path", "")
        started = time.perf_counter()
        status_code = 500

        self.logger.info("request_started", method=method, path=path)

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request_complete",
                method=method,
                path=path,
                status_code=status_code,
                duration_seconds=round(time.perf_counter() - started, 3),
            )
            clear_context()


# =============================================================================
# Module loggers
# =============================================================================


class _LazyLogger:
    """Resolves its structlog logger on first use, after configure_logging."""

    def __init__(self, name: str):
        self._name = name
        self._logger: structlog.stdlib.BoundLogger | None = None

    def __getattr__(self, name: str):
        if self._logger is None:
            self._logger = get_logger(self._name)
        return getattr(self._logger, name)


cli_logger = _LazyLogger("cli")
db_logger = _LazyLogger("database")
query_logger = _LazyLogger("query")
import_logger = _LazyLogger("csv_import")


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogContext",
    "log_timing",
    "RequestLoggingMiddleware",
    "cli_logger",
    "db_logger",
    "query_logger",
    "import_logger",
]
