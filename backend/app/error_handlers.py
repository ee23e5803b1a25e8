"""
Custom exception handlers for FastAPI.

Every error leaves the API in the same envelope:
    {"success": false, "error": "...", "message": "...", "details": [...]}

Security:
- Request IDs are logged server-side for tracing but NOT exposed to clients
- Generic error messages for 500 errors to prevent information disclosure
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from core.exceptions import TrackerError
from core.logging import get_logger

logger = get_logger("backend.errors")


def _get_request_id() -> str:
    """
    Get the current request ID from context.

    Used for server-side logging only - NOT exposed to clients.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("request_id", "-")


def _response_payload(
    error: str, message: str | None = None, details: list[dict] | None = None
) -> dict:
    payload: dict[str, Any] = {"success": False, "error": error}
    if message:
        payload["message"] = message
    if details is not None:
        payload["details"] = details
    return payload


def format_validation_errors(errors: list[dict]) -> list[dict]:
    """
    Flatten pydantic error entries into field-level details.

    ``("query", "pageSize")`` becomes location ``query`` and path ``pageSize``;
    body-level errors (no field) get path ``body``.
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        location = loc[0] if loc and loc[0] in ("body", "query", "path", "header") else "body"
        path_parts = loc[1:] if loc and loc[0] == location else loc
        details.append(
            {
                "type": "field",
                "path": ".".join(path_parts) or location,
                "location": location,
                "msg": err.get("msg", "Invalid value"),
                "value": err.get("input"),
            }
        )
    return details


def _validation_response(errors: list[dict]) -> JSONResponse:
    details = format_validation_errors(errors)
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            _response_payload(
                "Validation failed",
                f"Validation failed with {len(details)} error(s)",
                details,
            )
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrackerError)
    async def tracker_exception_handler(request: Request, exc: TrackerError):
        logger.warning(
            "tracker_error",
            error=exc.error,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(exc.error, exc.message),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # Log with request_id for server-side tracing
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "validation_error",
            endpoint=f"{request.method} {request.url.path}",
            errors=len(exc.errors()),
            request_id=_get_request_id(),
        )
        return _validation_response(list(exc.errors()))

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        logger.warning(
            "validation_error",
            endpoint=f"{request.method} {request.url.path}",
            errors=exc.error_count(),
            request_id=_get_request_id(),
        )
        return _validation_response(exc.errors())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # Log full details server-side (including request_id for tracing)
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        # Return generic message - don't expose exception details
        return JSONResponse(
            status_code=500,
            content=_response_payload("Internal server error"),
        )
