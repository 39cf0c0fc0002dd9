"""
Exception handlers - turn errors into JSON responses.

Expected errors (BlogApiError) carry their own status and message.
Validation errors become a field -> messages map. Anything else is
logged with its traceback, reported to Sentry and answered with a
generic 500.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogapi.errors import BlogApiError, ValidationFailedError
from blogapi.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)

REQUEST_SOURCES = {"body", "query", "path", "header", "cookie"}


# =============================================================================
# Validation message formatting
# =============================================================================


def _field_name(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in REQUEST_SOURCES:
        parts = parts[1:]
    return ".".join(str(p) for p in parts) or "request"


def _message(field: str, error: dict[str, Any]) -> str:
    label = field.replace("_", " ")
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return f"The {label} field is required."
    if kind == "string_type":
        return f"The {label} field must be a string."
    if kind == "string_too_short":
        if ctx.get("min_length", 1) <= 1:
            return f"The {label} field is required."
        return f"The {label} field must be at least {ctx['min_length']} characters."
    if kind == "string_too_long":
        return f"The {label} field must not be greater than {ctx.get('max_length')} characters."
    if kind == "json_invalid":
        return "The request body must be valid JSON."
    if kind == "value_error" and "email" in field:
        return f"The {label} field must be a valid email address."
    return str(error.get("msg", "The given data was invalid."))


def format_validation_errors(errors: Sequence[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic errors by field, with readable messages."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        field = _field_name(error.get("loc", ()))
        grouped.setdefault(field, []).append(_message(field, error))
    return grouped


# =============================================================================
# Handlers
# =============================================================================


async def handle_api_error(request: Request, exc: BlogApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc)
        capture_exception(exc, path=request.url.path)

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationFailedError(format_validation_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    capture_exception(exc, path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
