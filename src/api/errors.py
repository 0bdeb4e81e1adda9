# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Global exception handlers.

Every error response has the same body::

    {"statusCode": 404, "message": "...", "timestamp": "...",
     "path": "/api/v1/...", "method": "GET"}

Validation failures add ``errors``. Outside production the body also
echoes the request ``query``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import get_settings
from src.infrastructure.database import InvalidObjectIdError
from src.infrastructure.storage import InvalidImageError, StorageError
from src.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_body(
    request: Request,
    status_code: int,
    message: Any,
    errors: list[Any] | None = None,
) -> dict[str, Any]:
    """Build the error response body for a request."""
    body: dict[str, Any] = {
        "statusCode": status_code,
        "message": message,
        "timestamp": format_iso(utc_now()),
        "path": request.url.path,
        "method": request.method,
    }
    if errors is not None:
        body["errors"] = errors
    if not get_settings().is_production:
        body["query"] = dict(request.query_params)
    return body


def error_response(
    request: Request,
    status_code: int,
    message: Any,
    errors: list[Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(request, status_code, message, errors),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(
        "HTTPException path=%s status=%s detail=%s",
        request.url.path,
        exc.status_code,
        exc.detail,
    )
    return error_response(
        request, exc.status_code, exc.detail, headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    logger.info("Validation failed path=%s errors=%s", request.url.path, len(errors))
    return error_response(
        request, status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors
    )


async def invalid_object_id_handler(request: Request, exc: InvalidObjectIdError) -> JSONResponse:
    return error_response(request, status.HTTP_400_BAD_REQUEST, str(exc))


async def invalid_image_handler(request: Request, exc: InvalidImageError) -> JSONResponse:
    return error_response(request, status.HTTP_400_BAD_REQUEST, exc.message)


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage error path=%s: %s", request.url.path, exc.message)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Sync: SlowAPIMiddleware calls it without awaiting
    logger.warning("Rate limit exceeded: %s for %s", exc.detail, request.url.path)
    return error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please try again later.",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled server error: %s", exc)
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all global exception handlers to the app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InvalidObjectIdError, invalid_object_id_handler)
    app.add_exception_handler(InvalidImageError, invalid_image_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
