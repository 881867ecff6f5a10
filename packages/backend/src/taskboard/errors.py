"""Error taxonomy and the uniform failure envelope.

Learn: Every failure the API reports is an ApiError subclass carrying its
HTTP status, a message, and optional field-level details. Handlers and
gates raise them; nothing catches-and-continues. The exception handlers
registered here are the single place that turns an error into a response:

  {"statusCode": 404, "data": "Task not found", "success": false, "errors": []}

Anything that is not an ApiError becomes a generic 500. The real error is
logged, never sent to the client.
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class ApiError(Exception):
    """Base for all errors that map to a client-visible response."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[dict[str, Any]]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        self.headers = headers
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"

    def __init__(self, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests, please try again later."


def error_body(status_code: int, message: str, errors: Optional[list] = None) -> dict:
    return {
        "statusCode": status_code,
        "data": message,
        "success": False,
        "errors": errors or [],
    }


def error_response(
    status_code: int,
    message: str,
    errors: Optional[list] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, message, errors),
        headers=headers,
    )


# ─── Handlers ────────────────────────────────────────────


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.api_error", path=request.url.path, error=exc.message)
    return error_response(exc.status_code, exc.message, exc.errors, exc.headers)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Schema validation failures → 400 with one entry per bad field."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or "unknown",
            "message": _clean_message(err.get("msg", "Invalid value")),
        })
    return error_response(400, "Validation failed", errors)


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework-level errors (unknown route, wrong method) in our envelope."""
    return error_response(
        exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request.unhandled_error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
    )
    return error_response(500, "Internal Server Error")


def _clean_message(msg: str) -> str:
    # pydantic prefixes custom validator messages with "Value error, "
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
