"""Error normalizer — the only place a failure becomes an HTTP response.

Learn: Guards, validators and services raise; they never format error
bodies. FastAPI exception handlers registered here translate:

  ValidationError / RequestValidationError → 400 {error, details:[{field, message}]}
  AppError subclasses                      → their status, {error}
  IntegrityError (unique)                  → 409 {error: "Resource already exists"}
  IntegrityError (foreign key)             → 404 {error: "Referenced resource not found"}
  framework HTTPException (404 route, 405) → its status, {error}
  anything else                            → 500 {error: "Internal server error"}

Uncaught exceptions would otherwise be answered by Starlette outside the
user middleware, so RequestIdMiddleware turns them into the same 500 body
via unhandled_error_response() and the response keeps its headers.

Every failure is logged with method, path, message and traceback before
the response goes out. Tracebacks never reach the client.
"""

from typing import Any, Iterable, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from datagov.errors import AppError, Conflict, UnprocessableReference, ValidationError

logger = structlog.get_logger()

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _field_path(loc: Iterable[Any]) -> str:
    """('body', 'config', 0) → 'config.0'; ('query', 'limit') → 'query.limit'."""
    parts = list(loc)
    if parts and parts[0] == "body":
        parts = parts[1:]
    return ".".join(str(p) for p in parts) or "body"


def validation_details(errors: Iterable[dict]) -> list[dict]:
    return [
        {"field": _field_path(e.get("loc", ())), "message": e.get("msg", "Invalid value")}
        for e in errors
    ]


def classify_integrity_error(exc: IntegrityError) -> Optional[AppError]:
    """Map a driver constraint error onto the taxonomy.

    asyncpg exposes the SQLSTATE; SQLite only has the message text.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    text = str(orig)
    if code == UNIQUE_VIOLATION or "UNIQUE constraint failed" in text:
        return Conflict()
    if code == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in text:
        return UnprocessableReference()
    return None


def _log_failure(request: Request, status_code: int, message: str, exc: BaseException) -> None:
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request.failed",
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        error=message,
        exc_info=exc,
    )


def _error_response(
    status_code: int, message: str, details: Optional[list[dict]] = None, headers=None
) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an uncaught exception and answer with the opaque 500 body."""
    _log_failure(request, 500, str(exc) or exc.__class__.__name__, exc)
    return _error_response(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on `app`."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        _log_failure(request, exc.status_code, exc.message, exc)
        details = exc.details if isinstance(exc, ValidationError) else None
        return _error_response(exc.status_code, exc.message, details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(validation_details(exc.errors()))
        _log_failure(request, error.status_code, error.message, exc)
        return _error_response(error.status_code, error.message, error.details)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        error = classify_integrity_error(exc)
        if error is None:
            _log_failure(request, 500, "Internal server error", exc)
            return _error_response(500, "Internal server error")
        _log_failure(request, error.status_code, error.message, exc)
        return _error_response(error.status_code, error.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail)
        _log_failure(request, exc.status_code, message, exc)
        return _error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        return unhandled_error_response(request, exc)
