"""Error taxonomy.

Learn: Guards, validators and services raise these; they never build HTTP
responses themselves. The exception handlers in middleware/errors.py are
the single place where a failure becomes a status code + JSON body.
"""

from typing import Optional


class AppError(Exception):
    """Base class for failures that map to a client-facing status."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Request payload failed structural validation.

    details is a list of {"field": ..., "message": ...} dicts.
    """

    status_code = 400
    default_message = "Validation error"

    def __init__(self, details: list[dict], message: Optional[str] = None):
        super().__init__(message)
        self.details = details


class BadRequest(AppError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid email or password"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    """Duplicate resource (unique constraint)."""

    status_code = 409
    default_message = "Resource already exists"


class UnprocessableReference(AppError):
    """A write referenced a row that does not exist (foreign key)."""

    status_code = 404
    default_message = "Referenced resource not found"
