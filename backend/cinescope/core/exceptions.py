"""
CineScope - error taxonomy and FastAPI exception handlers.

Each error kind maps to exactly one HTTP status. Messages are safe to show to
the caller: they only mention identifiers the caller already supplied.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CineScopeError(Exception):
    """Base exception for CineScope"""
    code = "CINESCOPE_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {
            "success": False,
            "code": self.code,
            "message": self.message,
        }


class ValidationError(CineScopeError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request parameters"

    def __init__(self, message: str = None, field: str = None):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class NoPreferences(CineScopeError):
    code = "NO_PREFERENCES"
    status_code = 400
    default_message = "No recognised favorite genres to recommend from"


class Forbidden(CineScopeError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Not authorized to modify this resource"


class NotFound(CineScopeError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class AlreadyExists(CineScopeError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists"


class AlreadyLiked(CineScopeError):
    code = "ALREADY_LIKED"
    status_code = 409
    default_message = "Review already liked"


class ConfigurationError(CineScopeError):
    code = "CONFIGURATION_ERROR"
    status_code = 500
    default_message = "Service is misconfigured"


class MovieFetchFailed(CineScopeError):
    """The movie could not be mirrored, so the signal that needed it was not written."""
    code = "MOVIE_FETCH_FAILED"
    status_code = 502
    default_message = "Could not load movie from the metadata provider"


class UpstreamUnavailable(CineScopeError):
    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503
    default_message = "Metadata provider is unavailable"


def register_exception_handlers(app: FastAPI):
    """Register exception handlers with the FastAPI app"""

    @app.exception_handler(CineScopeError)
    async def handle_cinescope_error(request: Request, exc: CineScopeError):
        if exc.status_code >= 500:
            logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
