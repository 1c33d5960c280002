"""
Error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as ``{"error": <message>, "details": <optional>}``
with the status code carried by the exception class.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from social_feed.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class FeedAPIError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        return ErrorResponse(error=self.message, details=self.details).model_dump(exclude_none=True)


class ValidationError(FeedAPIError):
    """Missing or malformed request field."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(FeedAPIError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(FeedAPIError):
    """An entity with the same primary key already exists."""
    status_code = status.HTTP_409_CONFLICT


class DataIntegrityError(FeedAPIError):
    """Stored data cannot be interpreted, e.g. an unparseable timestamp."""


class StoreError(FeedAPIError):
    """The underlying store query failed."""


def _field(err: dict) -> str:
    return ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))


def _to_validation_error(exc: RequestValidationError) -> ValidationError:
    errors = exc.errors()
    missing = [_field(e) for e in errors if e.get("type") == "missing"]
    details = "; ".join(
        f"{_field(e)}: {e.get('msg')}" if _field(e) else str(e.get("msg")) for e in errors
    )
    if missing:
        return ValidationError(f"Missing required fields: {', '.join(missing)}", details)
    return ValidationError("Invalid request", details)


async def feed_api_error_handler(request: Request, exc: FeedAPIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Schema violations are client errors of the same kind as a missing field.
    err = _to_validation_error(exc)
    return JSONResponse(status_code=err.status_code, content=err.to_body())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FeedAPIError, feed_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
