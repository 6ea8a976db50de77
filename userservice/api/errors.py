"""Error responses for the users API.

Every error body has the same shape: message, request path and a
second-resolution timestamp.
"""

import logging
from datetime import datetime
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from userservice.exceptions import (
    EventPublishingError,
    InvalidRequestArgumentError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    StorageUnavailableError,
    UserOptimisticLockError,
)

logger = logging.getLogger(__name__)

INVALID_REQUEST_ARGUMENT = "Invalid request argument"
API_ERROR_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class APIError(BaseModel):
    """Error response body."""

    message: str
    path: str
    time_stamp: str = Field(
        default_factory=lambda: datetime.now().strftime(API_ERROR_TIMESTAMP_FORMAT),
        alias="timeStamp",
    )

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    body = APIError(message=message, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    return _error_response(request, status.HTTP_404_NOT_FOUND, str(exc))


async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, status.HTTP_409_CONFLICT, str(exc))


async def invalid_argument_handler(request: Request, exc: InvalidRequestArgumentError) -> JSONResponse:
    logger.error(f"Illegal argument: {str(exc)}")
    return _error_response(request, status.HTTP_400_BAD_REQUEST, str(exc) or INVALID_REQUEST_ARGUMENT)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Body/query validation failures are client errors (400), with field messages joined."""
    errors = exc.errors() if isinstance(exc, (RequestValidationError, ValidationError)) else []
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _error_response(request, status.HTTP_400_BAD_REQUEST, ", ".join(messages) or INVALID_REQUEST_ARGUMENT)


async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
    return _error_response(request, status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))


async def event_publishing_handler(request: Request, exc: EventPublishingError) -> JSONResponse:
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


async def fallback_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach userservice exception handlers to `app`."""
    app.add_exception_handler(ResourceNotFoundError, not_found_handler)
    app.add_exception_handler(ResourceAlreadyExistsError, conflict_handler)
    app.add_exception_handler(UserOptimisticLockError, conflict_handler)
    app.add_exception_handler(InvalidRequestArgumentError, invalid_argument_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)
    app.add_exception_handler(EventPublishingError, event_publishing_handler)
    app.add_exception_handler(Exception, fallback_handler)
