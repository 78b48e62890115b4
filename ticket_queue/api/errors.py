"""
Maps domain errors to HTTP responses.

Validation failures describe the broken rule, missing resources map to 404,
and storage failures return a generic message with no internal detail.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ticket_queue.core.logging import get_logger
from ticket_queue.domain.errors import (
    AlreadyAllocatedError,
    DomainError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
)
from ticket_queue.schemas.allocation import ErrorResponse

logger = get_logger(__name__)

TRANSIENT_FAILURE_MESSAGE = "The request could not be completed. Please try again later."


def _status_for(error: DomainError) -> int:
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, AlreadyAllocatedError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_503_SERVICE_UNAVAILABLE


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, StorageFailureError):
        logger.error("storage_failure", error=exc.message)
        body = ErrorResponse(code=exc.code.value, detail=TRANSIENT_FAILURE_MESSAGE)
    else:
        body = ErrorResponse(
            code=exc.code.value,
            detail=exc.message,
            field=getattr(exc, "field", None),
        )
    return JSONResponse(status_code=_status_for(exc), content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
