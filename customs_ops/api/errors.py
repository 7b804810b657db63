"""Mapping of domain errors and unhandled exceptions to HTTP responses."""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from customs_ops.domain.errors import (
    DomainError,
    NotFoundError,
    RetryInProgressError,
    RetryNotDueError,
)

logger = logging.getLogger(__name__)


def status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (RetryInProgressError, RetryNotDueError)):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "Domain error",
        extra={"path": request.url.path, "error_code": exc.code, "status_code": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Anything that escapes a use case is logged with an error_id and answered
    with a generic 500; stack traces never reach the client.
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "code": "INTERNAL_ERROR",
            "error_id": error_id,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
