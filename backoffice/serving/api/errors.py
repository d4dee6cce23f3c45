"""
Exception handlers

Map domain errors onto HTTP responses with a ``{"detail": message}`` body.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backoffice.errors import (
    BackofficeError,
    EntityNotFoundError,
    EntityValidationError,
    GatewayError,
    ReferenceInUseError,
    StorageError,
)

logger = structlog.get_logger(__name__)

STATUS_CODES = (
    (ReferenceInUseError, 409),
    (EntityValidationError, 422),
    (EntityNotFoundError, 404),
    (GatewayError, 502),
    (StorageError, 400),
)


def status_for(error: BackofficeError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
    status_code = status_for(exc)
    body = {"detail": str(exc)}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackofficeError, backoffice_error_handler)
