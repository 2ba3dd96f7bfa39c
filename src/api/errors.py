"""
API error mapping.

Client errors from domain results become HTTPExceptions with a status code
chosen by error category. Server-side RegistrationErrors are logged with full
detail and answered with an opaque 500. Requests rejected by FastAPI's own
parsing are reported as ValidationError with status 400.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.exceptions import RegistrationError
from src.domain.results import ClientError, ErrorCategory, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.FORBIDDEN: status.HTTP_403_FORBIDDEN,
}

UNKNOWN_ERROR = {"type": "UnknownError", "message": "An unexpected error occurred"}


def client_error_exception(error: ClientError) -> HTTPException:
    """Build the HTTPException reporting a client error."""
    return HTTPException(
        status_code=STATUS_BY_CATEGORY[error.category],
        detail={"type": error.kind.value, "message": error.message},
    )


async def registration_error_handler(request: Request, exc: RegistrationError) -> JSONResponse:
    logger.error(
        "Internal error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": UNKNOWN_ERROR},
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report requests FastAPI could not parse as a ValidationError."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=STATUS_BY_CATEGORY[ErrorKind.VALIDATION_ERROR.category],
        content={"detail": {"type": ErrorKind.VALIDATION_ERROR.value, "message": message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistrationError, registration_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
