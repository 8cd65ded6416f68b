"""Exception handlers rendering errors as a consistent JSON body."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from macromate.errors import AppError

_logger = logging.getLogger(__name__)


def error_response(
    message: str, status_code: int, details: dict[str, object] | None = None
) -> JSONResponse:
    """Build the `{"error": {...}}` response body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "message": message,
                "status_code": status_code,
                "details": details or {},
            }
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an `AppError` with its own status code."""
    _logger.warning(
        "Application error: %s [%s %s]",
        exc.message,
        request.method,
        request.url.path,
    )
    return error_response(exc.message, exc.status_code, exc.details)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures field by field."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    _logger.info(
        "Validation error on %s %s: %s", request.method, request.url.path, errors
    )
    return error_response(
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"validation_errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic message."""
    _logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(
        "An internal server error occurred.", status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the handlers to an application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
