"""Error handling middleware."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException, validation_details

logger = structlog.get_logger()


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """Build the ``{ok: false, error, ...}`` envelope."""
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message, **extra})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response carrying the exception's extra fields
    """
    if exc.status_code >= 500:
        logger.error("app_error", path=request.url.path, error=exc.message)
    return error_response(exc.status_code, exc.message, **exc.extra)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """
    Handle HTTP exceptions, including unmatched routes.

    Args:
        request: Request object
        exc: HTTP exception

    Returns:
        JSON error response
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "Not found")
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError | PydanticValidationError,
) -> JSONResponse:
    """
    Handle validation errors.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        400 response with validation details
    """
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation error",
        details=validation_details(exc),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: Request object
        exc: Exception

    Returns:
        Generic 500 response
    """
    logger.exception(
        "unhandled_error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")


def register_exception_handlers(app: FastAPI) -> None:
    """Route every failure through the ``{ok: false}`` envelope."""
    handlers = [
        (AppException, app_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (PydanticValidationError, validation_exception_handler),
        (Exception, general_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, handler)  # type: ignore[arg-type]
