"""
Exception handlers rendering FAQ display errors as JSON.

Every error response has the shape::

    {"error": {"code": ..., "message": ..., "status_code": ...}}

Client errors (missing or hidden content elements) are logged at WARNING,
server errors (storage failures, unexpected exceptions) at ERROR.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from faq_display.core.exceptions import BaseAppException

logger = logging.getLogger(__name__)


def _error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {"code": code, "message": message, "status_code": status_code}
        },
    )


def log_level_for(status_code: int) -> int:
    """Log level for an error response with ``status_code``."""
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return logging.ERROR
    return logging.WARNING


async def base_exception_handler(
    request: Request, exc: BaseAppException
) -> JSONResponse:
    """Render an application exception with its own code and status."""
    logger.log(
        log_level_for(exc.status_code),
        f"{exc.error_code} on {request.method} {request.url.path}: {exc.detail}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    return _error_response(exc.error_code, str(exc.detail), exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any other exception as a generic 500 without internal details."""
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}"
    )
    return _error_response(
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
