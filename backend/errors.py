"""
Exception handlers and request logging for the API.

Every error leaves the service as ``{"error": <message>}``. Persistence and
unexpected failures are logged with their traceback and reported as a generic
500 so no internals leak to clients.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas import ErrorResponse
from time_utils import utc_now, elapsed_seconds

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_response(status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    content = ErrorResponse(error=message).model_dump()
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException detail as the error message, keeping its status and headers."""
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Validation failed for {request.method} {request.url.path}: {len(exc.errors())} error(s)")
    return _error_response(
        422,
        "Validation failed",
        details=jsonable_encoder(exc.errors()),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error during {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled {type(exc).__name__} during {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def log_requests(request: Request, call_next):
    """Middleware to log request processing time and status."""
    started_at = utc_now()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} - {response.status_code} - {elapsed_seconds(started_at):.4f}s"
    )
    return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.middleware("http")(log_requests)
