"""Exception handlers that render every error as the JSON envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from review_assistant.errors import AppError
from review_assistant.models.review import APIResponse, ErrorBody

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: ErrorBody) -> JSONResponse:
    body = APIResponse(success=False, error=error).model_dump(
        mode="json", exclude_none=True
    )
    return JSONResponse(status_code=status_code, content=body)


def error_response(exc: AppError) -> JSONResponse:
    """Render an ``AppError`` with its own status and code."""
    return _envelope(
        exc.status_code,
        ErrorBody(
            message=exc.message, code=exc.code, details=jsonable_encoder(exc.details)
        ),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "Request error on %s %s: %s (%s)",
        request.method,
        request.url.path,
        exc.message,
        exc.code,
    )
    return error_response(exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _envelope(
        400,
        ErrorBody(
            message="Invalid request body",
            code="VALIDATION_ERROR",
            details=jsonable_encoder(exc.errors()),
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        error = ErrorBody(message="Not found", code="NOT_FOUND")
    else:
        error = ErrorBody(message=str(exc.detail), code="HTTP_ERROR")
    return _envelope(exc.status_code, error)


def internal_error_response() -> JSONResponse:
    return _envelope(
        500, ErrorBody(message="Internal server error", code="INTERNAL_ERROR")
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return internal_error_response()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
