"""Exception handlers: every error leaves as {"error", "code", "retryable"}."""

import logging
from typing import Dict, Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from recommender.errors import (
    EmbeddingFailed,
    EmbeddingUnavailable,
    EmptyCatalog,
    NoPreferences,
    RecommenderError,
)

from .models import ErrorResponse

logger = logging.getLogger(__name__)

EXCEPTION_STATUS_MAP: Dict[Type[Exception], int] = {
    NoPreferences: status.HTTP_400_BAD_REQUEST,
    EmptyCatalog: status.HTTP_404_NOT_FOUND,
    EmbeddingFailed: status.HTTP_503_SERVICE_UNAVAILABLE,
    EmbeddingUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str, code: str, retryable: bool = False) -> Dict:
    return ErrorResponse(error=message, code=code, retryable=retryable).model_dump()


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that wrap exceptions in the error body."""
    app.add_exception_handler(RecommenderError, _recommender_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


async def _recommender_error_handler(request: Request, exc: RecommenderError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("[error] %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.info("[error] %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, exc.code, exc.retryable),
    )


def _format_validation_message(errors: list) -> str:
    if not errors:
        return "Validation error"
    parts = []
    for error in errors:
        loc = ".".join(str(item) for item in error.get("loc", []))
        msg = error.get("msg", "Validation error")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


async def _request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(_format_validation_message(exc.errors()), "InvalidRequest"),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[error] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", "InternalError"),
    )
