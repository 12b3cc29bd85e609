from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.exceptions import WebSocketException
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Sequence, Any

from flatflow.schemas.result import Error, Result, ErrorCategory
from flatflow.core.exception import CustomException

logger = logging.getLogger(__name__)


def _custom_exception_error(ex: CustomException) -> Error:
    return Error(message=ex.detail, status_code=ex.status_code, category=ex.category)


def _validation_error(
    ex: ValidationError | RequestValidationError | ResponseValidationError,
) -> Error:
    return Error(
        message=format_validation_errors(ex.errors()),
        status_code=422,
        category=ErrorCategory.VALIDATION,
    )


def _http_exception_error(ex: StarletteHTTPException) -> Error:
    return Error(
        message=ex.detail if isinstance(ex.detail, str) else str(ex.detail),
        status_code=ex.status_code,
        category=infer_category_from_status(ex.status_code),
    )


def _websocket_exception_error(ex: WebSocketException) -> Error:
    return Error(
        message=str(ex.reason) if ex.reason else str(ex),
        status_code=400,
        category=ErrorCategory.WEBSOCKET,
    )


# Exception type to error builder; first isinstance match wins
EXCEPTION_FORMATTERS = {
    CustomException: _custom_exception_error,
    ValidationError: _validation_error,
    RequestValidationError: _validation_error,
    ResponseValidationError: _validation_error,
    StarletteHTTPException: _http_exception_error,
    WebSocketException: _websocket_exception_error,
}


def exception_to_response(
    ex: Exception, request: Request, log_internal_errors: bool = True
) -> JSONResponse:
    """Turn any exception into a ``Result`` failure envelope."""
    for exc_type, build_error in EXCEPTION_FORMATTERS.items():
        if isinstance(ex, exc_type):
            return create_error_response(build_error(ex), headers=getattr(ex, "headers", None))

    if log_internal_errors:
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=ex,
            extra={
                "path": request.url.path,
                "method": request.method,
                "client": request.client.host if request.client else None,
            },
        )

    # Don't expose internal error details
    error = Error(
        message="An unexpected error occurred. Please try again later.",
        status_code=500,
        category=ErrorCategory.INTERNAL,
    )
    return create_error_response(error)


def create_error_response(error: Error, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=Result.failure(error).model_dump(mode="json"),
        headers=headers,
    )


def format_validation_errors(errors: Sequence[Any]) -> str:
    """Format validation errors into a human-readable message"""
    messages = []
    for error in errors:
        loc = " -> ".join(str(loc) for loc in error.get("loc", []))
        msg = error.get("msg", "Unknown error")
        error_type = error.get("type", "unknown")

        messages.append(f"Error in {loc}: {msg} (type: {error_type})")

    return "; ".join(messages) if messages else "Validation failed"


def infer_category_from_status(status_code: int) -> ErrorCategory:
    status_category_map = {
        401: ErrorCategory.AUTHENTICATION,
        403: ErrorCategory.AUTHORIZATION,
        404: ErrorCategory.NOT_FOUND,
        409: ErrorCategory.RESOURCE_CONFLICT,
        422: ErrorCategory.VALIDATION,
    }
    if status_code in status_category_map:
        return status_category_map[status_code]
    elif 400 <= status_code < 500:
        return ErrorCategory.BAD_REQUEST
    elif status_code >= 500:
        return ErrorCategory.INTERNAL
    else:
        return ErrorCategory.CUSTOM


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """
    Centralized exception handling for consistent API responses.

    Known exception types are converted by the handlers installed with
    :func:`register_exception_handlers` before FastAPI's defaults see them;
    this middleware catches whatever is left over and answers with the same
    envelope, a generic 500 for anything unknown.
    """

    def __init__(self, app, log_internal_errors: bool = True):
        super().__init__(app)
        self.log_internal_errors = log_internal_errors

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as ex:
            return exception_to_response(ex, request, self.log_internal_errors)


def register_exception_handlers(app: FastAPI, log_internal_errors: bool = True) -> None:
    """
    Install Result-envelope handlers for exceptions FastAPI would otherwise
    answer itself (HTTP exceptions and request validation errors).
    """

    async def _handler(request: Request, ex: Exception) -> JSONResponse:
        return exception_to_response(ex, request, log_internal_errors)

    app.add_exception_handler(StarletteHTTPException, _handler)
    app.add_exception_handler(RequestValidationError, _handler)
