"""
Global Error Handlers for the Payroll Calculation Engine

Every failure leaves the API in one envelope:

    {"error": true, "status_code": ..., "detail": ..., "timestamp": ...,
     "error_code": ..., "error_data": {...}, "request_id": ...}

Calculation failures additionally name the employee and the region at the
top level so bulk callers and log shippers can key on them directly.
"""

import logging
import traceback
from typing import Dict, Any, Optional, Tuple
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError, HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException

from payroll_engine.core.exceptions import BaseAPIException, PayrollCalculationError
from payroll_engine.core.config import settings

logger = logging.getLogger(__name__)

CALCULATION_CONTEXT_FIELDS = ("employee_id", "region")


def create_error_response(
    status_code: int,
    detail: str,
    error_code: str = None,
    error_data: Dict[str, Any] = None,
    request_id: str = None,
    **context: Any
) -> JSONResponse:
    """Build the error envelope; ``context`` entries land at the top level."""

    content = {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    content.update({key: value for key, value in context.items() if value is not None})

    if error_code:
        content["error_code"] = error_code
    if error_data:
        content["error_data"] = error_data
    if request_id:
        content["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method,
    }


def _split_calculation_context(
    exc: BaseAPIException,
) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """Pull employee/region out of a calculation error's data."""
    error_data = dict(exc.error_data or {})
    if not isinstance(exc, PayrollCalculationError):
        return {}, error_data or None

    context = {field: error_data.pop(field, None) for field in CALCULATION_CONTEXT_FIELDS}
    return context, error_data or None


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle payroll engine exceptions."""

    request_context = _request_context(request)
    calculation_context, error_data = _split_calculation_context(exc)

    logger.warning(
        f"API Exception: {exc.error_code or 'UNKNOWN'} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "error_code": exc.error_code,
            "error_data": exc.error_data,
            **request_context,
        }
    )

    return create_error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        error_code=exc.error_code,
        error_data=error_data,
        request_id=request_context["request_id"],
        **calculation_context
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-raised HTTP errors."""

    request_context = _request_context(request)
    logger.warning(
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        extra={"status_code": exc.status_code, **request_context}
    )

    return create_error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        error_code="HTTP_EXCEPTION",
        request_id=request_context["request_id"]
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed calculation requests."""

    request_context = _request_context(request)
    validation_errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
            "input": error.get("input"),
        }
        for error in exc.errors()
    ]

    logger.warning(
        f"Validation Error: {len(validation_errors)} validation error(s)",
        extra={"validation_errors": validation_errors, **request_context}
    )

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Request validation failed",
        error_code="VALIDATION_ERROR",
        error_data={"validation_errors": validation_errors},
        request_id=request_context["request_id"]
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_context = _request_context(request)

    logger.error(
        f"Unhandled Exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
            **request_context,
        }
    )

    error_data = None
    detail = "An unexpected error occurred. Please try again later."
    if settings.debug:
        detail = f"Internal server error: {str(exc)}"
        error_data = {
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc().split('\n')
        }

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
        error_code="INTERNAL_SERVER_ERROR",
        error_data=error_data,
        request_id=request_context["request_id"]
    )


ERROR_HANDLERS = {
    BaseAPIException: base_api_exception_handler,
    HTTPException: http_exception_handler,
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    Exception: generic_exception_handler,
}


def register_error_handlers(app):
    """Register all error handlers with the FastAPI app."""

    for exception_class, handler in ERROR_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

    logger.info("Error handlers registered successfully")
