"""
Error Handling Module

Maps every failure onto the response envelope:
- Application exceptions carry their own status and machine-readable code
- Request validation errors become 400 ``validation-error`` with field details
- Starlette HTTP errors (unknown route, wrong method) become ``http-<status>``
- Unique-constraint violations that escape the services become 409
- Anything else is logged with its traceback and hidden behind a generic 500

Every handled error increments the ``api_errors_total`` counter.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from zyrotech.core.exceptions import AppException
from zyrotech.core.logging import get_logger
from zyrotech.monitoring.prometheus import get_api_errors_total

# Initialize logger
logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"


def create_error_response(
    status_code: int,
    message: str,
    code: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Create an error envelope.

    Args:
        status_code: HTTP status code
        message: Human readable message
        code: Machine readable error code
        errors: Optional per-field validation details
        headers: Optional response headers

    Returns:
        JSONResponse with ``status`` "fail" for 4xx and "error" for 5xx
    """
    body: Dict[str, Any] = {
        "status": "fail" if 400 <= status_code < 500 else "error",
        "message": message,
        "code": code,
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _track(error_type: str, code: str, status_code: int) -> None:
    get_api_errors_total().labels(
        error_type=error_type,
        code=code,
        status_code=status_code
    ).inc()


async def handle_app_exception(
    request: Request,
    exc: AppException
) -> JSONResponse:
    """Handle custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Application error: {exc.message}",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.extra
        }
    )
    _track(exc.__class__.__name__, exc.code, exc.status_code)

    return create_error_response(exc.status_code, exc.message, exc.code)


async def handle_validation_error(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    error_details = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment
        loc = [str(x) for x in error["loc"]]
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        error_details.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"]
        })

    logger.info(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "validation_errors": error_details
        }
    )
    _track("ValidationError", "validation-error", status.HTTP_400_BAD_REQUEST)

    first = error_details[0] if error_details else None
    message = (
        f"Invalid value for {first['field']}: {first['message']}"
        if first and first["field"] else "Invalid request data"
    )
    return create_error_response(
        status.HTTP_400_BAD_REQUEST,
        message,
        "validation-error",
        errors=error_details
    )


async def handle_http_exception(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Handle Starlette HTTP exceptions (unknown routes, wrong methods)."""
    code = f"http-{exc.status_code}"
    logger.info(
        f"HTTP error: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method
        }
    )
    _track("HTTPException", code, exc.status_code)

    return create_error_response(
        exc.status_code,
        str(exc.detail),
        code,
        headers=getattr(exc, "headers", None)
    )


async def handle_integrity_error(
    request: Request,
    exc: IntegrityError
) -> JSONResponse:
    """Unique-constraint races the services did not pre-empt."""
    logger.warning(
        "Integrity error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc.orig)
        }
    )
    _track("IntegrityError", "duplicate-resource", status.HTTP_409_CONFLICT)

    return create_error_response(
        status.HTTP_409_CONFLICT,
        "Resource already exists",
        "duplicate-resource"
    )


async def handle_generic_exception(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle any unhandled exceptions."""
    logger.critical(
        f"Unhandled error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method
        },
        exc_info=exc
    )
    _track(exc.__class__.__name__, "internal-error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        GENERIC_ERROR_MESSAGE,
        "internal-error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, handle_app_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_exception)

    logger.info("Exception handlers registered successfully")


__all__ = [
    "create_error_response",
    "handle_app_exception",
    "handle_validation_error",
    "handle_http_exception",
    "handle_integrity_error",
    "handle_generic_exception",
    "register_exception_handlers",
]
