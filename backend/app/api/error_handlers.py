"""Error Handlers — global exception handlers for the storefront API.

Invariants:
    - StorefrontError → its http_status + {success: false, message, error} envelope
    - RequestValidationError → 400 envelope with field-level details
    - Starlette HTTPException → same envelope; unmatched routes echo the path
    - Exception (catch-all) → 500, never leaks internals outside development

Design Decisions:
    - Four-layer handler: domain, validation, HTTP, catch-all
    - Extracted from main.py to keep the app module declarative
"""

import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.errors import ErrorCategory, ErrorSeverity, StorefrontError

logger = logging.getLogger(__name__)

_HTTP_CATEGORIES = {
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.AUTHORIZATION,
    404: ErrorCategory.RESOURCE_NOT_FOUND,
    409: ErrorCategory.CONFLICT,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_storefront_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_storefront_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        """Handle all storefront domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"StorefrontError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "status_code": exc.http_status,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Routing-level errors (unknown path, wrong method) in the same envelope."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = f"Route not found - {request.url.path}"
        else:
            message = str(exc.detail)
        category = _HTTP_CATEGORIES.get(exc.status_code, ErrorCategory.VALIDATION)
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(message, f"HTTP_{exc.status_code}", category,
                              ErrorSeverity.WARNING),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — internal detail only in development."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        content = _envelope(
            "An unexpected error occurred", "INTERNAL_ERROR",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        )
        if get_settings().is_development:
            content["error"]["detail"] = repr(exc)
            content["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__),
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content,
        )


def _envelope(
    message: str, code: str, category: ErrorCategory, severity: ErrorSeverity,
) -> dict:
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "category": category.value,
            "severity": severity.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    content = _envelope(
        "Invalid request data", "VALIDATION_ERROR",
        ErrorCategory.VALIDATION, ErrorSeverity.ERROR,
    )
    content["error"]["details"] = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return content
