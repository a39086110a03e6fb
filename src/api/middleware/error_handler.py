"""Global exception handlers for the API."""

import logging
import math
import traceback
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.shared.config import get_settings
from src.shared.exceptions import (
    AssessmentServiceError,
    ErrorKind,
    RateLimitExceededError,
)

settings = get_settings()
logger = logging.getLogger(__name__)


# Every ErrorKind maps to exactly one (HTTP status, error code) pair.
ERROR_KIND_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"),
    ErrorKind.AUTHENTICATION: (status.HTTP_401_UNAUTHORIZED, "AUTHENTICATION_ERROR"),
    ErrorKind.AUTHORIZATION: (status.HTTP_403_FORBIDDEN, "AUTHORIZATION_ERROR"),
    ErrorKind.RATE_LIMIT: (status.HTTP_429_TOO_MANY_REQUESTS, "RATE_LIMIT_EXCEEDED"),
    ErrorKind.EXTERNAL_SERVICE: (status.HTTP_503_SERVICE_UNAVAILABLE, "SERVICE_UNAVAILABLE"),
    ErrorKind.TIMEOUT: (status.HTTP_504_GATEWAY_TIMEOUT, "UPSTREAM_TIMEOUT"),
    ErrorKind.PARSE: (status.HTTP_502_BAD_GATEWAY, "UPSTREAM_PARSE_ERROR"),
    ErrorKind.CIRCUIT_OPEN: (status.HTTP_503_SERVICE_UNAVAILABLE, "CIRCUIT_OPEN"),
    ErrorKind.COMPLETION_PRECONDITION: (status.HTTP_409_CONFLICT, "ASSESSMENT_INCOMPLETE"),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    ErrorKind.INVALID_STATE: (status.HTTP_409_CONFLICT, "CONFLICT"),
    ErrorKind.CONFIGURATION: (status.HTTP_500_INTERNAL_SERVER_ERROR, "CONFIGURATION_ERROR"),
}


def response_for_kind(kind: ErrorKind) -> tuple[int, str]:
    """Look up the HTTP status and error code for an error kind."""
    return ERROR_KIND_RESPONSES[kind]


def create_error_response(
    request_id: str,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create standardized error response.

    Args:
        request_id: Unique request identifier
        error_code: Error code string
        message: Human-readable error message
        details: Optional additional details

    Returns:
        Structured error response dict
    """
    return {
        "success": False,
        "error": {
            "code": error_code,
            "message": message,
            "details": details or {},
        },
        "request_id": request_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup global exception handlers for the application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        request_id = getattr(request.state, "request_id", str(uuid4()))

        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append({
                "field": loc,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            f"Validation Error: {len(errors)} errors",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "errors": errors,
            },
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=create_error_response(
                request_id=request_id,
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"errors": errors},
            ),
        )

    @app.exception_handler(AssessmentServiceError)
    async def domain_exception_handler(
        request: Request, exc: AssessmentServiceError
    ) -> JSONResponse:
        """Handle domain exceptions by their error kind."""
        request_id = getattr(request.state, "request_id", str(uuid4()))
        status_code, error_code = response_for_kind(exc.kind)

        logger.warning(
            f"Domain Exception: {exc.__class__.__name__} - {exc.message}",
            extra={
                "request_id": request_id,
                "error_type": exc.__class__.__name__,
                "error_kind": exc.kind.value,
                "status_code": status_code,
                "path": request.url.path,
            },
        )

        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(max(1, math.ceil(exc.retry_after)))}

        return JSONResponse(
            status_code=status_code,
            content=create_error_response(
                request_id=request_id,
                error_code=error_code,
                message=exc.message,
                details=exc.details,
            ),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        request_id = getattr(request.state, "request_id", str(uuid4()))

        # Log full traceback in development
        if settings.is_development:
            logger.error(
                f"Unhandled Exception: {type(exc).__name__}: {str(exc)}",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "traceback": traceback.format_exc(),
                },
            )
        else:
            logger.error(
                f"Unhandled Exception: {type(exc).__name__}",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                },
            )

        # Don't expose internal errors in production
        message = str(exc) if settings.is_development else "Internal server error"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response(
                request_id=request_id,
                error_code="INTERNAL_ERROR",
                message=message,
            ),
        )
