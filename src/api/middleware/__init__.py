"""API middleware package."""

from src.api.middleware.error_handler import create_error_response, setup_exception_handlers
from src.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from src.api.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware

__all__ = [
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "create_error_response",
    "setup_exception_handlers",
    "setup_logging",
]
