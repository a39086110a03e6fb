"""Rate limiting middleware for API endpoints."""

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from src.modules.resilience import RateLimiter
from src.shared.constants import RATE_LIMIT_CLEANUP_PROBABILITY

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests: int  # Number of requests allowed
    window_seconds: int  # Time window in seconds


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware for rate limiting API requests.

    Counts requests per client IP and endpoint prefix with the same
    fixed-window ``RateLimiter`` the AI client uses, under ``api:`` keys.

    Features:
    - Per-IP rate limiting
    - Per-endpoint configuration
    - Proper 429 responses with Retry-After header
    """

    # Default rate limits by endpoint prefix, most specific first
    DEFAULT_LIMITS: Dict[str, RateLimitConfig] = {
        "/assessments/start": RateLimitConfig(requests=10, window_seconds=300),  # 10 per 5 min
        "/assessments": RateLimitConfig(requests=120, window_seconds=60),  # 120 per minute
        "/insights": RateLimitConfig(requests=60, window_seconds=60),  # 60 per minute
        "/health": RateLimitConfig(requests=1000, window_seconds=60),  # 1000 per minute
    }

    def __init__(
        self,
        app,
        limiter: RateLimiter | None = None,
        custom_limits: Dict[str, RateLimitConfig] | None = None,
    ):
        """Initialize rate limiting middleware.

        Args:
            app: ASGI application
            limiter: Shared fixed-window limiter (a private one if omitted)
            custom_limits: Custom rate limit configurations to override defaults
        """
        super().__init__(app)
        self.limiter = limiter or RateLimiter()
        self.limits = {**self.DEFAULT_LIMITS}
        if custom_limits:
            self.limits.update(custom_limits)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting.

        Returns:
            HTTP response (429 if rate limited)
        """
        client_ip = self._get_client_ip(request)
        path = request.url.path

        match = self._get_limit_config(path)
        if match:
            prefix, config = match
            key = f"api:{client_ip}:{prefix}"

            # Probabilistic cleanup to prevent unbounded memory growth
            if random.random() < RATE_LIMIT_CLEANUP_PROBABILITY:
                self.limiter.prune_expired()

            allowed = self.limiter.check_rate_limit(
                key, config.requests, config.window_seconds * 1000
            )
            if not allowed:
                retry_after = max(1, math.ceil(self.limiter.retry_after_seconds(key)))
                logger.warning(
                    f"Rate limit exceeded for IP {client_ip} on endpoint {path}. "
                    f"Retry after {retry_after} seconds"
                )
                return JSONResponse(
                    status_code=HTTP_429_TOO_MANY_REQUESTS,
                    content={
                        "error": "Too many requests",
                        "message": f"Rate limit exceeded. Please try again in {retry_after} seconds.",
                        "retry_after": retry_after,
                    },
                    headers={"Retry-After": str(retry_after)},
                )

        return await call_next(request)

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request.

        Handles proxy headers (X-Forwarded-For, X-Real-IP).
        """
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # X-Forwarded-For can contain multiple IPs, use the first one
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

        if request.client:
            return request.client.host

        return "unknown"

    def _get_limit_config(self, path: str) -> tuple[str, RateLimitConfig] | None:
        """Find the endpoint prefix and limit that apply to a path.

        Returns:
            (prefix, config) or None if the path is not limited
        """
        if path in self.limits:
            return path, self.limits[path]

        # Prefix match (e.g., /insights/abc matches /insights)
        for endpoint_pattern, config in self.limits.items():
            if path.startswith(endpoint_pattern):
                return endpoint_pattern, config

        return None
