"""Resilience Module - Rate limiting, retries and circuit breaking.

Usage:
    from src.modules.resilience import RateLimiter, RetryHandler, CircuitBreakerRegistry

    limiter = RateLimiter()
    if limiter.check_rate_limit("anthropic", max_requests=100, window_ms=900_000):
        result = await breakers.execute("ai-insight", lambda: retry.with_retry(call))
"""

from src.modules.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerRegistry,
    CircuitState,
    CircuitStats,
)
from src.modules.resilience.rate_limiter import RateLimiter, RateWindow
from src.modules.resilience.retry import RetryHandler, RetryPolicy, is_retryable

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "CircuitState",
    "CircuitStats",
    "RateLimiter",
    "RateWindow",
    "RetryHandler",
    "RetryPolicy",
    "is_retryable",
]
