"""Retry with exponential backoff."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from src.shared.exceptions import AssessmentServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Default retry parameters."""

    max_retries: int = 3
    base_delay_ms: float = 1000
    backoff_multiplier: float = 2.0

    def delay_seconds(self, attempt: int) -> float:
        """Delay before retrying after the given 0-indexed attempt."""
        return self.base_delay_ms * (self.backoff_multiplier ** attempt) / 1000


def is_retryable(error: BaseException) -> bool:
    """Decide whether an error is worth another attempt.

    Domain errors answer for themselves through their kind. Anything else
    (timeouts, transport failures) is treated as transient.
    """
    if isinstance(error, AssessmentServiceError):
        return error.is_retryable
    return True


class RetryHandler:
    """Re-invokes a failing async operation with exponential backoff."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        max_retries: int | None = None,
        base_delay_ms: float | None = None,
        backoff_multiplier: float | None = None,
    ) -> T:
        """Run ``operation``, retrying transient failures.

        The operation runs at most ``max_retries + 1`` times. Before retry
        ``n`` (0-indexed) the handler waits
        ``base_delay_ms * backoff_multiplier ** n`` milliseconds.

        Args:
            operation: Zero-argument coroutine factory
            max_retries: Retries after the first attempt
            base_delay_ms: Delay before the first retry
            backoff_multiplier: Growth factor between delays

        Returns:
            The operation's result

        Raises:
            The first non-retryable error, or the last error once retries
            are exhausted. Errors are re-raised unchanged.
        """
        policy = RetryPolicy(
            max_retries=self.policy.max_retries if max_retries is None else max_retries,
            base_delay_ms=self.policy.base_delay_ms if base_delay_ms is None else base_delay_ms,
            backoff_multiplier=(
                self.policy.backoff_multiplier
                if backoff_multiplier is None
                else backoff_multiplier
            ),
        )

        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if not is_retryable(e):
                    logger.debug(f"Not retrying non-retryable error: {e}")
                    raise
                if attempt >= policy.max_retries:
                    logger.warning(
                        f"Giving up after {attempt + 1} attempts: {e}",
                        extra={"attempts": attempt + 1},
                    )
                    raise

                delay = policy.delay_seconds(attempt)
                logger.warning(
                    f"Attempt {attempt + 1} failed, retrying in {delay:.2f}s: {e}",
                    extra={"attempt": attempt + 1, "delay_seconds": delay},
                )
                await self._sleep(delay)
                attempt += 1
