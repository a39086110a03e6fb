"""Circuit breaker for calls to flaky dependencies.

A breaker sits in front of one operation key. It starts closed and lets calls
through. After ``failure_threshold`` consecutive failures it opens and rejects
every call with ``CircuitOpenError`` until ``recovery_timeout`` has passed
since the last failure. The next call then probes in the half-open state:
``success_threshold`` successes close the circuit again, while a single
failure reopens it.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from src.shared.datetime_utils import utc_now
from src.shared.exceptions import CircuitOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


@dataclass(frozen=True)
class CircuitStats:
    """Snapshot of a breaker's counters."""

    name: str
    state: CircuitState
    failure_count: int
    success_count: int
    last_failure_time: datetime | None


class CircuitBreaker:
    """Three-state circuit breaker for a single operation key."""

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        success_threshold: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the breaker.

        Args:
            name: Operation key, used in errors and logs
            failure_threshold: Consecutive failures that open the circuit
            recovery_timeout: Seconds to stay open before probing
            success_threshold: Half-open successes needed to close
            clock: Monotonic clock in seconds
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.success_threshold = success_threshold
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float | None = None
        self._last_failure_time: datetime | None = None

    @property
    def state(self) -> CircuitState:
        return self._state

    def stats(self) -> CircuitStats:
        return CircuitStats(
            name=self.name,
            state=self._state,
            failure_count=self._failure_count,
            success_count=self._success_count,
            last_failure_time=self._last_failure_time,
        )

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` through the breaker.

        Args:
            operation: Zero-argument coroutine factory

        Returns:
            The operation's result

        Raises:
            CircuitOpenError: If the circuit is open. The operation is not invoked.
            Exception: Whatever the operation raised, after it is recorded.
        """
        self._before_call()

        try:
            result = await operation()
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def reset(self) -> None:
        """Force the breaker back to closed with cleared counters."""
        self._transition(CircuitState.CLOSED)
        self._failure_count = 0
        self._success_count = 0
        self._opened_at = None

    def _before_call(self) -> None:
        if self._state is not CircuitState.OPEN:
            return

        elapsed = self._clock() - (self._opened_at or 0.0)
        if elapsed < self.recovery_timeout:
            raise CircuitOpenError(self.name, self._last_failure_time)

        self._success_count = 0
        self._transition(CircuitState.HALF_OPEN)

    def _on_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.success_threshold:
                self._failure_count = 0
                self._success_count = 0
                self._opened_at = None
                self._transition(CircuitState.CLOSED)
        else:
            self._failure_count = 0

    def _on_failure(self) -> None:
        self._failure_count += 1
        self._opened_at = self._clock()
        self._last_failure_time = utc_now()

        if self._state is CircuitState.HALF_OPEN:
            self._success_count = 0
            self._transition(CircuitState.OPEN)
        elif self._failure_count >= self.failure_threshold:
            self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        if new_state is self._state:
            return
        old_state = self._state
        self._state = new_state

        log = logger.warning if new_state is CircuitState.OPEN else logger.info
        log(
            f"Circuit '{self.name}' {old_state.value} -> {new_state.value}",
            extra={
                "circuit": self.name,
                "from_state": old_state.value,
                "to_state": new_state.value,
                "failure_count": self._failure_count,
            },
        )


class CircuitBreakerRegistry:
    """Holds one breaker per operation key, created on first use."""

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        success_threshold: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.success_threshold = success_threshold
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}

    def get(self, key: str) -> CircuitBreaker:
        """Return the breaker for ``key``, creating it with registry defaults."""
        breaker = self._breakers.get(key)
        if breaker is None:
            breaker = CircuitBreaker(
                name=key,
                failure_threshold=self.failure_threshold,
                recovery_timeout=self.recovery_timeout,
                success_threshold=self.success_threshold,
                clock=self._clock,
            )
            self._breakers[key] = breaker
        return breaker

    async def execute(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` through the breaker for ``key``."""
        return await self.get(key).call(operation)

    def states(self) -> dict[str, CircuitStats]:
        return {key: breaker.stats() for key, breaker in self._breakers.items()}

    def reset(self) -> None:
        """Reset every breaker to closed."""
        for breaker in self._breakers.values():
            breaker.reset()
