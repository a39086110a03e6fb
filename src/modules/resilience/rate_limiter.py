"""Fixed-window rate limiter keyed by caller."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_MS = 900_000  # 15 minutes


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RateWindow:
    """Request count for one caller key within the current window."""

    count: int
    reset_time: float  # epoch milliseconds


class RateLimiter:
    """Counts requests per key in fixed windows.

    The limiter is advisory: ``check_rate_limit`` only answers whether the
    call may proceed, and callers short-circuit themselves when it says no.

    Each key has its own window. A window starts on the first call for a key
    (or the first call after the previous window expired) and admits
    ``max_requests`` calls until ``window_ms`` has passed.
    """

    def __init__(
        self,
        default_max_requests: int = DEFAULT_MAX_REQUESTS,
        default_window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            default_max_requests: Requests allowed per window when the caller
                does not pass a limit.
            default_window_ms: Window length in milliseconds when the caller
                does not pass one.
            clock: Returns the current time in milliseconds.
        """
        self.default_max_requests = default_max_requests
        self.default_window_ms = default_window_ms
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    def check_rate_limit(
        self,
        key: str,
        max_requests: int | None = None,
        window_ms: int | None = None,
    ) -> bool:
        """Record a call for ``key`` and report whether it is allowed.

        Args:
            key: Caller identity (service name, client IP, ...)
            max_requests: Calls allowed per window
            window_ms: Window length in milliseconds

        Returns:
            True if the call is within the limit, False if it must be refused
        """
        max_requests = self.default_max_requests if max_requests is None else max_requests
        window_ms = self.default_window_ms if window_ms is None else window_ms

        with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or now > window.reset_time:
                self._windows[key] = RateWindow(count=1, reset_time=now + window_ms)
                return True

            if window.count >= max_requests:
                logger.debug(
                    f"Rate limit reached for '{key}' ({window.count}/{max_requests})"
                )
                return False

            window.count += 1
            return True

    def retry_after_seconds(self, key: str) -> float:
        """Seconds until the window for ``key`` resets (0 if there is none)."""
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return 0.0
            return max(0.0, (window.reset_time - self._clock()) / 1000)

    def get_window(self, key: str) -> RateWindow | None:
        """Return a copy of the current window for ``key``."""
        with self._lock:
            window = self._windows.get(key)
            return RateWindow(window.count, window.reset_time) if window else None

    def prune_expired(self) -> int:
        """Drop windows that have already expired.

        Returns:
            Number of windows removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, w in self._windows.items() if now > w.reset_time]
            for key in expired:
                del self._windows[key]
        if expired:
            logger.debug(f"Rate limiter cleanup: removed {len(expired)} windows")
        return len(expired)

    def reset(self, key: str | None = None) -> None:
        """Forget the window for ``key``, or every window when key is None."""
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)
