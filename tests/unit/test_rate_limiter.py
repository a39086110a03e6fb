"""Unit tests for the fixed-window rate limiter."""

import pytest

from src.modules.resilience.rate_limiter import RateLimiter


class FakeClock:
    """Millisecond clock controlled by the test."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    """Tests for RateLimiter.check_rate_limit."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, clock):
        return RateLimiter(default_max_requests=3, default_window_ms=1000, clock=clock)

    def test_first_call_opens_window(self, limiter):
        """Test the first call is allowed and starts a window."""
        assert limiter.check_rate_limit("anthropic") is True

        window = limiter.get_window("anthropic")
        assert window.count == 1
        assert window.reset_time == 1000

    def test_denies_after_max_requests(self, limiter):
        """Test calls beyond the limit are refused."""
        results = [limiter.check_rate_limit("anthropic") for _ in range(4)]

        assert results == [True, True, True, False]

    def test_denied_call_does_not_count(self, limiter):
        """Test refused calls leave the count unchanged."""
        for _ in range(5):
            limiter.check_rate_limit("anthropic")

        assert limiter.get_window("anthropic").count == 3

    def test_window_resets_after_expiry(self, limiter, clock):
        """Test a call after the reset time opens a fresh window."""
        for _ in range(3):
            limiter.check_rate_limit("anthropic")
        assert limiter.check_rate_limit("anthropic") is False

        clock.now = 1001
        assert limiter.check_rate_limit("anthropic") is True
        assert limiter.get_window("anthropic").count == 1

    def test_window_still_active_at_reset_time(self, limiter, clock):
        """Test the window only expires strictly after its reset time."""
        for _ in range(3):
            limiter.check_rate_limit("anthropic")

        clock.now = 1000
        assert limiter.check_rate_limit("anthropic") is False

    def test_keys_are_independent(self, limiter):
        """Test one key's window does not affect another's."""
        for _ in range(3):
            limiter.check_rate_limit("a")

        assert limiter.check_rate_limit("a") is False
        assert limiter.check_rate_limit("b") is True

    def test_explicit_limits_override_defaults(self, limiter):
        """Test per-call limits take precedence over defaults."""
        assert limiter.check_rate_limit("k", max_requests=1, window_ms=50) is True
        assert limiter.check_rate_limit("k", max_requests=1, window_ms=50) is False

    def test_retry_after_seconds(self, limiter, clock):
        """Test the time until reset is reported in seconds."""
        limiter.check_rate_limit("anthropic")
        clock.now = 400

        assert limiter.retry_after_seconds("anthropic") == pytest.approx(0.6)
        assert limiter.retry_after_seconds("unknown") == 0.0

    def test_get_window_returns_copy(self, limiter):
        """Test callers cannot mutate limiter state through get_window."""
        limiter.check_rate_limit("anthropic")
        window = limiter.get_window("anthropic")
        window.count = 99

        assert limiter.get_window("anthropic").count == 1


class TestRateLimiterMaintenance:
    """Tests for pruning and resetting windows."""

    def test_prune_expired(self):
        """Test only expired windows are pruned."""
        clock = FakeClock()
        limiter = RateLimiter(default_window_ms=100, clock=clock)
        limiter.check_rate_limit("old")
        clock.now = 150
        limiter.check_rate_limit("new")

        assert limiter.prune_expired() == 1
        assert limiter.get_window("old") is None
        assert limiter.get_window("new") is not None

    def test_reset_single_key_and_all(self):
        """Test reset forgets one key or every key."""
        limiter = RateLimiter()
        limiter.check_rate_limit("a")
        limiter.check_rate_limit("b")

        limiter.reset("a")
        assert limiter.get_window("a") is None
        assert limiter.get_window("b") is not None

        limiter.reset()
        assert limiter.get_window("b") is None
