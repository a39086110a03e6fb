"""Unit tests for retry with exponential backoff."""

import pytest
from unittest.mock import AsyncMock

from src.modules.resilience.retry import RetryHandler, RetryPolicy, is_retryable
from src.shared.exceptions import (
    AuthenticationError,
    CircuitOpenError,
    CompletionPreconditionError,
    LLMServiceError,
    LLMTimeoutError,
    RateLimitExceededError,
    ResponseParseError,
    ValidationError,
)


class TestRetryPolicy:
    """Tests for RetryPolicy delays."""

    def test_delays_grow_exponentially(self):
        """Test delay doubles with the default multiplier."""
        policy = RetryPolicy(max_retries=3, base_delay_ms=1000, backoff_multiplier=2.0)

        assert [policy.delay_seconds(n) for n in range(3)] == [1.0, 2.0, 4.0]


class TestIsRetryable:
    """Tests for error classification."""

    @pytest.mark.parametrize("error", [
        ValidationError("request", "bad"),
        AuthenticationError("bad key"),
        CircuitOpenError("ai-insight", None),
        CompletionPreconditionError("s1", 3, 12),
        LLMTimeoutError(30.0),
    ])
    def test_non_retryable_kinds(self, error):
        """Test errors whose kind rules out another attempt."""
        assert is_retryable(error) is False

    @pytest.mark.parametrize("error", [
        LLMServiceError("server error", 500),
        RateLimitExceededError("anthropic", 5),
        ResponseParseError("garbled"),
        RuntimeError("transport"),
    ])
    def test_retryable_errors(self, error):
        """Test transient failures are retried."""
        assert is_retryable(error) is True


class TestRetryHandler:
    """Tests for RetryHandler.with_retry."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.fixture
    def handler(self, sleep):
        return RetryHandler(
            RetryPolicy(max_retries=3, base_delay_ms=1000, backoff_multiplier=2.0),
            sleep=sleep,
        )

    @pytest.mark.asyncio
    async def test_returns_first_success(self, handler, sleep):
        """Test a successful operation runs once."""
        operation = AsyncMock(return_value="ok")

        assert await handler.with_retry(operation) == "ok"
        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_until_success(self, handler, sleep):
        """Test transient failures are retried with backoff."""
        operation = AsyncMock(side_effect=[
            LLMServiceError("503", 503),
            LLMServiceError("503", 503),
            "ok",
        ])

        assert await handler.with_retry(operation) == "ok"
        assert operation.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, handler, sleep):
        """Test the last error is re-raised unchanged after max_retries + 1 attempts."""
        error = LLMServiceError("down", 503)
        operation = AsyncMock(side_effect=error)

        with pytest.raises(LLMServiceError) as exc_info:
            await handler.with_retry(operation)

        assert exc_info.value is error
        assert operation.await_count == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self, handler, sleep):
        """Test validation errors are not retried."""
        operation = AsyncMock(side_effect=ValidationError("request", "bad"))

        with pytest.raises(ValidationError):
            await handler.with_retry(operation)

        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_per_call_overrides(self, handler, sleep):
        """Test per-call parameters override the policy."""
        operation = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await handler.with_retry(operation, max_retries=1, base_delay_ms=10)

        assert operation.await_count == 2
        assert [c.args[0] for c in sleep.await_args_list] == [0.01]

    @pytest.mark.asyncio
    async def test_zero_retries_runs_once(self, handler):
        """Test max_retries=0 means a single attempt."""
        operation = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await handler.with_retry(operation, max_retries=0)

        operation.assert_awaited_once()
