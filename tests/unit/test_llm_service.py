"""Unit tests for the Anthropic LLM service wrapper."""

from types import SimpleNamespace

import anthropic
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.modules.llm.service import LLMService
from src.shared.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    LLMServiceError,
    LLMTimeoutError,
    RateLimitExceededError,
    ResponseParseError,
    ValidationError,
)

MESSAGES_URL = "https://api.anthropic.com/v1/messages"


def api_response(status_code, headers=None):
    return httpx.Response(
        status_code,
        headers=headers or {},
        request=httpx.Request("POST", MESSAGES_URL),
    )


def message(text="Hello", content=None):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)] if content is None else content,
        model="claude-test",
        usage=SimpleNamespace(input_tokens=12, output_tokens=34),
        stop_reason="end_turn",
    )


@pytest.fixture
def anthropic_client():
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=message())
    client.close = AsyncMock()
    return client


@pytest.fixture
def service(anthropic_client):
    return LLMService(api_key="test-key", default_model="claude-test", client=anthropic_client)


class TestLLMServiceComplete:
    """Tests for LLMService.complete."""

    @pytest.mark.asyncio
    async def test_returns_first_text_block(self, service, anthropic_client):
        response = await service.complete("Hi", max_tokens=100, temperature=0.5)

        assert response.content == "Hello"
        assert response.usage == {"input_tokens": 12, "output_tokens": 34}
        kwargs = anthropic_client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]
        assert "system" not in kwargs

    @pytest.mark.asyncio
    async def test_system_prompt_and_model_override(self, service, anthropic_client):
        await service.complete(
            "Hi", max_tokens=100, temperature=0.5, model="other", system_prompt="Be brief"
        )

        kwargs = anthropic_client.messages.create.await_args.kwargs
        assert kwargs["model"] == "other"
        assert kwargs["system"] == "Be brief"

    @pytest.mark.asyncio
    async def test_empty_content_raises_parse_error(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(return_value=message(content=[]))

        with pytest.raises(ResponseParseError):
            await service.complete("Hi", max_tokens=100, temperature=0.5)

    @pytest.mark.asyncio
    async def test_unconfigured_raises(self):
        service = LLMService(api_key=None, default_model="claude-test")

        assert service.is_configured is False
        with pytest.raises(ConfigurationError):
            await service.complete("Hi", max_tokens=100, temperature=0.5)


class TestLLMServiceErrorMapping:
    """Tests for translating SDK errors into error kinds."""

    @pytest.mark.asyncio
    async def test_rate_limit_carries_retry_after(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.RateLimitError(
            "slow down", response=api_response(429, {"retry-after": "7"}), body=None
        ))

        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.complete("Hi", max_tokens=100, temperature=0.5)

        assert exc_info.value.retry_after == 7.0
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_authentication_is_not_retryable(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.AuthenticationError(
            "bad key", response=api_response(401), body=None
        ))

        with pytest.raises(AuthenticationError) as exc_info:
            await service.complete("Hi", max_tokens=100, temperature=0.5)

        assert exc_info.value.kind is ErrorKind.AUTHENTICATION
        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_bad_request_is_validation(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.BadRequestError(
            "prompt too long", response=api_response(400), body=None
        ))

        with pytest.raises(ValidationError):
            await service.complete("Hi", max_tokens=100, temperature=0.5)

    @pytest.mark.asyncio
    async def test_server_error_is_retryable_service_error(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.InternalServerError(
            "overloaded", response=api_response(500), body=None
        ))

        with pytest.raises(LLMServiceError) as exc_info:
            await service.complete("Hi", max_tokens=100, temperature=0.5)

        assert exc_info.value.status_code == 500
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_connection_error(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.APIConnectionError(
            request=httpx.Request("POST", MESSAGES_URL)
        ))

        with pytest.raises(LLMServiceError):
            await service.complete("Hi", max_tokens=100, temperature=0.5)

    @pytest.mark.asyncio
    async def test_sdk_timeout_is_not_retryable(self, service, anthropic_client):
        anthropic_client.messages.create = AsyncMock(side_effect=anthropic.APITimeoutError(
            request=httpx.Request("POST", MESSAGES_URL)
        ))

        with pytest.raises(LLMTimeoutError) as exc_info:
            await service.complete("Hi", max_tokens=100, temperature=0.5)

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.is_retryable is False


class TestLLMServiceLifecycle:
    """Tests for construction and shutdown."""

    def test_from_settings_without_key(self, settings):
        service = LLMService.from_settings(settings)

        assert service.is_configured is False
        assert service.default_model == settings.default_model

    def test_real_client_built_with_key(self):
        service = LLMService(api_key="test-key", default_model="claude-test")

        assert isinstance(service.client, anthropic.AsyncAnthropic)
        assert service.client.max_retries == 0

    @pytest.mark.asyncio
    async def test_aclose(self, service, anthropic_client):
        await service.aclose()

        anthropic_client.close.assert_awaited_once()
