"""LLM Service - Anthropic Claude API wrapper.

The service performs exactly one HTTP attempt per call (``max_retries=0`` on
the SDK client); retries, circuit breaking and the hard timeout are applied by
the caller. SDK exceptions are translated into the service's error kinds so
that the retry layer can tell transient failures from malformed requests.
"""

import logging
from dataclasses import dataclass

import anthropic
from anthropic import AsyncAnthropic

from src.shared.config import Settings
from src.shared.constants import AI_RATE_LIMIT_KEY
from src.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    LLMServiceError,
    LLMTimeoutError,
    RateLimitExceededError,
    ResponseParseError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _retry_after(error: anthropic.APIStatusError) -> float:
    try:
        return float(error.response.headers.get("retry-after", 0))
    except (TypeError, ValueError):
        return 0.0


@dataclass
class LLMResponse:
    """Response from LLM completion."""

    content: str
    model: str
    usage: dict[str, int]
    stop_reason: str | None = None


class LLMService:
    """Service for interacting with the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str | None,
        default_model: str,
        timeout: float = 30.0,
        client: AsyncAnthropic | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            api_key: Anthropic API key. Without it the service is unconfigured
                and every call raises ConfigurationError.
            default_model: Model used when the caller does not name one
            timeout: SDK-level request timeout in seconds
            client: Pre-built client (tests inject a mock here)
        """
        self.default_model = default_model
        self.timeout = timeout
        if client is None and api_key:
            client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMService":
        return cls(
            api_key=settings.anthropic_api_key,
            default_model=settings.default_model,
            timeout=settings.ai_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        model: str | None = None,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a completion from the LLM.

        Args:
            prompt: The user prompt
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            model: Model to use (defaults to the configured model)
            system_prompt: Optional system prompt

        Returns:
            LLMResponse with the first text block and metadata

        Raises:
            ConfigurationError: If no API key is configured
            AuthenticationError: On 401
            AuthorizationError: On 403
            ValidationError: On 400/422
            RateLimitExceededError: On 429
            LLMServiceError: On any other API or transport failure
            ResponseParseError: If the response has no text content
        """
        if self.client is None:
            raise ConfigurationError("Anthropic API key not configured")

        params = {
            "model": model or self.default_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            params["system"] = system_prompt

        try:
            response = await self.client.messages.create(**params)
        except anthropic.AuthenticationError as e:
            raise AuthenticationError(f"Anthropic rejected the API key: {e.message}") from e
        except anthropic.PermissionDeniedError as e:
            raise AuthorizationError(f"Anthropic denied the request: {e.message}") from e
        except (anthropic.BadRequestError, anthropic.UnprocessableEntityError) as e:
            raise ValidationError("request", e.message) from e
        except anthropic.RateLimitError as e:
            raise RateLimitExceededError(AI_RATE_LIMIT_KEY, _retry_after(e)) from e
        except anthropic.APIStatusError as e:
            raise LLMServiceError(f"Claude API error: {e.status_code}", e.status_code) from e
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(self.timeout) from e
        except anthropic.APIConnectionError as e:
            raise LLMServiceError(f"connection failed: {e}") from e

        if not response.content or not hasattr(response.content[0], "text"):
            raise ResponseParseError("response contained no text block")

        logger.debug(
            f"LLM completion from {response.model}",
            extra={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        return LLMResponse(
            content=response.content[0].text,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            stop_reason=response.stop_reason,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self.client is not None:
            await self.client.close()
