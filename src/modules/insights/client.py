"""AI insight client.

Every AI call passes through, outermost first:

1. the rate limiter (caller key ``anthropic``),
2. the ``ai-insight`` circuit breaker,
3. the retry handler,
4. a hard timeout that cancels the in-flight request. Timeouts are not
   retried.

Any failure along the way, including unparseable output, produces a fallback
outcome. Neither public operation raises for AI-related failures.
"""

import asyncio
import logging
import random
from typing import Callable

from src.modules.assessment.interface import Insight, ValueSource
from src.modules.insights.fallback import (
    build_baseline_assessment,
    build_fallback_insight_payload,
)
from src.modules.insights.interface import (
    FinalAssessmentPayload,
    FinalAssessmentRequest,
    InsightBatch,
    InsightPayload,
)
from src.modules.insights.parsing import (
    clamp_insight_confidence,
    parse_final_assessment_payload,
    parse_insight_payload,
)
from src.modules.insights.prompts import (
    build_final_assessment_prompt,
    build_insight_prompt,
)
from src.modules.llm.service import LLMService
from src.modules.resilience import CircuitBreakerRegistry, RateLimiter, RetryHandler
from src.shared.config import Settings, get_settings
from src.shared.constants import AI_CIRCUIT_KEY, AI_RATE_LIMIT_KEY
from src.shared.datetime_utils import utc_now
from src.shared.exceptions import LLMTimeoutError, RateLimitExceededError
from src.shared.feature_flags import is_ai_insights_enabled
from src.shared.result import Outcome

logger = logging.getLogger(__name__)


class AIInsightClient:
    """Generates insights and final assessments, falling back when the AI cannot."""

    def __init__(
        self,
        llm_service: LLMService,
        rate_limiter: RateLimiter,
        circuit_breakers: CircuitBreakerRegistry,
        retry_handler: RetryHandler,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        ai_enabled: Callable[[], bool] = is_ai_insights_enabled,
    ) -> None:
        self._llm = llm_service
        self._rate_limiter = rate_limiter
        self._circuit_breakers = circuit_breakers
        self._retry = retry_handler
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._ai_enabled = ai_enabled

        if not self._llm.is_configured:
            logger.warning(
                "Anthropic API key not configured. Assessments will use fallback analysis."
            )

    @property
    def is_configured(self) -> bool:
        return self._llm.is_configured

    def _should_call_ai(self) -> bool:
        return self._llm.is_configured and self._ai_enabled()

    async def generate_insight(self, batch: InsightBatch) -> Outcome[Insight]:
        """Interpret one batch of responses.

        Args:
            batch: Responses for the batch plus session context

        Returns:
            Outcome wrapping the insight. A fallback outcome carries the
            canned insight and the error that caused it, if any.
        """
        if not self._should_call_ai():
            return Outcome.fallback(self._fallback_insight(batch))

        try:
            text = await self._call_ai(
                build_insight_prompt(batch),
                max_tokens=self._settings.insight_max_tokens,
                temperature=self._settings.insight_temperature,
            )
            payload = parse_insight_payload(text)
        except Exception as e:
            logger.warning(
                f"Failed to generate AI insight for batch {batch.batch_number}, "
                f"using fallback: {e}",
                extra={"session_id": batch.session_id, "batch_number": batch.batch_number},
            )
            return Outcome.fallback(self._fallback_insight(batch), e)

        logger.info(
            f"Generated AI insight for batch {batch.batch_number}",
            extra={"session_id": batch.session_id, "batch_number": batch.batch_number},
        )
        return Outcome.success(self._build_insight(batch, payload, ValueSource.AI))

    async def generate_final_assessment(
        self, request: FinalAssessmentRequest
    ) -> Outcome[FinalAssessmentPayload]:
        """Assess a full session.

        Returns:
            Outcome wrapping the unclamped payload. The fallback carries
            the baseline assessment.
        """
        if not self._should_call_ai():
            return Outcome.fallback(build_baseline_assessment())

        try:
            text = await self._call_ai(
                build_final_assessment_prompt(request),
                max_tokens=self._settings.assessment_max_tokens,
                temperature=self._settings.assessment_temperature,
            )
            payload = parse_final_assessment_payload(text)
        except Exception as e:
            logger.warning(
                f"Failed to generate AI final assessment, using baseline: {e}",
                extra={"session_id": request.session_id},
            )
            return Outcome.fallback(build_baseline_assessment(), e)

        logger.info(
            "Generated AI final assessment",
            extra={"session_id": request.session_id},
        )
        return Outcome.success(payload)

    async def _call_ai(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Send one prompt through the full resilience stack.

        Raises:
            RateLimitExceededError: If the AI caller key is over its window
            CircuitOpenError: If the circuit is open
            AssessmentServiceError: The last error from the retried call
        """
        settings = self._settings
        allowed = self._rate_limiter.check_rate_limit(
            AI_RATE_LIMIT_KEY,
            settings.ai_rate_limit_requests,
            settings.ai_rate_limit_window_ms,
        )
        if not allowed:
            raise RateLimitExceededError(
                AI_RATE_LIMIT_KEY,
                self._rate_limiter.retry_after_seconds(AI_RATE_LIMIT_KEY),
            )

        async def attempt() -> str:
            try:
                response = await asyncio.wait_for(
                    self._llm.complete(
                        prompt,
                        max_tokens=max_tokens,
                        temperature=temperature,
                    ),
                    timeout=settings.ai_timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                raise LLMTimeoutError(settings.ai_timeout_seconds) from e
            return response.content

        return await self._circuit_breakers.execute(
            AI_CIRCUIT_KEY,
            lambda: self._retry.with_retry(attempt),
        )

    def _fallback_insight(self, batch: InsightBatch) -> Insight:
        return self._build_insight(
            batch, build_fallback_insight_payload(self._rng), ValueSource.FALLBACK
        )

    def _build_insight(
        self,
        batch: InsightBatch,
        payload: InsightPayload,
        source: ValueSource,
    ) -> Insight:
        return Insight(
            id=f"insight_{batch.session_id}_{batch.batch_number}",
            session_id=batch.session_id,
            batch_number=batch.batch_number,
            question_range=batch.question_range,
            insight=payload.insight,
            challenge_identified=payload.challenge_identified,
            business_impact=payload.business_impact,
            confidence=clamp_insight_confidence(payload.confidence, batch.batch_number),
            reasoning=payload.reasoning,
            source=source,
            generated_at=utc_now(),
        )
