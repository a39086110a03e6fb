"""Service registry for dependency injection.

Every service of the pipeline is constructed explicitly, once, from a
``Settings`` instance. The API, the CLI and the background jobs all receive
the same registry instead of reaching for module-level singletons.

Usage:
    from src.shared.service_registry import ServiceRegistry

    registry = ServiceRegistry.create(get_settings())
    session_id = await registry.session_store.start_assessment(user_info)
    ...
    await registry.dispose()

Repository selection:
- SupabaseAssessmentRepository when FF_USE_SUPABASE_PERSISTENCE=true and
  SUPABASE_URL / SUPABASE_KEY are set
- InMemoryAssessmentRepository otherwise
"""

import logging
from dataclasses import dataclass

from src.modules.assessment.scoring import ScoringEngine
from src.modules.assessment.session_store import SessionStore
from src.modules.insights.client import AIInsightClient
from src.modules.insights.trigger import InsightBatchTrigger
from src.modules.llm.service import LLMService
from src.modules.persistence import (
    AssessmentRecorder,
    IAssessmentRepository,
    InMemoryAssessmentRepository,
    SupabaseAssessmentRepository,
)
from src.modules.resilience import (
    CircuitBreakerRegistry,
    RateLimiter,
    RetryHandler,
    RetryPolicy,
)
from src.shared.config import Settings, get_settings
from src.shared.feature_flags import is_supabase_persistence_enabled

logger = logging.getLogger(__name__)


def create_repository(settings: Settings) -> IAssessmentRepository:
    """Pick the results store based on feature flags and configuration."""
    if is_supabase_persistence_enabled():
        if settings.is_supabase_configured:
            logger.info("Creating SupabaseAssessmentRepository")
            return SupabaseAssessmentRepository(
                url=settings.supabase_url,
                api_key=settings.supabase_key,
                timeout=settings.persistence_timeout_seconds,
            )
        logger.warning(
            "Supabase persistence enabled but SUPABASE_URL/SUPABASE_KEY missing, "
            "falling back to in-memory repository"
        )

    logger.info("Creating InMemoryAssessmentRepository")
    return InMemoryAssessmentRepository()


@dataclass
class ServiceRegistry:
    """Owns every long-lived service of the assessment pipeline."""

    settings: Settings
    rate_limiter: RateLimiter
    circuit_breakers: CircuitBreakerRegistry
    retry_handler: RetryHandler
    llm_service: LLMService
    insight_client: AIInsightClient
    recorder: AssessmentRecorder
    trigger: InsightBatchTrigger
    scoring_engine: ScoringEngine
    session_store: SessionStore

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        llm_service: LLMService | None = None,
        repository: IAssessmentRepository | None = None,
    ) -> "ServiceRegistry":
        """Build the full service graph.

        Args:
            settings: Application settings (defaults to the cached settings)
            llm_service: Pre-built LLM service (tests inject stubs here)
            repository: Pre-built results store (tests inject stubs here)

        Returns:
            A registry whose services share one rate limiter and one set of
            circuit breakers
        """
        settings = settings or get_settings()

        rate_limiter = RateLimiter(
            default_max_requests=settings.ai_rate_limit_requests,
            default_window_ms=settings.ai_rate_limit_window_ms,
        )
        circuit_breakers = CircuitBreakerRegistry(
            failure_threshold=settings.circuit_failure_threshold,
            recovery_timeout=settings.circuit_recovery_timeout_seconds,
            success_threshold=settings.circuit_success_threshold,
        )
        retry_handler = RetryHandler(RetryPolicy(
            max_retries=settings.retry_max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            backoff_multiplier=settings.retry_backoff_multiplier,
        ))
        llm_service = llm_service or LLMService.from_settings(settings)

        insight_client = AIInsightClient(
            llm_service=llm_service,
            rate_limiter=rate_limiter,
            circuit_breakers=circuit_breakers,
            retry_handler=retry_handler,
            settings=settings,
        )
        recorder = AssessmentRecorder(
            repository or create_repository(settings),
            timeout_seconds=settings.persistence_timeout_seconds,
        )
        trigger = InsightBatchTrigger(insight_client, settings.insight_batch_boundaries)
        scoring_engine = ScoringEngine(
            insight_client, recorder, total_questions=settings.total_questions
        )
        session_store = SessionStore(
            trigger,
            scoring_engine,
            recorder,
            total_questions=settings.total_questions,
            retention_seconds=settings.session_retention_seconds,
        )

        logger.info(
            f"ServiceRegistry created (ai_configured={insight_client.is_configured}, "
            f"repository={type(recorder.repository).__name__})"
        )
        return cls(
            settings=settings,
            rate_limiter=rate_limiter,
            circuit_breakers=circuit_breakers,
            retry_handler=retry_handler,
            llm_service=llm_service,
            insight_client=insight_client,
            recorder=recorder,
            trigger=trigger,
            scoring_engine=scoring_engine,
            session_store=session_store,
        )

    def get_service_info(self) -> dict[str, str]:
        """Implementation types and health-relevant state of each service."""
        return {
            "llm": "configured" if self.llm_service.is_configured else "unconfigured",
            "repository": type(self.recorder.repository).__name__,
            "sessions": str(self.session_store.session_count),
            **{
                f"circuit:{name}": stats.state.value
                for name, stats in self.circuit_breakers.states().items()
            },
        }

    async def dispose(self) -> None:
        """Release sessions, HTTP clients and rate limit windows."""
        await self.session_store.dispose()
        await self.recorder.aclose()
        await self.llm_service.aclose()
        self.rate_limiter.reset()
        self.circuit_breakers.reset()
        logger.info("ServiceRegistry disposed")

    def __repr__(self) -> str:
        return f"ServiceRegistry(services={self.get_service_info()})"
