"""Integration tests for complete assessment flows.

These tests run the full service graph built by ServiceRegistry, with the
Anthropic client replaced by stubs, from session start through final results.
"""

import math

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.modules.assessment.interface import SessionStatus, ValueSource
from src.modules.persistence import InMemoryAssessmentRepository
from src.shared.exceptions import LLMServiceError
from src.shared.service_registry import ServiceRegistry


def unreachable_llm():
    service = MagicMock()
    service.is_configured = True
    service.default_model = "claude-test"
    service.complete = AsyncMock(side_effect=LLMServiceError("connection refused"))
    service.aclose = AsyncMock()
    return service


async def run_assessment(registry, user_info, make_response, total=12):
    store = registry.session_store
    session_id = await store.start_assessment(user_info)
    triggered_at = []
    for number in range(1, total + 1):
        insight = await store.add_response(session_id, make_response(number, value=number % 10 + 1))
        if insight is not None:
            triggered_at.append(number)
    return session_id, triggered_at


class TestHealthyAIFlow:
    """Full assessment with a responsive AI."""

    @pytest.fixture
    def registry(self, settings, mock_llm_service):
        return ServiceRegistry.create(
            settings,
            llm_service=mock_llm_service,
            repository=InMemoryAssessmentRepository(),
        )

    @pytest.mark.asyncio
    async def test_insights_at_batch_boundaries(self, registry, user_info, make_response):
        session_id, triggered_at = await run_assessment(registry, user_info, make_response)

        insights = registry.session_store.get_session_insights(session_id)
        assert triggered_at == [4, 9, 12]
        assert [i.question_range for i in insights] == ["1-4", "5-9", "10-12"]
        assert all(i.source is ValueSource.AI for i in insights)
        assert insights[0].id == f"insight_{session_id}_1"

    @pytest.mark.asyncio
    async def test_final_results_from_ai(self, registry, user_info, make_response):
        session_id, _ = await run_assessment(registry, user_info, make_response)

        results = await registry.session_store.complete_assessment(session_id)

        assert results.source is ValueSource.AI
        assert results.overall_score == 64
        assert results.focus_area == "value_articulation"
        assert results.roi_multiplier == 4.5
        assert results.confidence == 85
        repository = registry.recorder.repository
        assert repository.assessments[session_id]["overall_score"] == 64
        statuses = [entry["status"] for entry in repository.status_history[session_id]]
        assert statuses == ["insight_generated"] * 3 + ["completed"]

    @pytest.mark.asyncio
    async def test_one_request_per_batch_and_one_for_results(
        self, registry, mock_llm_service, user_info, make_response
    ):
        session_id, _ = await run_assessment(registry, user_info, make_response)
        await registry.session_store.complete_assessment(session_id)
        await registry.session_store.complete_assessment(session_id)

        assert mock_llm_service.complete.await_count == 4


class TestUnreachableAIFlow:
    """Full assessment when every AI call fails."""

    @pytest.fixture
    def registry(self, settings):
        return ServiceRegistry.create(
            settings,
            llm_service=unreachable_llm(),
            repository=InMemoryAssessmentRepository(),
        )

    @pytest.mark.asyncio
    async def test_fallbacks_complete_the_assessment(self, registry, user_info, make_response):
        """Test the session still completes with fallback insights and baseline results."""
        session_id, triggered_at = await run_assessment(registry, user_info, make_response)

        results = await registry.session_store.complete_assessment(session_id)

        insights = registry.session_store.get_session_insights(session_id)
        assert triggered_at == [4, 9, 12]
        assert len(insights) == 3
        assert all(i.source is ValueSource.FALLBACK for i in insights)
        assert results.overall_score == 70
        assert results.roi_multiplier >= 2.0
        assert results.source is ValueSource.FALLBACK
        assert registry.session_store.get_session(session_id).status is SessionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_circuit_opens_after_repeated_failures(
        self, registry, user_info, make_response
    ):
        """Test repeated failed sessions open the AI circuit."""
        for _ in range(2):
            await run_assessment(registry, user_info, make_response)

        states = registry.get_service_info()
        assert states["circuit:ai-insight"] == "open"


class TestMalformedAIFlow:
    """Full assessment when the AI answers with unusable numbers."""

    @pytest.mark.asyncio
    async def test_non_finite_final_numbers_use_baseline(
        self, settings, mock_llm_service, llm_response, final_json, user_info, make_response
    ):
        """Test an overflowing revenue figure still yields finite results."""
        overflowing = final_json.replace(
            '"revenueOpportunity": 750000', '"revenueOpportunity": 1e400'
        )
        insight_side_effect = mock_llm_service.complete.side_effect

        async def complete(prompt, max_tokens, temperature, **kwargs):
            if max_tokens == settings.assessment_max_tokens:
                return llm_response(overflowing)
            return await insight_side_effect(prompt, max_tokens, temperature, **kwargs)

        mock_llm_service.complete = AsyncMock(side_effect=complete)
        registry = ServiceRegistry.create(
            settings,
            llm_service=mock_llm_service,
            repository=InMemoryAssessmentRepository(),
        )

        session_id, _ = await run_assessment(registry, user_info, make_response)
        results = await registry.session_store.complete_assessment(session_id)

        assert results.source is ValueSource.FALLBACK
        assert results.overall_score == 70
        assert math.isfinite(results.revenue_opportunity)
        assert math.isfinite(results.roi_multiplier)


class TestPersistenceFailureFlow:
    """Full assessment when the results store is broken."""

    @pytest.mark.asyncio
    async def test_store_failure_does_not_block_results(
        self, settings, mock_llm_service, user_info, make_response
    ):
        repository = MagicMock()
        repository.store_completed_assessment = AsyncMock(side_effect=RuntimeError("db down"))
        repository.update_assessment_status = AsyncMock(side_effect=RuntimeError("db down"))
        repository.aclose = AsyncMock()
        registry = ServiceRegistry.create(
            settings, llm_service=mock_llm_service, repository=repository
        )

        session_id, triggered_at = await run_assessment(registry, user_info, make_response)
        results = await registry.session_store.complete_assessment(session_id)

        assert triggered_at == [4, 9, 12]
        assert results.overall_score == 64
        repository.store_completed_assessment.assert_awaited_once()

        await registry.dispose()
        repository.aclose.assert_awaited_once()
