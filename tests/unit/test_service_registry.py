"""Unit tests for service registry."""

import os
from unittest.mock import patch

import pytest

from src.modules.persistence import (
    InMemoryAssessmentRepository,
    SupabaseAssessmentRepository,
)
from src.shared.service_registry import ServiceRegistry, create_repository


class TestCreateRepository:
    """Tests for results store selection."""

    def test_in_memory_by_default(self, settings):
        with patch.dict(os.environ, {"FF_USE_SUPABASE_PERSISTENCE": "false"}):
            assert isinstance(create_repository(settings), InMemoryAssessmentRepository)

    def test_supabase_when_enabled_and_configured(self, settings):
        configured = settings.model_copy(update={
            "supabase_url": "https://example.supabase.co",
            "supabase_key": "key",
        })
        with patch.dict(os.environ, {"FF_USE_SUPABASE_PERSISTENCE": "true"}):
            assert isinstance(create_repository(configured), SupabaseAssessmentRepository)

    def test_enabled_but_unconfigured_falls_back(self, settings):
        with patch.dict(os.environ, {"FF_USE_SUPABASE_PERSISTENCE": "true"}):
            assert isinstance(create_repository(settings), InMemoryAssessmentRepository)


class TestServiceRegistry:
    """Tests for ServiceRegistry."""

    @pytest.fixture
    def registry(self, settings):
        return ServiceRegistry.create(settings, repository=InMemoryAssessmentRepository())

    def test_services_share_resilience_state(self, registry):
        """Test the insight client uses the registry's limiter and breakers."""
        client = registry.insight_client

        assert client._rate_limiter is registry.rate_limiter
        assert client._circuit_breakers is registry.circuit_breakers
        assert client._retry is registry.retry_handler

    def test_settings_flow_into_services(self, registry, settings):
        assert registry.retry_handler.policy.max_retries == settings.retry_max_retries
        assert registry.session_store.total_questions == settings.total_questions
        assert registry.recorder.timeout_seconds == settings.persistence_timeout_seconds
        assert [b.end for b in registry.trigger.batches] == [4, 9, 12]

    def test_unconfigured_llm(self, registry):
        assert registry.llm_service.is_configured is False
        assert registry.get_service_info()["llm"] == "unconfigured"

    def test_injected_llm_service(self, settings, mock_llm_service):
        registry = ServiceRegistry.create(settings, llm_service=mock_llm_service)

        assert registry.llm_service is mock_llm_service
        assert registry.insight_client.is_configured is True

    def test_service_info(self, registry):
        registry.circuit_breakers.get("ai-insight")

        info = registry.get_service_info()

        assert info["repository"] == "InMemoryAssessmentRepository"
        assert info["sessions"] == "0"
        assert info["circuit:ai-insight"] == "closed"

    @pytest.mark.asyncio
    async def test_dispose(self, registry, user_info):
        await registry.session_store.start_assessment(user_info)
        registry.rate_limiter.check_rate_limit("anthropic")

        await registry.dispose()

        assert registry.session_store.session_count == 0
        assert registry.rate_limiter.get_window("anthropic") is None
