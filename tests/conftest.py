"""Test configuration and fixtures."""

import json
import sys
from pathlib import Path

# Load environment variables before any imports that need them
from dotenv import load_dotenv
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Ensure src is in path
sys.path.insert(0, str(project_root))

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.modules.assessment.interface import (
    AssessmentResponse,
    ResponseType,
    UserInfo,
)
from src.modules.llm.service import LLMResponse
from src.shared.config import Settings
from src.shared.feature_flags import get_feature_flags


INSIGHT_JSON = json.dumps({
    "challengeIdentified": "Value Articulation Gap",
    "insight": "Responses lean on feature lists rather than buyer outcomes.",
    "businessImpact": "Longer sales cycles and discount pressure",
    "confidence": 82,
    "reasoning": "Three of four answers describe capabilities, not results.",
})

FINAL_JSON = json.dumps({
    "overallScore": 64,
    "performanceLevel": "Competent",
    "skillLevels": {
        "customerAnalysis": 6,
        "businessCommunication": 5,
        "revenueStrategy": 7,
        "valueArticulation": 6,
        "strategicThinking": 7,
    },
    "challenges": [
        {
            "name": "Value Articulation Gap",
            "description": "Features are not tied to outcomes",
            "priority": "high",
            "impact": 7,
            "businessConsequence": "Deals stall in evaluation",
        },
    ],
    "recommendations": [
        {
            "category": "Messaging",
            "title": "Outcome-first discovery",
            "description": "Open calls with the buyer's cost of inaction",
            "priority": "high",
            "expectedOutcome": "Shorter evaluation phase",
            "timeframe": "1-3 months",
            "tools": ["ROI Calculator"],
        },
    ],
    "focusArea": "value_articulation",
    "revenueOpportunity": 750000,
    "roiMultiplier": 4.5,
    "nextSteps": ["Rewrite the first-call script"],
    "confidence": 85,
})


@pytest.fixture(autouse=True)
def reset_feature_flags():
    """Drop runtime flag overrides between tests."""
    yield
    get_feature_flags().clear_all_overrides()


@pytest.fixture
def settings():
    """Settings with fast retries and no .env influence."""
    return Settings(
        _env_file=None,
        anthropic_api_key=None,
        retry_max_retries=1,
        retry_base_delay_ms=1,
        ai_timeout_seconds=1.0,
        persistence_timeout_seconds=1.0,
    )


@pytest.fixture
def user_info():
    """Sample participant."""
    return UserInfo(
        email="alex@example.com",
        company="Acme Analytics",
        product_name="Forecast Pro",
        product_description="Revenue forecasting for B2B teams",
        business_model="B2B SaaS",
    )


@pytest.fixture
def make_response():
    """Factory for numbered assessment responses."""
    def _make(number: int, value: int | str = 7) -> AssessmentResponse:
        return AssessmentResponse(
            question_id=f"q{number}",
            question_text=f"Question {number}",
            response=value,
            response_type=ResponseType.SCALE if isinstance(value, int) else ResponseType.TEXT,
        )
    return _make


@pytest.fixture
def llm_response():
    """Factory for LLMResponse objects."""
    def _make(content: str) -> LLMResponse:
        return LLMResponse(
            content=content,
            model="claude-test",
            usage={"input_tokens": 10, "output_tokens": 20},
        )
    return _make


@pytest.fixture
def mock_llm_service(llm_response, settings):
    """Configured LLM service that answers insight and assessment prompts."""
    async def complete(prompt, max_tokens, temperature, **kwargs):
        if max_tokens == settings.assessment_max_tokens:
            return llm_response(FINAL_JSON)
        return llm_response(INSIGHT_JSON)

    service = MagicMock()
    service.is_configured = True
    service.default_model = "claude-test"
    service.complete = AsyncMock(side_effect=complete)
    service.aclose = AsyncMock()
    return service


@pytest.fixture
def insight_json():
    """Well-formed insight response text."""
    return INSIGHT_JSON


@pytest.fixture
def final_json():
    """Well-formed final assessment response text."""
    return FINAL_JSON
