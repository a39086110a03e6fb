"""Insight API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.modules.assessment.interface import ValueSource


class InsightResponse(BaseModel):
    """Insight for one batch of responses."""

    id: str = Field(
        ...,
        description="Insight identifier",
    )
    session_id: str
    batch_number: int = Field(
        ...,
        ge=1,
        le=3,
        description="Batch this insight interprets",
    )
    question_range: str = Field(
        ...,
        description="Questions covered, e.g. '1-4'",
    )
    insight: str
    challenge_identified: str
    business_impact: str
    confidence: int = Field(
        ...,
        ge=60,
        le=95,
        description="Confidence percentage",
    )
    reasoning: str
    source: ValueSource
    generated_at: datetime


class SessionInsightsResponse(BaseModel):
    """All insights for a session, in batch order."""

    session_id: str
    insights: list[InsightResponse]
    count: int


class CircuitStatusResponse(BaseModel):
    """State of one circuit breaker."""

    name: str
    state: str = Field(
        ...,
        description="closed, open or half-open",
    )
    failure_count: int
    success_count: int
    last_failure_time: datetime | None = None


class InsightServiceStatusResponse(BaseModel):
    """Availability of AI-generated insights."""

    ai_configured: bool = Field(
        ...,
        description="Whether an Anthropic API key is configured",
    )
    ai_enabled: bool = Field(
        ...,
        description="Whether the FF_ENABLE_AI_INSIGHTS flag is on",
    )
    model: str
    circuits: list[CircuitStatusResponse]
