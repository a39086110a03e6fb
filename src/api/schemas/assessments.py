"""Assessment API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.api.schemas.insights import InsightResponse
from src.modules.assessment.interface import (
    ImpactTimeline,
    LeadPriority,
    Priority,
    ResponseType,
    SessionStatus,
    ValueSource,
)


# Session Schemas
class StartAssessmentRequest(BaseModel):
    """Start assessment request."""

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+$",
        description="Participant email",
    )
    company: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Company name",
    )
    product_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Product being sold",
    )
    product_description: str = Field(
        default="",
        max_length=2000,
        description="What the product does",
    )
    business_model: str = Field(
        default="",
        max_length=200,
        description="How the product makes money (e.g. B2B SaaS)",
    )
    distinguishing_feature: str = Field(
        default="",
        max_length=1000,
        description="What sets the product apart",
    )
    competitive_positioning: str = Field(
        default="",
        max_length=1000,
        description="How the product is positioned against competitors",
    )


class StartAssessmentResponse(BaseModel):
    """Start assessment response."""

    session_id: str = Field(
        ...,
        description="Identifier for all subsequent calls",
    )
    total_questions: int = Field(
        ...,
        description="Number of responses required before completion",
    )


class SubmitResponseRequest(BaseModel):
    """A single answered question."""

    question_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Question identifier",
    )
    question_text: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="The question as shown to the participant",
    )
    response: int | float | str = Field(
        ...,
        description="The answer (choice, scale value, or free text)",
    )
    response_type: ResponseType = Field(
        ...,
        description="Kind of answer",
    )


class SubmitResponseResponse(BaseModel):
    """Response submission result."""

    recorded: bool = Field(
        default=True,
        description="Whether the response was recorded",
    )
    response_count: int = Field(
        ...,
        description="Responses recorded so far",
    )
    insight: InsightResponse | None = Field(
        default=None,
        description="Insight generated because this response closed a batch",
    )


class ProgressResponse(BaseModel):
    """Assessment progress."""

    total_questions: int
    answered_questions: int
    progress_percentage: int = Field(..., ge=0, le=100)
    current_batch: int
    insights_generated: int


# Results Schemas
class PerformanceLevelResponse(BaseModel):
    """Performance tier."""

    level: str
    score: int
    description: str


class SkillLevelsResponse(BaseModel):
    """Skill scores on a 0-10 scale."""

    customer_analysis: float = Field(..., ge=0, le=10)
    business_communication: float = Field(..., ge=0, le=10)
    revenue_strategy: float = Field(..., ge=0, le=10)
    value_articulation: float = Field(..., ge=0, le=10)
    strategic_thinking: float = Field(..., ge=0, le=10)


class ChallengeResponse(BaseModel):
    """Identified sales challenge."""

    name: str
    description: str
    priority: Priority
    impact: int = Field(..., ge=1, le=10)
    business_consequence: str


class RecommendationResponse(BaseModel):
    """Improvement recommendation."""

    category: str
    title: str
    description: str
    priority: Priority
    expected_outcome: str
    timeframe: str
    tools: list[str] = Field(default_factory=list)


class AssessmentResultsResponse(BaseModel):
    """Final assessment results."""

    session_id: str
    overall_score: int = Field(..., ge=0, le=100, description="Overall score (0-100)")
    performance_level: PerformanceLevelResponse
    skill_levels: SkillLevelsResponse
    weighted_skill_score: int = Field(..., description="Weighted skill average (0-100)")
    challenges: list[ChallengeResponse]
    recommendations: list[RecommendationResponse]
    focus_area: str
    revenue_opportunity: int = Field(..., ge=0, description="Estimated revenue opportunity")
    roi_multiplier: float = Field(..., ge=2.0, description="Expected return multiplier")
    is_high_priority: bool
    lead_priority: LeadPriority
    impact_timeline: ImpactTimeline
    next_steps: list[str]
    confidence: int = Field(..., ge=70, le=95)
    source: ValueSource = Field(..., description="Whether the AI or the baseline produced this")
    generated_at: datetime


class SessionSummaryResponse(BaseModel):
    """Session overview."""

    session_id: str
    status: SessionStatus
    company: str
    product_name: str
    response_count: int
    insights_generated: int
    started_at: datetime
    completed_at: datetime | None = None
    results: AssessmentResultsResponse | None = None
