"""Insights Module - request and payload types for the AI insight client."""

from dataclasses import dataclass, field
from typing import Protocol

from src.modules.assessment.interface import (
    AssessmentResponse,
    Challenge,
    Insight,
    Recommendation,
    SkillLevels,
    UserInfo,
)
from src.shared.result import Outcome


@dataclass
class InsightBatch:
    """One batch of responses to interpret."""

    session_id: str
    batch_number: int
    question_range: str
    responses: list[AssessmentResponse]
    user_info: UserInfo
    previous_insights: list[Insight] = field(default_factory=list)


@dataclass
class InsightPayload:
    """The fields an AI (or fallback) insight provides."""

    challenge_identified: str
    insight: str
    business_impact: str
    confidence: float
    reasoning: str


@dataclass
class FinalAssessmentRequest:
    session_id: str
    responses: list[AssessmentResponse]
    insights: list[Insight]
    user_info: UserInfo


@dataclass
class FinalAssessmentPayload:
    """Unclamped final assessment values as reported by the AI or the baseline."""

    overall_score: float
    performance_level: str
    skill_levels: SkillLevels
    challenges: list[Challenge]
    recommendations: list[Recommendation]
    focus_area: str
    revenue_opportunity: float
    roi_multiplier: float
    next_steps: list[str]
    confidence: float


class IInsightClient(Protocol):
    """Interface for AI-backed insight generation.

    Both operations always produce a value. A failed or skipped AI call
    yields a fallback outcome instead of an exception.
    """

    @property
    def is_configured(self) -> bool:
        """Whether AI credentials are available."""
        ...

    async def generate_insight(self, batch: InsightBatch) -> Outcome[Insight]:
        """Interpret one batch of responses."""
        ...

    async def generate_final_assessment(
        self, request: FinalAssessmentRequest
    ) -> Outcome[FinalAssessmentPayload]:
        """Produce scores, challenges and recommendations for a full session."""
        ...
