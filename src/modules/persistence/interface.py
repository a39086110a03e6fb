"""Persistence Module - contract for the assessment results sink."""

from dataclasses import dataclass
from typing import Any, Protocol

from src.modules.assessment.interface import AssessmentResults, SessionStatus, UserInfo


@dataclass
class StoreResult:
    """Outcome of a write to the results sink."""

    success: bool
    assessment_id: str | None = None
    error: str | None = None


class IAssessmentRepository(Protocol):
    """Interface for the external results store.

    Implementations report failures through ``StoreResult`` where they can,
    but callers must still guard against exceptions and hangs.
    """

    async def store_completed_assessment(
        self,
        session_id: str,
        results: AssessmentResults,
        user_info: UserInfo,
    ) -> StoreResult:
        """Store the final results of a completed session."""
        ...

    async def update_assessment_status(
        self,
        session_id: str,
        status: SessionStatus,
        payload: dict[str, Any] | None = None,
    ) -> StoreResult:
        """Record a session status change."""
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        ...


def build_assessment_record(
    session_id: str,
    results: AssessmentResults,
    user_info: UserInfo,
) -> dict[str, Any]:
    """Flatten results into the row stored for a completed assessment.

    Buyer and tech scores are the business communication and value
    articulation skills on a 0-100 scale.
    """
    return {
        "session_id": session_id,
        "user_email": user_info.email,
        "company_name": user_info.company,
        "product_name": user_info.product_name,
        "product_description": user_info.product_description,
        "business_model": user_info.business_model,
        "distinguishing_feature": user_info.distinguishing_feature,
        "competitive_positioning": user_info.competitive_positioning,
        "overall_score": results.overall_score,
        "buyer_score": round(results.skill_levels.business_communication * 10),
        "tech_score": round(results.skill_levels.value_articulation * 10),
        "performance_level": results.performance_level.level,
        "challenges": [c.name for c in results.challenges],
        "primary_recommendation": (
            results.recommendations[0].title
            if results.recommendations
            else "Focus on systematic improvement"
        ),
        "focus_area": results.focus_area,
        "revenue_opportunity": results.revenue_opportunity,
        "roi_multiplier": results.roi_multiplier,
        "is_high_priority": results.is_high_priority,
        "lead_priority": results.lead_priority.value,
        "impact_timeline": results.impact_timeline.value,
        "completion_context": {
            "insights_used": True,
            "confidence": results.confidence,
            "source": results.source.value,
        },
        "assessment_data": results.to_dict(),
    }
