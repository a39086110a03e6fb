"""Assessment Module - Sessions, batch insights and final scoring.

Usage:
    # Services are built by the registry; use the instance it owns
    registry = ServiceRegistry.create(settings)
    session_id = await registry.session_store.start_assessment(user_info)
"""

from src.modules.assessment.interface import (
    AssessmentProgress,
    AssessmentResponse,
    AssessmentResults,
    AssessmentSession,
    Challenge,
    ImpactTimeline,
    Insight,
    ISessionStore,
    LeadPriority,
    PerformanceLevel,
    Priority,
    Recommendation,
    ResponseType,
    SessionStatus,
    SkillLevels,
    UserInfo,
    ValueSource,
)
from src.modules.assessment.scoring import ScoringEngine
from src.modules.assessment.session_store import SessionStore

__all__ = [
    # Interface types
    "AssessmentProgress",
    "AssessmentResponse",
    "AssessmentResults",
    "AssessmentSession",
    "Challenge",
    "ImpactTimeline",
    "Insight",
    "ISessionStore",
    "LeadPriority",
    "PerformanceLevel",
    "Priority",
    "Recommendation",
    "ResponseType",
    "SessionStatus",
    "SkillLevels",
    "UserInfo",
    "ValueSource",
    # Implementations
    "ScoringEngine",
    "SessionStore",
]
