"""Assessment Module - session, response, insight and result types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from src.shared.constants import PRIORITY_ORDER, SKILL_WEIGHTS
from src.shared.datetime_utils import datetime_to_iso, utc_now
from src.shared.exceptions import InvalidStateError


class ResponseType(str, Enum):
    """Kinds of answers a question accepts."""

    MULTIPLE_CHOICE = "multiple_choice"
    SCALE = "scale"
    TEXT = "text"


class SessionStatus(str, Enum):
    """Assessment session status. Only moves forward."""

    IN_PROGRESS = "in_progress"
    INSIGHT_GENERATED = "insight_generated"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    SessionStatus.IN_PROGRESS: 0,
    SessionStatus.INSIGHT_GENERATED: 1,
    SessionStatus.COMPLETED: 2,
}


class ValueSource(str, Enum):
    """Where an insight or result came from."""

    AI = "ai"
    FALLBACK = "fallback"


class Priority(str, Enum):
    """Challenge and recommendation priority."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_ORDER[self.value]

    @classmethod
    def coerce(cls, value: Any) -> "Priority":
        """Map free-form input onto a priority, defaulting to medium."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


class LeadPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ImpactTimeline(str, Enum):
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


@dataclass(frozen=True)
class AssessmentResponse:
    """One answered question. Immutable once recorded."""

    question_id: str
    question_text: str
    response: int | float | str
    response_type: ResponseType
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class UserInfo:
    """Who is taking the assessment and what they sell."""

    email: str
    company: str
    product_name: str
    product_description: str = ""
    business_model: str = ""
    distinguishing_feature: str = ""
    competitive_positioning: str = ""


@dataclass(frozen=True)
class Insight:
    """An interpretation of one response batch."""

    id: str
    session_id: str
    batch_number: int  # 1-3
    question_range: str
    insight: str
    challenge_identified: str
    business_impact: str
    confidence: int
    reasoning: str
    source: ValueSource
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "batch_number": self.batch_number,
            "question_range": self.question_range,
            "insight": self.insight,
            "challenge_identified": self.challenge_identified,
            "business_impact": self.business_impact,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "source": self.source.value,
            "generated_at": datetime_to_iso(self.generated_at),
        }


@dataclass
class SkillLevels:
    """Five skill scores on a 0-10 scale."""

    customer_analysis: float
    business_communication: float
    revenue_strategy: float
    value_articulation: float
    strategic_thinking: float

    def as_dict(self) -> dict[str, float]:
        return {
            "customer_analysis": self.customer_analysis,
            "business_communication": self.business_communication,
            "revenue_strategy": self.revenue_strategy,
            "value_articulation": self.value_articulation,
            "strategic_thinking": self.strategic_thinking,
        }

    def weighted_score(self) -> int:
        """Weighted average of the skills, scaled to 0-100."""
        total = sum(value * SKILL_WEIGHTS[name] for name, value in self.as_dict().items())
        return round(total * 10)


@dataclass
class Challenge:
    """A sales challenge surfaced by the assessment."""

    name: str
    description: str
    priority: Priority
    impact: int  # 1-10
    business_consequence: str


@dataclass
class Recommendation:
    """A suggested improvement, with the tools that support it."""

    category: str
    title: str
    description: str
    priority: Priority
    expected_outcome: str
    timeframe: str
    tools: list[str] = field(default_factory=list)


@dataclass
class PerformanceLevel:
    level: str
    score: int
    description: str


@dataclass
class AssessmentResults:
    """Final reduction of a completed session."""

    session_id: str
    overall_score: int
    performance_level: PerformanceLevel
    skill_levels: SkillLevels
    weighted_skill_score: int
    challenges: list[Challenge]
    recommendations: list[Recommendation]
    focus_area: str
    revenue_opportunity: int
    roi_multiplier: float
    is_high_priority: bool
    lead_priority: LeadPriority
    impact_timeline: ImpactTimeline
    next_steps: list[str]
    confidence: int
    source: ValueSource
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "overall_score": self.overall_score,
            "performance_level": {
                "level": self.performance_level.level,
                "score": self.performance_level.score,
                "description": self.performance_level.description,
            },
            "skill_levels": self.skill_levels.as_dict(),
            "weighted_skill_score": self.weighted_skill_score,
            "challenges": [
                {
                    "name": c.name,
                    "description": c.description,
                    "priority": c.priority.value,
                    "impact": c.impact,
                    "business_consequence": c.business_consequence,
                }
                for c in self.challenges
            ],
            "recommendations": [
                {
                    "category": r.category,
                    "title": r.title,
                    "description": r.description,
                    "priority": r.priority.value,
                    "expected_outcome": r.expected_outcome,
                    "timeframe": r.timeframe,
                    "tools": list(r.tools),
                }
                for r in self.recommendations
            ],
            "focus_area": self.focus_area,
            "revenue_opportunity": self.revenue_opportunity,
            "roi_multiplier": self.roi_multiplier,
            "is_high_priority": self.is_high_priority,
            "lead_priority": self.lead_priority.value,
            "impact_timeline": self.impact_timeline.value,
            "next_steps": list(self.next_steps),
            "confidence": self.confidence,
            "source": self.source.value,
            "generated_at": datetime_to_iso(self.generated_at),
        }


@dataclass
class AssessmentSession:
    """An assessment in progress.

    Responses and insights are append-only and the status never regresses.
    Only the session store mutates sessions.
    """

    session_id: str
    user_info: UserInfo
    responses: list[AssessmentResponse] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    started_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None
    results: AssessmentResults | None = None

    def has_insight(self, batch_number: int) -> bool:
        return any(i.batch_number == batch_number for i in self.insights)

    def add_insight(self, insight: Insight) -> None:
        """Append an insight, refusing a second one for the same batch."""
        if self.has_insight(insight.batch_number):
            raise InvalidStateError(
                f"Insight for batch {insight.batch_number} already exists",
                {"session_id": self.session_id, "batch_number": insight.batch_number},
            )
        self.insights.append(insight)

    def advance_status(self, new_status: SessionStatus) -> bool:
        """Move the status forward. Returns False if that would be a regression."""
        if new_status.rank <= self.status.rank:
            return False
        self.status = new_status
        return True


@dataclass
class AssessmentProgress:
    total_questions: int
    answered_questions: int
    progress_percentage: int
    current_batch: int
    insights_generated: int


class ISessionStore(Protocol):
    """Caller-facing operations on assessment sessions."""

    async def start_assessment(self, user_info: UserInfo) -> str:
        """Create a session and return its identifier."""
        ...

    async def add_response(
        self, session_id: str, response: AssessmentResponse
    ) -> Insight | None:
        """Record a response. Returns the insight if one was generated."""
        ...

    async def complete_assessment(self, session_id: str) -> AssessmentResults:
        """Finalize the session and produce its results."""
        ...

    def get_session_insights(self, session_id: str) -> list[Insight]:
        """Insights generated so far, in batch order."""
        ...
