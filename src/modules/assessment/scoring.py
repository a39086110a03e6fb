"""Scoring engine for completed assessment sessions.

The engine asks the insight client for a full-session assessment (or its
baseline fallback), clamps every value into its declared range, derives lead
qualification fields from the score, and hands the result to the results
store.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from src.modules.assessment.interface import (
    AssessmentResults,
    AssessmentSession,
    Challenge,
    ImpactTimeline,
    LeadPriority,
    PerformanceLevel,
    Priority,
    SkillLevels,
    ValueSource,
)
from src.modules.insights.interface import (
    FinalAssessmentPayload,
    FinalAssessmentRequest,
    IInsightClient,
)
from src.shared.constants import (
    HIGH_PRIORITY_SCORE_THRESHOLD,
    MAX_CHALLENGE_IMPACT,
    MAX_OVERALL_SCORE,
    MAX_SKILL_LEVEL,
    MIN_CHALLENGE_IMPACT,
    MIN_OVERALL_SCORE,
    MIN_ROI_MULTIPLIER,
    MIN_SKILL_LEVEL,
    PERFORMANCE_TIERS,
    RESULTS_CONFIDENCE_MAX,
    RESULTS_CONFIDENCE_MIN,
    TOTAL_QUESTIONS,
)
from src.shared.datetime_utils import utc_now
from src.shared.exceptions import CompletionPreconditionError

if TYPE_CHECKING:
    from src.modules.persistence.recorder import AssessmentRecorder

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def performance_level_for(score: int) -> PerformanceLevel:
    """Map a 0-100 score onto its performance tier."""
    for minimum, level, description in PERFORMANCE_TIERS:
        if score >= minimum:
            return PerformanceLevel(level=level, score=score, description=description)
    _, level, description = PERFORMANCE_TIERS[-1]
    return PerformanceLevel(level=level, score=score, description=description)


def resolve_performance_level(name: str, score: int) -> PerformanceLevel:
    """Use the reported tier if it is a known one, otherwise derive it from the score."""
    for _, level, description in PERFORMANCE_TIERS:
        if name.strip().lower() == level.lower():
            return PerformanceLevel(level=level, score=score, description=description)
    if name:
        logger.info(f"Unknown performance level '{name}', deriving from score {score}")
    return performance_level_for(score)


def clamp_skill_levels(skills: SkillLevels) -> SkillLevels:
    return SkillLevels(**{
        name: clamp(value, MIN_SKILL_LEVEL, MAX_SKILL_LEVEL)
        for name, value in skills.as_dict().items()
    })


def normalize_challenges(challenges: list[Challenge]) -> list[Challenge]:
    """Deduplicate by name (first wins), clamp impact, sort by priority descending."""
    seen: set[str] = set()
    unique = []
    for challenge in challenges:
        if challenge.name in seen:
            continue
        seen.add(challenge.name)
        unique.append(Challenge(
            name=challenge.name,
            description=challenge.description,
            priority=challenge.priority,
            impact=int(clamp(challenge.impact, MIN_CHALLENGE_IMPACT, MAX_CHALLENGE_IMPACT)),
            business_consequence=challenge.business_consequence,
        ))
    return sorted(unique, key=lambda c: c.priority.rank, reverse=True)


def determine_lead_priority(score: int, challenges: list[Challenge]) -> LeadPriority:
    if score < 40 or any(c.priority is Priority.CRITICAL for c in challenges):
        return LeadPriority.HIGH
    if score < 60 or any(c.priority is Priority.HIGH for c in challenges):
        return LeadPriority.MEDIUM
    return LeadPriority.LOW


def determine_impact_timeline(score: int) -> ImpactTimeline:
    if score < 40:
        return ImpactTimeline.LONG_TERM
    if score < 70:
        return ImpactTimeline.MEDIUM_TERM
    return ImpactTimeline.SHORT_TERM


class ScoringEngine:
    """Reduces a finished session to its final AssessmentResults."""

    def __init__(
        self,
        insight_client: IInsightClient,
        recorder: "AssessmentRecorder",
        total_questions: int = TOTAL_QUESTIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = insight_client
        self._recorder = recorder
        self.total_questions = total_questions
        self._clock = clock

    async def generate_final_results(self, session: AssessmentSession) -> AssessmentResults:
        """Score a session that has all of its responses.

        Args:
            session: Session with at least ``total_questions`` responses

        Returns:
            Clamped results. Always produced, even when the AI is unavailable.

        Raises:
            CompletionPreconditionError: If responses are still missing
        """
        if len(session.responses) < self.total_questions:
            raise CompletionPreconditionError(
                session.session_id, len(session.responses), self.total_questions
            )

        logger.info(
            "Generating final assessment results",
            extra={"session_id": session.session_id},
        )
        outcome = await self._client.generate_final_assessment(FinalAssessmentRequest(
            session_id=session.session_id,
            responses=list(session.responses),
            insights=list(session.insights),
            user_info=session.user_info,
        ))
        source = ValueSource.FALLBACK if outcome.is_fallback else ValueSource.AI
        results = self.build_results(session.session_id, outcome.value, source)

        stored = await self._recorder.store_completed_assessment(
            session.session_id, results, session.user_info
        )
        if stored.success:
            logger.info(
                f"Final assessment stored: {stored.assessment_id}",
                extra={"session_id": session.session_id},
            )

        return results

    def build_results(
        self,
        session_id: str,
        payload: FinalAssessmentPayload,
        source: ValueSource,
    ) -> AssessmentResults:
        """Clamp a raw payload and derive the lead qualification fields."""
        score = int(round(clamp(payload.overall_score, MIN_OVERALL_SCORE, MAX_OVERALL_SCORE)))
        skills = clamp_skill_levels(payload.skill_levels)
        challenges = normalize_challenges(payload.challenges)
        confidence = int(round(clamp(
            payload.confidence, RESULTS_CONFIDENCE_MIN, RESULTS_CONFIDENCE_MAX
        )))

        return AssessmentResults(
            session_id=session_id,
            overall_score=score,
            performance_level=resolve_performance_level(payload.performance_level, score),
            skill_levels=skills,
            weighted_skill_score=skills.weighted_score(),
            challenges=challenges,
            recommendations=list(payload.recommendations),
            focus_area=payload.focus_area,
            revenue_opportunity=max(0, int(round(payload.revenue_opportunity))),
            roi_multiplier=max(MIN_ROI_MULTIPLIER, float(payload.roi_multiplier)),
            is_high_priority=score < HIGH_PRIORITY_SCORE_THRESHOLD,
            lead_priority=determine_lead_priority(score, challenges),
            impact_timeline=determine_impact_timeline(score),
            next_steps=list(payload.next_steps),
            confidence=confidence,
            source=source,
            generated_at=self._clock(),
        )
