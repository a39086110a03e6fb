"""Deterministic substitutes used when the AI path is unavailable."""

import random

from src.modules.assessment.interface import (
    Challenge,
    Priority,
    Recommendation,
    SkillLevels,
)
from src.modules.insights.interface import FinalAssessmentPayload, InsightPayload
from src.shared.constants import (
    BASELINE_CONFIDENCE,
    BASELINE_FOCUS_AREA,
    BASELINE_NEXT_STEPS,
    BASELINE_OVERALL_SCORE,
    BASELINE_REVENUE_OPPORTUNITY,
    BASELINE_ROI_MULTIPLIER,
    FALLBACK_BUSINESS_IMPACT,
    FALLBACK_CHALLENGES,
    FALLBACK_INSIGHT_CONFIDENCE,
    FALLBACK_INSIGHT_TEXT,
    FALLBACK_REASONING,
)


def build_fallback_insight_payload(rng: random.Random) -> InsightPayload:
    """Canned insight. Only the challenge name varies between calls."""
    return InsightPayload(
        challenge_identified=rng.choice(FALLBACK_CHALLENGES),
        insight=FALLBACK_INSIGHT_TEXT,
        business_impact=FALLBACK_BUSINESS_IMPACT,
        confidence=FALLBACK_INSIGHT_CONFIDENCE,
        reasoning=FALLBACK_REASONING,
    )


def build_baseline_assessment() -> FinalAssessmentPayload:
    """Baseline result for a session the AI could not assess."""
    return FinalAssessmentPayload(
        overall_score=BASELINE_OVERALL_SCORE,
        performance_level="Competent",
        skill_levels=SkillLevels(
            customer_analysis=7,
            business_communication=6,
            revenue_strategy=8,
            value_articulation=7,
            strategic_thinking=6,
        ),
        challenges=[
            Challenge(
                name="Technical Translation Challenge",
                description="Difficulty translating technical capabilities into business value",
                priority=Priority.HIGH,
                impact=7,
                business_consequence="Heavy discounting to win customers",
            ),
        ],
        recommendations=[
            Recommendation(
                category="Technical Translation",
                title="Develop Buyer-Specific Messaging",
                description=(
                    "Create frameworks to translate technical features into "
                    "business value propositions"
                ),
                priority=Priority.HIGH,
                expected_outcome="40% higher close rates through value-focused presentations",
                timeframe="3-6 months",
                tools=[
                    "Technical Translation Framework",
                    "Value Proposition Builder",
                    "ROI Calculator",
                ],
            ),
        ],
        focus_area=BASELINE_FOCUS_AREA,
        revenue_opportunity=BASELINE_REVENUE_OPPORTUNITY,
        roi_multiplier=BASELINE_ROI_MULTIPLIER,
        next_steps=list(BASELINE_NEXT_STEPS),
        confidence=BASELINE_CONFIDENCE,
    )
