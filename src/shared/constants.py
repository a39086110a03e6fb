"""Application-wide constants.

This module centralizes magic numbers and fixed content that are used across
multiple modules. Values that need to be configurable at runtime should go in
config.py instead.
"""

# ===================
# Assessment Shape
# ===================

TOTAL_QUESTIONS = 12

# Response counts at which an insight batch closes
DEFAULT_BATCH_BOUNDARIES = (4, 9, 12)

# Number of insight batches per assessment
MAX_BATCHES = 3

# Questions per batch used for progress reporting
PROGRESS_BATCH_SIZE = 4


# ===================
# Confidence Bounds
# ===================

FIRST_BATCH_CONFIDENCE_MIN = 60
LATER_BATCH_CONFIDENCE_MIN = 70
INSIGHT_CONFIDENCE_MAX = 95

RESULTS_CONFIDENCE_MIN = 70
RESULTS_CONFIDENCE_MAX = 95

FALLBACK_INSIGHT_CONFIDENCE = 70


# ===================
# Scoring
# ===================

MIN_OVERALL_SCORE = 0
MAX_OVERALL_SCORE = 100

MIN_SKILL_LEVEL = 0
MAX_SKILL_LEVEL = 10

MIN_CHALLENGE_IMPACT = 1
MAX_CHALLENGE_IMPACT = 10

MIN_ROI_MULTIPLIER = 2.0

HIGH_PRIORITY_SCORE_THRESHOLD = 60

SKILL_WEIGHTS = {
    "customer_analysis": 0.25,
    "business_communication": 0.20,
    "revenue_strategy": 0.20,
    "value_articulation": 0.20,
    "strategic_thinking": 0.15,
}

# (minimum score, tier name, description), highest first
PERFORMANCE_TIERS = (
    (90, "Strategic", "Exceptional strategic thinking and execution"),
    (80, "Advanced", "Advanced skills with strong strategic focus"),
    (70, "Proficient", "Proficient across all key areas"),
    (60, "Competent", "Competent with room for growth"),
    (40, "Developing", "Developing skills with clear growth path"),
    (0, "Foundation", "Foundation level with significant growth opportunity"),
)

PRIORITY_ORDER = {"critical": 4, "high": 3, "medium": 2, "low": 1}


# ===================
# Fallback Content
# ===================

FALLBACK_CHALLENGES = (
    "Technical Translation Challenge",
    "Buyer Conversations Challenge",
    "Competitive Positioning Challenge",
)

FALLBACK_INSIGHT_TEXT = (
    "Based on your responses, you show strong technical understanding but may "
    "benefit from focusing on buyer-centric conversations to improve deal outcomes."
)

FALLBACK_BUSINESS_IMPACT = "Potential revenue impact from improved sales conversations"

FALLBACK_REASONING = "Fallback analysis based on standard assessment patterns"

BASELINE_OVERALL_SCORE = 70
BASELINE_CONFIDENCE = 75
BASELINE_REVENUE_OPPORTUNITY = 500_000
BASELINE_ROI_MULTIPLIER = 3.0
BASELINE_FOCUS_AREA = "technical_translation"

BASELINE_NEXT_STEPS = (
    "Review detailed assessment results",
    "Access your 3 revenue intelligence tools",
    "Implement systematic improvement approach",
)


# ===================
# Resilience Keys
# ===================

AI_RATE_LIMIT_KEY = "anthropic"
AI_CIRCUIT_KEY = "ai-insight"


# ===================
# Rate Limiting
# ===================

# Probability of running cleanup on each rate limit check (1%)
RATE_LIMIT_CLEANUP_PROBABILITY = 0.01
