"""Prompt builders for insight and final assessment requests."""

from src.modules.assessment.interface import AssessmentResponse, Insight
from src.modules.insights.interface import FinalAssessmentRequest, InsightBatch

INSIGHT_RESPONSE_FORMAT = """{
  "challengeIdentified": "Specific challenge name",
  "insight": "Personalized insight message (2-3 sentences)",
  "businessImpact": "Specific business consequence",
  "confidence": 85,
  "reasoning": "Brief explanation of analysis"
}"""

FINAL_ASSESSMENT_RESPONSE_FORMAT = """{
  "overallScore": 75,
  "performanceLevel": "Competent",
  "skillLevels": {
    "customerAnalysis": 7,
    "businessCommunication": 6,
    "revenueStrategy": 8,
    "valueArticulation": 7,
    "strategicThinking": 6
  },
  "challenges": [
    {
      "name": "Technical Translation Challenge",
      "description": "Specific description",
      "priority": "high",
      "impact": 8,
      "businessConsequence": "Specific consequence"
    }
  ],
  "recommendations": [
    {
      "category": "Technical Translation",
      "title": "Specific recommendation",
      "description": "Detailed description",
      "priority": "high",
      "expectedOutcome": "Specific outcome",
      "timeframe": "3-6 months",
      "tools": ["Tool 1", "Tool 2"]
    }
  ],
  "focusArea": "technical_translation",
  "revenueOpportunity": 750000,
  "roiMultiplier": 3.5,
  "nextSteps": ["Step 1", "Step 2"],
  "confidence": 88
}"""


def _format_responses(responses: list[AssessmentResponse]) -> str:
    return "\n".join(
        f"{index}. {r.question_text}\n   Response: {r.response}"
        for index, r in enumerate(responses, start=1)
    )


def _format_insights(insights: list[Insight], with_challenge: bool = False) -> str:
    lines = []
    for index, insight in enumerate(insights, start=1):
        line = f"{index}. {insight.insight}"
        if with_challenge:
            line += f" (Challenge: {insight.challenge_identified})"
        lines.append(line)
    return "\n".join(lines)


def build_insight_prompt(batch: InsightBatch) -> str:
    """Build the prompt for one response batch.

    Batches after the first include earlier insights so the analysis
    stays consistent across the session.
    """
    user = batch.user_info
    sections = [
        "You are an expert B2B sales strategist analyzing assessment responses "
        "to identify sales challenges and business impact.",
        f"Company: {user.company}\n"
        f"Product: {user.product_name}\n"
        f"Business Model: {user.business_model}",
        f"Current Assessment Responses (Batch {batch.batch_number}):\n"
        + _format_responses(batch.responses),
    ]

    if batch.previous_insights:
        sections.append("Previous Insights:\n" + _format_insights(batch.previous_insights))

    sections.append(
        "Based on these responses, identify the primary sales challenge and "
        "provide a personalized insight.\n\n"
        "Focus on:\n"
        "1. Specific sales challenges (Technical Translation, Buyer Conversations, "
        "Competitive Positioning)\n"
        "2. Business impact and consequences\n"
        "3. Clear, actionable insights\n"
        "4. Confidence level based on response quality\n\n"
        f"Respond with valid JSON:\n{INSIGHT_RESPONSE_FORMAT}"
    )
    return "\n\n".join(sections)


def build_final_assessment_prompt(request: FinalAssessmentRequest) -> str:
    """Build the prompt for the full-session assessment."""
    user = request.user_info
    sections = [
        "You are an expert B2B sales strategist conducting a comprehensive "
        "revenue intelligence assessment.",
        f"Company: {user.company}\n"
        f"Product: {user.product_name}\n"
        f"Business Model: {user.business_model}\n"
        f"Product Description: {user.product_description}",
        "Complete Assessment Responses:\n" + _format_responses(request.responses),
    ]

    if request.insights:
        sections.append(
            "Real-time Insights Generated:\n"
            + _format_insights(request.insights, with_challenge=True)
        )

    sections.append(
        "Provide a comprehensive assessment with:\n\n"
        "1. Overall competency score (0-100)\n"
        "2. Performance level (Foundation, Developing, Competent, Proficient, "
        "Advanced, Strategic)\n"
        "3. Skill levels across 5 areas (0-10 scale each)\n"
        "4. Specific challenges identified from insights\n"
        "5. Personalized recommendations with tools\n"
        "6. Focus area for improvement\n"
        "7. Revenue opportunity estimate\n"
        "8. ROI multiplier\n"
        "9. Next steps\n\n"
        f"Respond with valid JSON:\n{FINAL_ASSESSMENT_RESPONSE_FORMAT}"
    )
    return "\n\n".join(sections)
