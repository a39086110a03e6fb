"""Turn AI response text into insight and assessment payloads.

The model is asked for JSON but may wrap it in prose or code fences, so the
parser looks for the first well-formed JSON object anywhere in the text.
"""

import json
import logging
import math
from typing import Any

from src.modules.assessment.interface import (
    Challenge,
    Priority,
    Recommendation,
    SkillLevels,
)
from src.modules.insights.interface import FinalAssessmentPayload, InsightPayload
from src.shared.constants import (
    FIRST_BATCH_CONFIDENCE_MIN,
    INSIGHT_CONFIDENCE_MAX,
    LATER_BATCH_CONFIDENCE_MIN,
)
from src.shared.exceptions import ResponseParseError

logger = logging.getLogger(__name__)

INSIGHT_REQUIRED_FIELDS = (
    "challengeIdentified",
    "insight",
    "businessImpact",
    "confidence",
    "reasoning",
)

_SKILL_KEYS = {
    "customer_analysis": "customerAnalysis",
    "business_communication": "businessCommunication",
    "revenue_strategy": "revenueStrategy",
    "value_articulation": "valueArticulation",
    "strategic_thinking": "strategicThinking",
}


def extract_json_object(text: str) -> dict[str, Any]:
    """Return the first well-formed JSON object embedded in ``text``.

    Raises:
        ResponseParseError: If no JSON object can be decoded
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    raise ResponseParseError("no JSON object found in response")


def _number(data: dict[str, Any], key: str, default: float | None = None) -> float:
    value = data.get(key)
    if value is None:
        if default is None:
            raise ResponseParseError(f"missing field '{key}'")
        return default
    if isinstance(value, bool):
        raise ResponseParseError(f"field '{key}' is not a number: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ResponseParseError(f"field '{key}' is not a number: {value!r}") from e
    if not math.isfinite(number):
        raise ResponseParseError(f"field '{key}' is not finite: {value!r}")
    return number


def _text(data: dict[str, Any], key: str, default: str | None = None) -> str:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ResponseParseError(f"missing field '{key}'")
        return default
    return str(value)


def parse_insight_payload(text: str) -> InsightPayload:
    """Parse an insight response.

    All of challengeIdentified, insight, businessImpact, confidence and
    reasoning must be present.

    Raises:
        ResponseParseError: On missing fields or unparseable text
    """
    data = extract_json_object(text)

    missing = [name for name in INSIGHT_REQUIRED_FIELDS if data.get(name) in (None, "")]
    if missing:
        raise ResponseParseError(f"missing fields: {', '.join(missing)}")

    return InsightPayload(
        challenge_identified=_text(data, "challengeIdentified"),
        insight=_text(data, "insight"),
        business_impact=_text(data, "businessImpact"),
        confidence=_number(data, "confidence"),
        reasoning=_text(data, "reasoning"),
    )


def clamp_insight_confidence(confidence: float, batch_number: int) -> int:
    """Clamp an insight's confidence into its batch's allowed range.

    The first batch accepts 60-95 and later batches 70-95. Out-of-range values
    are clamped and logged rather than rejected.
    """
    floor = FIRST_BATCH_CONFIDENCE_MIN if batch_number == 1 else LATER_BATCH_CONFIDENCE_MIN
    clamped = int(round(min(INSIGHT_CONFIDENCE_MAX, max(floor, confidence))))
    if clamped != confidence:
        logger.info(
            f"Clamped insight confidence {confidence} to {clamped} for batch {batch_number}",
            extra={"batch_number": batch_number, "raw_confidence": confidence},
        )
    return clamped


def _parse_challenges(items: Any) -> list[Challenge]:
    if not isinstance(items, list):
        return []
    challenges = []
    for item in items:
        if not isinstance(item, dict) or not item.get("name"):
            logger.debug(f"Skipping malformed challenge entry: {item!r}")
            continue
        challenges.append(Challenge(
            name=str(item["name"]),
            description=_text(item, "description", ""),
            priority=Priority.coerce(item.get("priority")),
            impact=int(round(_number(item, "impact", 5))),
            business_consequence=_text(item, "businessConsequence", ""),
        ))
    return challenges


def _parse_recommendations(items: Any) -> list[Recommendation]:
    if not isinstance(items, list):
        return []
    recommendations = []
    for item in items:
        if not isinstance(item, dict) or not item.get("title"):
            logger.debug(f"Skipping malformed recommendation entry: {item!r}")
            continue
        tools = item.get("tools")
        recommendations.append(Recommendation(
            category=_text(item, "category", ""),
            title=str(item["title"]),
            description=_text(item, "description", ""),
            priority=Priority.coerce(item.get("priority")),
            expected_outcome=_text(item, "expectedOutcome", ""),
            timeframe=_text(item, "timeframe", ""),
            tools=[str(t) for t in tools] if isinstance(tools, list) else [],
        ))
    return recommendations


def parse_final_assessment_payload(text: str) -> FinalAssessmentPayload:
    """Parse a final assessment response.

    ``overallScore`` and ``skillLevels`` are required. Other fields fall back
    to neutral defaults. Values are returned unclamped.

    Raises:
        ResponseParseError: On missing required fields or unparseable text
    """
    data = extract_json_object(text)

    skills = data.get("skillLevels")
    if not isinstance(skills, dict):
        raise ResponseParseError("missing field 'skillLevels'")

    next_steps = data.get("nextSteps")

    return FinalAssessmentPayload(
        overall_score=_number(data, "overallScore"),
        performance_level=_text(data, "performanceLevel", ""),
        skill_levels=SkillLevels(**{
            name: _number(skills, key) for name, key in _SKILL_KEYS.items()
        }),
        challenges=_parse_challenges(data.get("challenges")),
        recommendations=_parse_recommendations(data.get("recommendations")),
        focus_area=_text(data, "focusArea", "customer_analysis"),
        revenue_opportunity=_number(data, "revenueOpportunity", 500_000),
        roi_multiplier=_number(data, "roiMultiplier", 3.0),
        next_steps=[str(s) for s in next_steps] if isinstance(next_steps, list) else [],
        confidence=_number(data, "confidence", 80),
    )
