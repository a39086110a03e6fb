"""Insight API routes."""

from fastapi import APIRouter

from src.api.dependencies import InsightClientDep, RegistryDep, SessionStoreDep
from src.api.schemas.insights import (
    CircuitStatusResponse,
    InsightResponse,
    InsightServiceStatusResponse,
    SessionInsightsResponse,
)
from src.shared.constants import AI_CIRCUIT_KEY
from src.shared.feature_flags import is_ai_insights_enabled

router = APIRouter()


@router.get(
    "/status",
    response_model=InsightServiceStatusResponse,
    summary="Insight service status",
    description="Report whether AI insights are configured and the state of the AI circuit.",
)
async def insight_status(
    registry: RegistryDep,
    insight_client: InsightClientDep,
) -> InsightServiceStatusResponse:
    """Get insight service status.

    The AI circuit is always reported, as closed until its first call.
    """
    stats = registry.circuit_breakers.states()
    if AI_CIRCUIT_KEY not in stats:
        stats[AI_CIRCUIT_KEY] = registry.circuit_breakers.get(AI_CIRCUIT_KEY).stats()

    return InsightServiceStatusResponse(
        ai_configured=insight_client.is_configured,
        ai_enabled=is_ai_insights_enabled(),
        model=registry.llm_service.default_model,
        circuits=[
            CircuitStatusResponse(
                name=s.name,
                state=s.state.value,
                failure_count=s.failure_count,
                success_count=s.success_count,
                last_failure_time=s.last_failure_time,
            )
            for s in stats.values()
        ],
    )


@router.get(
    "/{session_id}",
    response_model=SessionInsightsResponse,
    summary="Get session insights",
    description="Get the insights generated so far for a session. Unknown sessions have none.",
)
async def get_session_insights(
    session_id: str,
    session_store: SessionStoreDep,
) -> SessionInsightsResponse:
    """Get insights for a session."""
    insights = session_store.get_session_insights(session_id)
    return SessionInsightsResponse(
        session_id=session_id,
        insights=[InsightResponse.model_validate(i.to_dict()) for i in insights],
        count=len(insights),
    )
