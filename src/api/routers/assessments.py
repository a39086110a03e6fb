"""Assessment API routes."""

from dataclasses import asdict

from fastapi import APIRouter, status

from src.api.dependencies import SessionStoreDep
from src.api.schemas.assessments import (
    AssessmentResultsResponse,
    ProgressResponse,
    SessionSummaryResponse,
    StartAssessmentRequest,
    StartAssessmentResponse,
    SubmitResponseRequest,
    SubmitResponseResponse,
)
from src.api.schemas.insights import InsightResponse
from src.modules.assessment.interface import AssessmentResponse, UserInfo
from src.shared.exceptions import SessionNotFoundError

router = APIRouter()


@router.post(
    "/start",
    response_model=StartAssessmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start assessment",
    description="Create a new assessment session for a participant.",
)
async def start_assessment(
    request: StartAssessmentRequest,
    session_store: SessionStoreDep,
) -> StartAssessmentResponse:
    """Start an assessment.

    Args:
        request: Participant and product details
        session_store: Session store instance

    Returns:
        The new session id
    """
    session_id = await session_store.start_assessment(UserInfo(**request.model_dump()))
    return StartAssessmentResponse(
        session_id=session_id,
        total_questions=session_store.total_questions,
    )


@router.post(
    "/{session_id}/responses",
    response_model=SubmitResponseResponse,
    summary="Submit response",
    description=(
        "Record one answered question. Responses that close a batch return "
        "the insight generated for it."
    ),
)
async def submit_response(
    session_id: str,
    request: SubmitResponseRequest,
    session_store: SessionStoreDep,
) -> SubmitResponseResponse:
    """Record a response.

    Raises:
        SessionNotFoundError: Unknown session (404)
        SessionClosedError: Session already completed (409)
        ValidationError: Every response already recorded (400)
    """
    insight = await session_store.add_response(
        session_id,
        AssessmentResponse(
            question_id=request.question_id,
            question_text=request.question_text,
            response=request.response,
            response_type=request.response_type,
        ),
    )
    progress = session_store.get_assessment_progress(session_id)

    return SubmitResponseResponse(
        recorded=True,
        response_count=progress.answered_questions,
        insight=InsightResponse.model_validate(insight.to_dict()) if insight else None,
    )


@router.post(
    "/{session_id}/complete",
    response_model=AssessmentResultsResponse,
    summary="Complete assessment",
    description="Score a session with all of its responses. Repeat calls return the same results.",
)
async def complete_assessment(
    session_id: str,
    session_store: SessionStoreDep,
) -> AssessmentResultsResponse:
    """Complete an assessment.

    Raises:
        SessionNotFoundError: Unknown session (404)
        CompletionPreconditionError: Responses still missing (409)
    """
    results = await session_store.complete_assessment(session_id)
    return AssessmentResultsResponse.model_validate(results.to_dict())


@router.get(
    "/{session_id}",
    response_model=SessionSummaryResponse,
    summary="Get session",
    description="Get an overview of an assessment session.",
)
async def get_session(
    session_id: str,
    session_store: SessionStoreDep,
) -> SessionSummaryResponse:
    """Get a session summary."""
    session = session_store.get_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)

    return SessionSummaryResponse(
        session_id=session.session_id,
        status=session.status,
        company=session.user_info.company,
        product_name=session.user_info.product_name,
        response_count=len(session.responses),
        insights_generated=len(session.insights),
        started_at=session.started_at,
        completed_at=session.completed_at,
        results=(
            AssessmentResultsResponse.model_validate(session.results.to_dict())
            if session.results
            else None
        ),
    )


@router.get(
    "/{session_id}/progress",
    response_model=ProgressResponse,
    summary="Get progress",
    description="Get answered question and insight counts. Unknown sessions report zero progress.",
)
async def get_progress(
    session_id: str,
    session_store: SessionStoreDep,
) -> ProgressResponse:
    """Get assessment progress."""
    progress = session_store.get_assessment_progress(session_id)
    return ProgressResponse(**asdict(progress))
