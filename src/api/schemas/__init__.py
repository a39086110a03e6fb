"""API schemas package."""

from src.api.schemas.common import ErrorResponse
from src.api.schemas.insights import (
    CircuitStatusResponse,
    InsightResponse,
    InsightServiceStatusResponse,
    SessionInsightsResponse,
)
from src.api.schemas.assessments import (
    AssessmentResultsResponse,
    ProgressResponse,
    SessionSummaryResponse,
    StartAssessmentRequest,
    StartAssessmentResponse,
    SubmitResponseRequest,
    SubmitResponseResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    # Insights
    "CircuitStatusResponse",
    "InsightResponse",
    "InsightServiceStatusResponse",
    "SessionInsightsResponse",
    # Assessments
    "AssessmentResultsResponse",
    "ProgressResponse",
    "SessionSummaryResponse",
    "StartAssessmentRequest",
    "StartAssessmentResponse",
    "SubmitResponseRequest",
    "SubmitResponseResponse",
]
