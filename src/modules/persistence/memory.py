"""In-memory results store, used when no external store is configured."""

import logging
from typing import Any
from uuid import uuid4

from src.modules.assessment.interface import AssessmentResults, SessionStatus, UserInfo
from src.modules.persistence.interface import StoreResult, build_assessment_record
from src.shared.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class InMemoryAssessmentRepository:
    """Keeps completed assessments and status history in process memory."""

    def __init__(self) -> None:
        self.assessments: dict[str, dict[str, Any]] = {}
        self.status_history: dict[str, list[dict[str, Any]]] = {}

    async def store_completed_assessment(
        self,
        session_id: str,
        results: AssessmentResults,
        user_info: UserInfo,
    ) -> StoreResult:
        assessment_id = str(uuid4())
        record = build_assessment_record(session_id, results, user_info)
        record["id"] = assessment_id
        self.assessments[session_id] = record
        logger.debug(f"Stored assessment {assessment_id} for session {session_id}")
        return StoreResult(success=True, assessment_id=assessment_id)

    async def update_assessment_status(
        self,
        session_id: str,
        status: SessionStatus,
        payload: dict[str, Any] | None = None,
    ) -> StoreResult:
        self.status_history.setdefault(session_id, []).append({
            "status": status.value,
            "payload": payload,
            "updated_at": utc_now(),
        })
        return StoreResult(success=True)

    async def aclose(self) -> None:
        self.assessments.clear()
        self.status_history.clear()
