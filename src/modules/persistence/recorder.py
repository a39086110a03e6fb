"""Best-effort writes to the results store.

Persistence never decides the outcome of an assessment. Every write is
bounded by a timeout, and failures of any kind are logged and reported as an
unsuccessful ``StoreResult``.
"""

import asyncio
import logging
from typing import Any, Awaitable

from src.modules.assessment.interface import AssessmentResults, SessionStatus, UserInfo
from src.modules.persistence.interface import IAssessmentRepository, StoreResult

logger = logging.getLogger(__name__)


class AssessmentRecorder:
    """Wraps a repository with timeouts and failure logging."""

    def __init__(self, repository: IAssessmentRepository, timeout_seconds: float = 10.0) -> None:
        self.repository = repository
        self.timeout_seconds = timeout_seconds

    async def store_completed_assessment(
        self,
        session_id: str,
        results: AssessmentResults,
        user_info: UserInfo,
    ) -> StoreResult:
        return await self._guard(
            "store_completed_assessment",
            session_id,
            self.repository.store_completed_assessment(session_id, results, user_info),
        )

    async def update_assessment_status(
        self,
        session_id: str,
        status: SessionStatus,
        payload: dict[str, Any] | None = None,
    ) -> StoreResult:
        return await self._guard(
            "update_assessment_status",
            session_id,
            self.repository.update_assessment_status(session_id, status, payload),
        )

    async def _guard(
        self,
        operation: str,
        session_id: str,
        call: Awaitable[StoreResult],
    ) -> StoreResult:
        try:
            result = await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                f"Persistence {operation} timed out after {self.timeout_seconds}s",
                extra={"session_id": session_id, "operation": operation},
            )
            return StoreResult(success=False, error="timeout")
        except Exception as e:
            logger.error(
                f"Persistence {operation} failed: {e}",
                extra={"session_id": session_id, "operation": operation},
            )
            return StoreResult(success=False, error=str(e))

        if not result.success:
            logger.warning(
                f"Persistence {operation} reported failure: {result.error}",
                extra={"session_id": session_id, "operation": operation},
            )
        return result

    async def aclose(self) -> None:
        await self.repository.aclose()
