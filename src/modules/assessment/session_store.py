"""Session store - owns the lifecycle of in-flight assessment sessions.

All mutation of a session happens here, one operation at a time per session:
each session has its own ``asyncio.Lock``, so duplicate submissions for the
same session are serialized while different sessions proceed independently.
"""

import asyncio
import logging
import math
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable
from uuid import uuid4

from src.modules.assessment.interface import (
    AssessmentProgress,
    AssessmentResponse,
    AssessmentResults,
    AssessmentSession,
    Insight,
    SessionStatus,
    UserInfo,
)
from src.modules.assessment.scoring import ScoringEngine
from src.modules.insights.trigger import InsightBatchTrigger
from src.shared.constants import MAX_BATCHES, PROGRESS_BATCH_SIZE, TOTAL_QUESTIONS
from src.shared.datetime_utils import older_than, utc_now
from src.shared.exceptions import (
    SessionClosedError,
    SessionNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from src.modules.persistence.recorder import AssessmentRecorder

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 3600


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class SessionStore:
    """Registry of active assessment sessions keyed by session id."""

    def __init__(
        self,
        trigger: InsightBatchTrigger,
        scoring_engine: ScoringEngine,
        recorder: "AssessmentRecorder",
        total_questions: int = TOTAL_QUESTIONS,
        retention_seconds: int = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._trigger = trigger
        self._scoring = scoring_engine
        self._recorder = recorder
        self.total_questions = total_questions
        self.retention = timedelta(seconds=retention_seconds)
        self._clock = clock
        self._sessions: dict[str, AssessmentSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    async def start_assessment(self, user_info: UserInfo) -> str:
        """Create a new session.

        Args:
            user_info: Participant and product details

        Returns:
            The new session id
        """
        session_id = new_session_id()
        self._sessions[session_id] = AssessmentSession(
            session_id=session_id,
            user_info=user_info,
            started_at=self._clock(),
        )
        self._locks[session_id] = asyncio.Lock()

        logger.info(
            f"Assessment session started: {session_id}",
            extra={"session_id": session_id, "company": user_info.company},
        )
        return session_id

    async def add_response(
        self, session_id: str, response: AssessmentResponse
    ) -> Insight | None:
        """Append a response, generating an insight if it closes a batch.

        Args:
            session_id: Target session
            response: The answered question

        Returns:
            The insight generated by this response, or None

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionClosedError: If the session is already completed
            ValidationError: If the session already holds every response
        """
        async with self._lock_for(session_id):
            session = self._require(session_id)

            if session.status is SessionStatus.COMPLETED:
                raise SessionClosedError(session_id)
            if len(session.responses) >= self.total_questions:
                raise ValidationError(
                    "response",
                    f"assessment accepts at most {self.total_questions} responses",
                )

            session.responses.append(response)
            logger.debug(
                f"Response added to session {session_id}: {response.question_id}",
                extra={"session_id": session_id, "response_count": len(session.responses)},
            )

            insight = await self._trigger.check_and_generate(session)
            if insight is not None:
                await self._recorder.update_assessment_status(
                    session_id,
                    SessionStatus.INSIGHT_GENERATED,
                    {"insights": [i.to_dict() for i in session.insights]},
                )
            return insight

    async def complete_assessment(self, session_id: str) -> AssessmentResults:
        """Finalize a session.

        Completing an already completed session returns its stored results.

        Raises:
            SessionNotFoundError: If the session does not exist
            CompletionPreconditionError: If responses are still missing
        """
        async with self._lock_for(session_id):
            session = self._require(session_id)

            if session.status is SessionStatus.COMPLETED and session.results is not None:
                return session.results

            results = await self._scoring.generate_final_results(session)

            session.results = results
            session.completed_at = self._clock()
            session.advance_status(SessionStatus.COMPLETED)

            await self._recorder.update_assessment_status(
                session_id,
                SessionStatus.COMPLETED,
                {"insights": [i.to_dict() for i in session.insights]},
            )

            logger.info(
                f"Assessment completed: {session_id} - Score: {results.overall_score}",
                extra={"session_id": session_id, "source": results.source.value},
            )
            return results

    def get_session(self, session_id: str) -> AssessmentSession | None:
        return self._sessions.get(session_id)

    def get_session_insights(self, session_id: str) -> list[Insight]:
        """Insights for a session in batch order (empty for unknown sessions)."""
        session = self._sessions.get(session_id)
        return list(session.insights) if session else []

    def get_assessment_progress(self, session_id: str) -> AssessmentProgress:
        """Progress summary. Unknown sessions report zero progress."""
        session = self._sessions.get(session_id)
        if session is None:
            return AssessmentProgress(
                total_questions=self.total_questions,
                answered_questions=0,
                progress_percentage=0,
                current_batch=1,
                insights_generated=0,
            )

        answered = len(session.responses)
        return AssessmentProgress(
            total_questions=self.total_questions,
            answered_questions=answered,
            progress_percentage=round(answered / self.total_questions * 100),
            current_batch=min(MAX_BATCHES, math.ceil(answered / PROGRESS_BATCH_SIZE)),
            insights_generated=len(session.insights),
        )

    def cleanup_completed_sessions(self, now: datetime | None = None) -> int:
        """Drop completed sessions older than the retention window.

        Sessions with an operation in flight are kept until the next pass.

        Returns:
            Number of sessions removed
        """
        now = now or self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.status is SessionStatus.COMPLETED
            and older_than(session.completed_at, self.retention, now)
            and not self._locks[session_id].locked()
        ]
        for session_id in expired:
            del self._sessions[session_id]
            del self._locks[session_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} completed sessions")
        return len(expired)

    async def dispose(self) -> None:
        """Forget every session."""
        count = len(self._sessions)
        self._sessions.clear()
        self._locks.clear()
        logger.info(f"Session store disposed ({count} sessions dropped)")

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        return lock

    def _require(self, session_id: str) -> AssessmentSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session
