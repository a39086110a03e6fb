"""Supabase results store over the PostgREST HTTP API."""

import logging
from typing import Any

import httpx

from src.modules.assessment.interface import AssessmentResults, SessionStatus, UserInfo
from src.modules.persistence.interface import StoreResult, build_assessment_record
from src.shared.datetime_utils import datetime_to_iso, utc_now

logger = logging.getLogger(__name__)

RESULTS_TABLE = "assessment_results"
SESSIONS_TABLE = "assessment_sessions"


class SupabaseAssessmentRepository:
    """Writes completed assessments and status changes to Supabase.

    HTTP and decoding failures are reported as unsuccessful ``StoreResult``
    values rather than raised.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            url: Supabase project URL, e.g. https://xyz.supabase.co
            api_key: Service role or anon key
            timeout: Per-request timeout in seconds
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=timeout,
            transport=transport,
        )

    async def store_completed_assessment(
        self,
        session_id: str,
        results: AssessmentResults,
        user_info: UserInfo,
    ) -> StoreResult:
        record = build_assessment_record(session_id, results, user_info)
        try:
            response = await self._client.post(f"/{RESULTS_TABLE}", json=record)
            response.raise_for_status()
            rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Failed to store assessment for session {session_id}: {e}",
                extra={"session_id": session_id},
            )
            return StoreResult(success=False, error=str(e))

        assessment_id = None
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            assessment_id = rows[0].get("id")
        logger.info(f"Stored assessment for session {session_id} in Supabase")
        return StoreResult(
            success=True,
            assessment_id=str(assessment_id) if assessment_id is not None else None,
        )

    async def update_assessment_status(
        self,
        session_id: str,
        status: SessionStatus,
        payload: dict[str, Any] | None = None,
    ) -> StoreResult:
        updates: dict[str, Any] = {
            "status": status.value,
            "updated_at": datetime_to_iso(utc_now()),
        }
        if payload is not None:
            updates["status_payload"] = payload

        try:
            response = await self._client.patch(
                f"/{SESSIONS_TABLE}",
                params={"session_id": f"eq.{session_id}"},
                json=updates,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to update assessment status for session {session_id}: {e}",
                extra={"session_id": session_id, "status": status.value},
            )
            return StoreResult(success=False, error=str(e))

        return StoreResult(success=True)

    async def aclose(self) -> None:
        await self._client.aclose()
