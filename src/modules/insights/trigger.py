"""Insight batch trigger.

Responses are grouped into three batches that close at fixed response
counts (4, 9 and 12 by default). When a response closes a batch, exactly one
insight is generated for it.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from src.modules.assessment.interface import AssessmentSession, Insight, SessionStatus
from src.modules.insights.interface import IInsightClient, InsightBatch
from src.shared.constants import DEFAULT_BATCH_BOUNDARIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchSpec:
    """Position of one batch within the response sequence."""

    number: int
    start: int  # inclusive index
    end: int  # exclusive index, equal to the response count that closes the batch

    @property
    def question_range(self) -> str:
        return f"{self.start + 1}-{self.end}"


def build_batch_specs(boundaries: Sequence[int]) -> tuple[BatchSpec, ...]:
    """Build batch specs from strictly increasing closing counts.

    Raises:
        ValueError: If the boundaries are empty, non-positive or not increasing
    """
    if not boundaries:
        raise ValueError("At least one batch boundary is required")

    specs = []
    start = 0
    for number, end in enumerate(boundaries, start=1):
        if end <= start:
            raise ValueError(f"Batch boundaries must be strictly increasing: {list(boundaries)}")
        specs.append(BatchSpec(number=number, start=start, end=end))
        start = end
    return tuple(specs)


class InsightBatchTrigger:
    """Decides when a session has closed a batch and records its insight."""

    def __init__(
        self,
        insight_client: IInsightClient,
        boundaries: Sequence[int] = DEFAULT_BATCH_BOUNDARIES,
    ) -> None:
        self._client = insight_client
        self.batches = build_batch_specs(boundaries)
        self._by_count = {spec.end: spec for spec in self.batches}

    def batch_for_count(self, response_count: int) -> BatchSpec | None:
        """Return the batch closed by the given response count, if any."""
        return self._by_count.get(response_count)

    async def check_and_generate(self, session: AssessmentSession) -> Insight | None:
        """Generate the insight for a batch the latest response just closed.

        Does nothing unless the response count sits exactly on a boundary and
        the session has no insight for that batch yet. The insight client
        never raises for AI failures, so a closed batch always ends with an
        insight appended and the status at least ``insight_generated``.

        Args:
            session: Session whose latest response was just appended

        Returns:
            The new insight, or None if no batch was closed
        """
        spec = self.batch_for_count(len(session.responses))
        if spec is None:
            return None

        if session.has_insight(spec.number):
            logger.debug(
                f"Insight for batch {spec.number} already exists, skipping",
                extra={"session_id": session.session_id},
            )
            return None

        logger.info(
            f"Generating insight for batch {spec.number} ({spec.question_range})",
            extra={"session_id": session.session_id, "batch_number": spec.number},
        )

        batch = InsightBatch(
            session_id=session.session_id,
            batch_number=spec.number,
            question_range=spec.question_range,
            responses=list(session.responses[spec.start:spec.end]),
            user_info=session.user_info,
            previous_insights=list(session.insights),
        )
        outcome = await self._client.generate_insight(batch)

        insight = outcome.value
        session.add_insight(insight)
        session.advance_status(SessionStatus.INSIGHT_GENERATED)

        logger.info(
            f"Insight generated for batch {spec.number}: {insight.challenge_identified}",
            extra={
                "session_id": session.session_id,
                "batch_number": spec.number,
                "fallback": outcome.is_fallback,
            },
        )
        return insight
