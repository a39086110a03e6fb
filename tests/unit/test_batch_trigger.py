"""Unit tests for the insight batch trigger."""

import pytest
from unittest.mock import AsyncMock

from src.modules.assessment.interface import (
    AssessmentSession,
    Insight,
    SessionStatus,
    ValueSource,
)
from src.modules.insights.trigger import InsightBatchTrigger, build_batch_specs
from src.shared.result import Outcome


def insight_for(batch):
    return Insight(
        id=f"insight_{batch.session_id}_{batch.batch_number}",
        session_id=batch.session_id,
        batch_number=batch.batch_number,
        question_range=batch.question_range,
        insight="Insight text",
        challenge_identified="Challenge",
        business_impact="Impact",
        confidence=80,
        reasoning="Reasoning",
        source=ValueSource.AI,
    )


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.generate_insight = AsyncMock(
        side_effect=lambda batch: Outcome.success(insight_for(batch))
    )
    return mock


@pytest.fixture
def session(user_info):
    return AssessmentSession(session_id="s1", user_info=user_info)


class TestBuildBatchSpecs:
    """Tests for batch boundary handling."""

    def test_default_ranges(self):
        specs = build_batch_specs((4, 9, 12))

        assert [s.question_range for s in specs] == ["1-4", "5-9", "10-12"]
        assert [(s.start, s.end) for s in specs] == [(0, 4), (4, 9), (9, 12)]

    @pytest.mark.parametrize("boundaries", [(), (4, 4, 12), (9, 4, 12), (0, 4)])
    def test_invalid_boundaries(self, boundaries):
        with pytest.raises(ValueError):
            build_batch_specs(boundaries)


class TestInsightBatchTrigger:
    """Tests for InsightBatchTrigger.check_and_generate."""

    @pytest.mark.asyncio
    async def test_only_boundary_counts_trigger(self, client, session, make_response):
        """Test insights are generated exactly at responses 4, 9 and 12."""
        trigger = InsightBatchTrigger(client)
        triggered_at = []

        for number in range(1, 13):
            session.responses.append(make_response(number))
            if await trigger.check_and_generate(session) is not None:
                triggered_at.append(number)

        assert triggered_at == [4, 9, 12]
        assert [i.batch_number for i in session.insights] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_batches_receive_their_slices(self, client, session, make_response):
        """Test each batch sees only its own responses plus earlier insights."""
        trigger = InsightBatchTrigger(client)

        for number in range(1, 13):
            session.responses.append(make_response(number))
            await trigger.check_and_generate(session)

        batches = [c.args[0] for c in client.generate_insight.await_args_list]
        assert [len(b.responses) for b in batches] == [4, 5, 3]
        assert batches[1].responses[0].question_id == "q5"
        assert batches[2].question_range == "10-12"
        assert [len(b.previous_insights) for b in batches] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_advances_status(self, client, session, make_response):
        trigger = InsightBatchTrigger(client)
        for number in range(1, 5):
            session.responses.append(make_response(number))

        await trigger.check_and_generate(session)

        assert session.status is SessionStatus.INSIGHT_GENERATED

    @pytest.mark.asyncio
    async def test_existing_insight_is_not_regenerated(self, client, session, make_response):
        """Test a second check at the same count does nothing."""
        trigger = InsightBatchTrigger(client)
        for number in range(1, 5):
            session.responses.append(make_response(number))

        first = await trigger.check_and_generate(session)
        second = await trigger.check_and_generate(session)

        assert first is not None
        assert second is None
        client.generate_insight.assert_awaited_once()
        assert len(session.insights) == 1

    @pytest.mark.asyncio
    async def test_fallback_insight_is_recorded(self, session, make_response):
        """Test a fallback outcome still lands on the session."""
        client = AsyncMock()
        client.generate_insight = AsyncMock(
            side_effect=lambda batch: Outcome.fallback(insight_for(batch), RuntimeError("x"))
        )
        trigger = InsightBatchTrigger(client)
        for number in range(1, 5):
            session.responses.append(make_response(number))

        insight = await trigger.check_and_generate(session)

        assert insight is session.insights[0]

    @pytest.mark.asyncio
    async def test_custom_boundaries(self, client, session, make_response):
        trigger = InsightBatchTrigger(client, boundaries=(2, 4, 6))
        for number in range(1, 3):
            session.responses.append(make_response(number))

        insight = await trigger.check_and_generate(session)

        assert insight.question_range == "1-2"
        assert trigger.batch_for_count(3) is None
