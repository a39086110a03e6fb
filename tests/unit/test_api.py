"""Tests for the HTTP API."""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.api.middleware.error_handler import ERROR_KIND_RESPONSES, response_for_kind
from src.api.middleware.logging import SessionContextFilter, session_id_from_path
from src.api.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware
from src.modules.llm.service import LLMService
from src.modules.persistence import InMemoryAssessmentRepository
from src.shared.exceptions import ErrorKind
from src.shared.service_registry import ServiceRegistry

START_PAYLOAD = {
    "email": "alex@example.com",
    "company": "Acme Analytics",
    "product_name": "Forecast Pro",
    "business_model": "B2B SaaS",
}


def response_payload(number: int, value=7) -> dict:
    return {
        "question_id": f"q{number}",
        "question_text": f"Question {number}",
        "response": value,
        "response_type": "scale",
    }


@pytest.fixture
def registry(settings):
    """Registry with no AI key, so every insight and result is a fallback."""
    return ServiceRegistry.create(
        settings,
        llm_service=LLMService(api_key=None, default_model="claude-test"),
        repository=InMemoryAssessmentRepository(),
    )


@pytest.fixture
def client(registry):
    return TestClient(create_app(registry))


@pytest.fixture
def session_id(client):
    response = client.post("/assessments/start", json=START_PAYLOAD)
    return response.json()["session_id"]


def submit(client, session_id, numbers):
    return [
        client.post(f"/assessments/{session_id}/responses", json=response_payload(n))
        for n in numbers
    ]


class TestHealthEndpoints:
    """Tests for health checks."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_fallback_mode(self, client):
        data = client.get("/health/ready").json()

        assert data["status"] == "ready"
        assert data["ai"] == "fallback"
        assert data["repository"] == "InMemoryAssessmentRepository"

    def test_live(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}


class TestAssessmentEndpoints:
    """Tests for the assessment lifecycle over HTTP."""

    def test_start(self, client):
        response = client.post("/assessments/start", json=START_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["session_id"].startswith("session_")
        assert data["total_questions"] == 12

    def test_start_rejects_invalid_email(self, client):
        response = client.post("/assessments/start", json={**START_PAYLOAD, "email": "nope"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_fourth_response_returns_insight(self, client, session_id):
        responses = submit(client, session_id, range(1, 5))

        assert [r.status_code for r in responses] == [200] * 4
        assert responses[2].json()["insight"] is None
        data = responses[3].json()
        assert data["response_count"] == 4
        assert data["insight"]["batch_number"] == 1
        assert data["insight"]["question_range"] == "1-4"
        assert data["insight"]["source"] == "fallback"
        assert data["insight"]["id"] == f"insight_{session_id}_1"

    def test_unknown_session_is_404(self, client):
        response = client.post(
            "/assessments/session_missing/responses", json=response_payload(1)
        )

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"

    def test_early_completion_is_409(self, client, session_id):
        submit(client, session_id, range(1, 4))

        response = client.post(f"/assessments/{session_id}/complete")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ASSESSMENT_INCOMPLETE"

    def test_thirteenth_response_is_400(self, client, session_id):
        submit(client, session_id, range(1, 13))

        response = client.post(
            f"/assessments/{session_id}/responses", json=response_payload(13)
        )

        assert response.status_code == 400

    def test_complete_returns_baseline_results(self, client, session_id):
        submit(client, session_id, range(1, 13))

        response = client.post(f"/assessments/{session_id}/complete")

        assert response.status_code == 200
        data = response.json()
        assert data["overall_score"] == 70
        assert data["performance_level"]["level"] == "Competent"
        assert data["source"] == "fallback"
        assert data["roi_multiplier"] >= 2.0
        assert 70 <= data["confidence"] <= 95

    def test_completed_session_rejects_responses(self, client, session_id):
        submit(client, session_id, range(1, 13))
        client.post(f"/assessments/{session_id}/complete")

        response = client.post(
            f"/assessments/{session_id}/responses", json=response_payload(1)
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_get_session(self, client, session_id):
        submit(client, session_id, range(1, 5))

        data = client.get(f"/assessments/{session_id}").json()

        assert data["status"] == "insight_generated"
        assert data["response_count"] == 4
        assert data["insights_generated"] == 1
        assert data["results"] is None

    def test_get_unknown_session(self, client):
        assert client.get("/assessments/session_missing").status_code == 404

    def test_progress(self, client, session_id):
        submit(client, session_id, range(1, 6))

        data = client.get(f"/assessments/{session_id}/progress").json()

        assert data["answered_questions"] == 5
        assert data["current_batch"] == 2
        assert data["insights_generated"] == 1


class TestInsightEndpoints:
    """Tests for insight retrieval and status."""

    def test_session_insights(self, client, session_id):
        submit(client, session_id, range(1, 10))

        data = client.get(f"/insights/{session_id}").json()

        assert data["count"] == 2
        assert [i["question_range"] for i in data["insights"]] == ["1-4", "5-9"]

    def test_unknown_session_has_no_insights(self, client):
        data = client.get("/insights/session_missing").json()

        assert data["count"] == 0
        assert data["insights"] == []

    def test_status(self, client):
        data = client.get("/insights/status").json()

        assert data["ai_configured"] is False
        assert data["model"] == "claude-test"
        assert data["circuits"][0]["name"] == "ai-insight"
        assert data["circuits"][0]["state"] == "closed"


class TestErrorMapping:
    """Tests for error kind to HTTP status mapping."""

    def test_every_kind_is_mapped(self):
        assert set(ERROR_KIND_RESPONSES) == set(ErrorKind)

    @pytest.mark.parametrize("kind,status_code", [
        (ErrorKind.VALIDATION, 400),
        (ErrorKind.NOT_FOUND, 404),
        (ErrorKind.COMPLETION_PRECONDITION, 409),
        (ErrorKind.RATE_LIMIT, 429),
        (ErrorKind.TIMEOUT, 504),
        (ErrorKind.CIRCUIT_OPEN, 503),
    ])
    def test_status_codes(self, kind, status_code):
        assert response_for_kind(kind)[0] == status_code


class TestMiddleware:
    """Tests for rate limiting and request logging middleware."""

    def test_rate_limit_returns_429(self):
        app = FastAPI()
        app.add_middleware(
            RateLimitMiddleware,
            custom_limits={"/ping": RateLimitConfig(requests=2, window_seconds=60)},
        )

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        client = TestClient(app)
        statuses = [client.get("/ping").status_code for _ in range(3)]
        limited = client.get("/ping")

        assert statuses == [200, 200, 429]
        assert limited.status_code == 429
        assert 1 <= int(limited.headers["Retry-After"]) <= 60

    def test_unlimited_path_passes(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware)

        @app.get("/other")
        async def other():
            return {"ok": True}

        client = TestClient(app)

        assert all(client.get("/other").status_code == 200 for _ in range(5))

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"

    def test_unsafe_request_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Request-ID": "not valid!!"})

        assert response.headers["X-Request-ID"] != "not valid!!"


class TestRequestLogging:
    """Tests for session-aware request logging."""

    @pytest.mark.parametrize("path,expected", [
        ("/assessments/session_1714550400000_abc123def/responses", "session_1714550400000_abc123def"),
        ("/assessments/session_1714550400000_abc123def", "session_1714550400000_abc123def"),
        ("/insights/session_1714550400000_abc123def", "session_1714550400000_abc123def"),
        ("/assessments/start", None),
        ("/insights/status", None),
        ("/health", None),
    ])
    def test_session_id_from_path(self, path, expected):
        assert session_id_from_path(path) == expected

    def test_completed_request_is_logged_with_session(self, client, session_id, caplog):
        with caplog.at_level(logging.INFO, logger="src.api.middleware.logging"):
            client.get(f"/assessments/{session_id}/progress")

        records = [r for r in caplog.records if r.getMessage().startswith("Request completed")]
        assert len(records) == 1
        assert records[0].session_id == session_id
        assert records[0].status_code == 200

    def test_request_outside_a_session_has_no_session_id(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="src.api.middleware.logging"):
            client.get("/health")

        record = next(r for r in caplog.records if r.getMessage().startswith("Request completed"))
        assert not hasattr(record, "session_id")

    def test_filter_fills_missing_session_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert SessionContextFilter().filter(record) is True
        assert record.session_id == "-"

    def test_filter_keeps_existing_session_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.session_id = "session_1"

        SessionContextFilter().filter(record)

        assert record.session_id == "session_1"
