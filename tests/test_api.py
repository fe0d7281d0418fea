"""
Tests for the DefiPilot HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from defipilot.config import Settings
from defipilot.core.agent import COORDINATOR
from defipilot.main import create_app
from defipilot.services import AppServices


class CannedRuntime:
    """Agent stand-in that replies with fixed text."""

    def __init__(self, reply: str = "🔍 **Live Data from DeFiLlama:**", error: Exception = None):
        self.reply = reply
        self.error = error

    async def ask(self, instruction, *, agent=COORDINATOR, tools):
        if self.error is not None:
            raise self.error
        return self.reply


def _client(runtime=None) -> TestClient:
    services = AppServices.from_settings(Settings(), runtime=runtime)
    return TestClient(create_app(services))


@pytest.fixture
def client():
    return _client(CannedRuntime())


class TestQueryEndpoint:

    def test_simple_deposit(self, client):
        response = client.post("/api/query", json={"query": "deposit 100 usdc to morpho", "sessionId": "s1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["sessionId"] == "s1"
        assert data["requiresApproval"] is True
        assert len(data["transactions"]) == 2
        assert set(data["transactions"][0]) == {"to", "data", "value", "description"}
        assert data["metadata"]["transactionCount"] == 2
        assert data["metadata"]["timestamp"].endswith("Z")
        assert isinstance(data["metadata"]["duration"], int)

    def test_research_query_uses_agent(self, client):
        response = client.post("/api/query", json={"query": "what are the top protocols on base"})

        data = response.json()
        assert data["response"] == "🔍 **Live Data from DeFiLlama:**"
        assert data["requiresApproval"] is False
        assert "transactions" not in data
        assert data["sessionId"].startswith("session_")

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}])
    def test_query_required(self, client, body):
        response = client.post("/api/query", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Query is required"}

    @pytest.mark.parametrize("query", ["deposit 0 usdc to morpho", "deposit 1.1234567 usdc to aave"])
    def test_rejected_amount_is_not_a_server_error(self, client, query):
        response = client.post("/api/query", json={"query": query, "sessionId": "s-bad"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["requiresApproval"] is False
        assert "transactions" not in data
        assert data["metadata"]["transactionCount"] == 0

        session = client.get("/api/session/s-bad").json()["session"]
        assert session["hasTransactions"] is False

    def test_agent_outage_still_answers(self):
        client = _client(CannedRuntime(error=RuntimeError("invalid api key")))

        response = client.post("/api/query", json={"query": "what are the top protocols on base"})

        assert response.status_code == 200
        assert response.json()["response"] == "❌ Configuration error. Please check API credentials."

    def test_internal_failure_returns_500_with_request_id(self):
        services = AppServices.from_settings(Settings())

        async def explode(query, request_id):
            raise RuntimeError("disk on fire")

        services.pipeline.handle = explode
        client = TestClient(create_app(services))

        response = client.post("/api/query", json={"query": "hello"}, headers={"x-request-id": "abc123"})

        assert response.status_code == 500
        assert response.json() == {"error": "Query failed", "details": "disk on fire", "requestId": "abc123"}

    def test_request_id_is_echoed(self, client):
        response = client.post("/api/query", json={"query": "hello"}, headers={"x-request-id": "req-42"})

        assert response.headers["x-request-id"] == "req-42"


class TestApproveEndpoint:

    def test_approve_releases_transactions(self, client):
        client.post("/api/query", json={"query": "deposit 100 usdc to morpho", "sessionId": "s1"})

        response = client.post("/api/approve", json={"sessionId": "s1", "approved": True})

        assert response.status_code == 200
        data = response.json()
        assert data["approved"] is True
        assert data["message"] == "Approved. Frontend will execute transactions via user wallet."
        assert len(data["transactions"]) == 2
        assert data["metadata"]["transactionCount"] == 2

    def test_reject_leaves_session_unapproved(self, client):
        client.post("/api/query", json={"query": "deposit 100 usdc to morpho", "sessionId": "s1"})

        response = client.post("/api/approve", json={"sessionId": "s1", "approved": False})

        assert response.json() == {
            "success": True,
            "approved": False,
            "message": "Execution cancelled by user",
        }
        assert client.get("/api/session/s1").json()["session"]["approved"] is False

    def test_session_id_required(self, client):
        response = client.post("/api/approve", json={"approved": True})

        assert response.status_code == 400
        assert response.json() == {"error": "Session ID required"}

    def test_unknown_session(self, client):
        response = client.post("/api/approve", json={"sessionId": "nope", "approved": True})

        assert response.status_code == 404
        assert response.json() == {"error": "Session not found"}


class TestSessionEndpoint:

    def test_session_summary(self, client):
        client.post("/api/query", json={"query": "deposit 100 usdc to morpho", "sessionId": "s1"})
        client.post("/api/approve", json={"sessionId": "s1", "approved": True})

        response = client.get("/api/session/s1")

        session = response.json()["session"]
        assert session["query"] == "deposit 100 usdc to morpho"
        assert session["hasTransactions"] is True
        assert session["transactionCount"] == 2
        assert session["approved"] is True
        assert "duration" in session

    def test_unknown_session(self, client):
        response = client.get("/api/session/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Session not found"}


class TestHealthEndpoint:

    def test_health_reports_agent_and_sessions(self, client):
        client.post("/api/query", json={"query": "hello", "sessionId": "s1"})

        data = client.get("/health").json()

        assert data["status"] == "ok"
        assert data["agent"] == "ready"
        assert data["sessions"] == 1

    def test_health_without_agent(self):
        data = _client(runtime=None).get("/health").json()

        assert data["agent"] == "unavailable"
        assert data["sessions"] == 0

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()

        assert data["name"] == "DefiPilot API"
        assert data["endpoints"]["query"] == "POST /api/query"
