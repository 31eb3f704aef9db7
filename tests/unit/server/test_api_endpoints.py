"""Tests for the FastAPI surface."""

import pytest
from fastapi.testclient import TestClient

from spotter.core.constants import Step
from spotter.core.errors import FlowError, PersistenceError
from spotter.runtime.assistant import Assistant
from spotter.server.api import create_app
from spotter.server.errors import create_error_reference, get_http_status_for_exception


@pytest.fixture
def api_assistant(config, repository, transport, clock) -> Assistant:
    return Assistant(config, repository=repository, transport=transport, clock=clock)


@pytest.fixture
def test_client(api_assistant):
    with TestClient(create_app(api_assistant)) as client:
        yield client


class TestHealthEndpoint:
    def test_health_returns_200(self, test_client: TestClient):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "version" in response.json()

    def test_health_before_startup(self, api_assistant):
        """Without the lifespan running the service reports starting."""
        client = TestClient(create_app(api_assistant))

        response = client.get("/health")

        assert response.json()["status"] == "starting"

    def test_version(self, test_client: TestClient):
        data = test_client.get("/version").json()

        assert set(data) == {"version", "major", "minor", "patch"}


class TestEvents:
    def test_text_event_runs_a_turn(self, test_client: TestClient):
        response = test_client.post(
            "/events/text", json={"user_id": 5, "text": "/start", "first_name": "Ana"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["step"] == Step.ONBOARD_AGE.value
        assert data["replies"][0].startswith("Welcome Ana!")

    def test_empty_text_is_rejected(self, test_client: TestClient):
        response = test_client.post("/events/text", json={"user_id": 5, "text": ""})

        assert response.status_code == 422

    def test_callback_event(self, test_client: TestClient):
        test_client.post("/events/text", json={"user_id": 5, "text": "/start"})

        response = test_client.post("/events/callback", json={"user_id": 5, "payload": "done:w1"})

        assert response.status_code == 200
        assert response.json()["replies"][0].startswith("Workout logged.")


class TestSessions:
    def test_get_and_reset_session(self, test_client: TestClient):
        test_client.post("/events/text", json={"user_id": 5, "text": "/start"})

        active = test_client.get("/sessions/5").json()
        reset = test_client.delete("/sessions/5").json()
        after = test_client.get("/sessions/5").json()

        assert active["active"] is True
        assert active["step"] == Step.ONBOARD_AGE.value
        assert active["data"]["kind"] == "profile"
        assert reset["success"] is True
        assert after == {
            "user_id": 5,
            "active": False,
            "step": None,
            "data": None,
            "updated_at": None,
        }

    def test_reset_without_session(self, test_client: TestClient):
        response = test_client.delete("/sessions/77")

        assert response.json()["success"] is False


class TestOutbox:
    def test_outbox_drains_pushed_messages(self, test_client: TestClient):
        # Arrange: a user, an elevated admin and a broadcast
        test_client.post("/events/text", json={"user_id": 5, "text": "/start"})
        test_client.post("/events/text", json={"user_id": 1, "text": "/admin"})
        test_client.post("/events/text", json={"user_id": 1, "text": "s3cret"})
        test_client.post("/events/text", json={"user_id": 1, "text": "Broadcast"})
        test_client.post("/events/text", json={"user_id": 1, "text": "Rest day"})

        # Act
        first = test_client.get("/outbox/5").json()
        second = test_client.get("/outbox/5").json()

        # Assert
        assert [m["text"] for m in first["messages"]] == ["Admin Broadcast:\n\nRest day"]
        assert second["messages"] == []


class TestErrors:
    def test_internal_errors_are_sanitized(self, api_assistant):
        """A FlowError surfaces as a 500 with a reference code only."""
        with TestClient(create_app(api_assistant), raise_server_exceptions=False) as client:
            api_assistant.services.sessions.set(5, "ghost_step")

            response = client.post("/events/text", json={"user_id": 5, "text": "hi"})

        assert response.status_code == 500
        body = response.json()
        assert body["reference"].startswith("ERR-")
        assert "ghost_step" not in response.text

    def test_status_mapping(self):
        assert get_http_status_for_exception(PersistenceError("down")) == 503
        assert get_http_status_for_exception(FlowError("bad")) == 500
        assert get_http_status_for_exception(RuntimeError()) == 500

    def test_error_reference_format(self):
        reference = create_error_reference()

        assert reference.startswith("ERR-")
        assert len(reference) == 12
