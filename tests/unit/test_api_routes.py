"""
Unit tests for API v1 routes.

Tests endpoint responses with mocked dependencies.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_submission_validator, get_token_lifecycle
from src.api.v1.routes import router
from src.domain.lifecycle import TokenLifecycle
from src.domain.ports import Verdict
from src.domain.validator import Decision, Submission, SubmissionValidator

USER_AGENT = "Mozilla/5.0 TestBrowser"


@pytest.fixture
def app() -> FastAPI:
    """Create test FastAPI application."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")

    # Mock the app.state resources for dependency injection
    test_app.state.repository = MagicMock()
    test_app.state.blacklist = frozenset()

    return test_app


@pytest.fixture
def lifecycle(app: FastAPI) -> MagicMock:
    """Mocked lifecycle installed as a dependency override."""
    mock_lifecycle = MagicMock(spec=TokenLifecycle)
    app.dependency_overrides[get_token_lifecycle] = lambda: mock_lifecycle
    yield mock_lifecycle
    app.dependency_overrides.clear()


@pytest.fixture
def validator(app: FastAPI) -> MagicMock:
    """Mocked validator installed as a dependency override."""
    mock_validator = MagicMock(spec=SubmissionValidator)
    app.dependency_overrides[get_submission_validator] = lambda: mock_validator
    yield mock_validator
    app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app, headers={"User-Agent": USER_AGENT})


class TestFormFieldsEndpoint:
    """Tests for GET /v1/form-fields."""

    def test_returns_hidden_and_honeypot_fields(
        self, client: TestClient, lifecycle: MagicMock
    ) -> None:
        """Hidden fields come from the lifecycle; honeypot names are listed."""
        lifecycle.on_form_render.return_value = {"form_token": "tok", "user_agent": USER_AGENT}

        response = client.get("/v1/form-fields")

        assert response.status_code == 200
        assert response.json() == {
            "hidden_fields": {"form_token": "tok", "user_agent": USER_AGENT},
            "honeypot_fields": ["confirm-phone", "confirm-email", "confirm-robot"],
        }
        lifecycle.on_form_render.assert_called_once_with(USER_AGENT)

    def test_token_failure_returns_empty_hidden_fields(
        self, client: TestClient, lifecycle: MagicMock
    ) -> None:
        """Form still renders when no token could be issued."""
        lifecycle.on_form_render.return_value = {}

        response = client.get("/v1/form-fields")

        assert response.status_code == 200
        assert response.json()["hidden_fields"] == {}


class TestSubmissionsEndpoint:
    """Tests for POST /v1/submissions."""

    def test_accept_consumes_token(
        self, client: TestClient, lifecycle: MagicMock, validator: MagicMock
    ) -> None:
        """Accepted submission deletes its token."""
        validator.evaluate.return_value = Decision(Verdict.ACCEPT)

        response = client.post(
            "/v1/submissions",
            json={"fields": {"form_token": "tok", "your-message": "hi"}},
        )

        assert response.status_code == 200
        assert response.json() == {"verdict": "ACCEPT", "rule": None, "spam": False}
        lifecycle.on_submission_accepted.assert_called_once_with("tok")

    def test_reject_keeps_token(
        self, client: TestClient, lifecycle: MagicMock, validator: MagicMock
    ) -> None:
        """Rejected submission leaves the store untouched."""
        validator.evaluate.return_value = Decision(Verdict.REJECT, "honeypot", "confirm-phone")

        response = client.post(
            "/v1/submissions",
            json={"fields": {"form_token": "tok", "confirm-phone": "1"}},
        )

        assert response.status_code == 200
        assert response.json() == {"verdict": "REJECT", "rule": "honeypot", "spam": True}
        lifecycle.on_submission_accepted.assert_not_called()

    def test_request_user_agent_passed_to_validator(
        self, client: TestClient, lifecycle: MagicMock, validator: MagicMock
    ) -> None:
        """The actual User-Agent header reaches the validator."""
        validator.evaluate.return_value = Decision(Verdict.ACCEPT)

        client.post("/v1/submissions", json={"fields": {"user_agent": "x"}})

        submission, prior = validator.evaluate.call_args[0]
        assert isinstance(submission, Submission)
        assert submission.actual_user_agent == USER_AGENT
        assert submission.user_agent == "x"
        assert prior is Verdict.ACCEPT

    def test_upstream_spam_flag_becomes_prior(
        self, client: TestClient, lifecycle: MagicMock, validator: MagicMock
    ) -> None:
        """spam=true is passed as a REJECT prior."""
        validator.evaluate.return_value = Decision(Verdict.REJECT, "missing_token")

        response = client.post("/v1/submissions", json={"fields": {}, "spam": True})

        assert validator.evaluate.call_args[0][1] is Verdict.REJECT
        assert response.json()["spam"] is True

    def test_fields_required(self, client: TestClient, lifecycle: MagicMock, validator: MagicMock) -> None:
        """Missing fields returns 422."""
        response = client.post("/v1/submissions", json={})
        assert response.status_code == 422


class TestTokenRefreshEndpoint:
    """Tests for POST /v1/tokens/refresh."""

    def test_success_returns_token(self, client: TestClient, lifecycle: MagicMock) -> None:
        lifecycle.on_token_refresh_request.return_value = {"token": "new"}

        response = client.post("/v1/tokens/refresh", json={"action": "regenerate_token"})

        assert response.status_code == 200
        assert response.json() == {"token": "new"}

    def test_body_is_optional(self, client: TestClient, lifecycle: MagicMock) -> None:
        lifecycle.on_token_refresh_request.return_value = {"token": "new"}
        assert client.post("/v1/tokens/refresh").status_code == 200

    def test_failure_returns_503_error_payload(
        self, client: TestClient, lifecycle: MagicMock
    ) -> None:
        lifecycle.on_token_refresh_request.return_value = {"error": "Token generation unavailable"}

        response = client.post("/v1/tokens/refresh")

        assert response.status_code == 503
        assert response.json() == {"error": "Token generation unavailable"}
