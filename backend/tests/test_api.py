from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from conftest import PNG_BYTES, gemini_text_response
from studyup.config import settings
from studyup.core.models.assignment import AssignmentSnapshot
from studyup.core.schemas.auth import AuthUser
from studyup.dependencies import (
    get_assignment_repository,
    get_current_user,
    get_gemini_client,
    get_shared_http_client,
    get_study_session_repository,
)
from studyup.main import create_app
from studyup.utils.gemini_client import GeminiClient

ORIGIN = "https://studyup.example"
USER = AuthUser(id=uuid4(), email="student@example.com", role="authenticated")


@pytest.fixture()
def gemini_key():
    return "test-key"


@pytest.fixture()
def client(http_client, assignment_repo, session_repo, gemini_key):
    app = create_app()
    app.dependency_overrides[get_shared_http_client] = lambda: http_client
    app.dependency_overrides[get_gemini_client] = lambda: GeminiClient(http_client, api_key=gemini_key)
    app.dependency_overrides[get_assignment_repository] = lambda: assignment_repo
    app.dependency_overrides[get_study_session_repository] = lambda: session_repo
    return TestClient(app)


class TestChatEndpoint:
    def test_returns_answer_and_model(self, client, upstream):
        upstream.reply_with(gemini_text_response("Mitochondria make ATP."))

        response = client.post(
            "/api/v1/chat",
            json={"message": "What do mitochondria do?", "context": "Biology 101"},
            headers={"Origin": ORIGIN},
        )

        assert response.status_code == 200
        assert response.json() == {
            "response": "Mitochondria make ATP.",
            "model": "gemini-1.5-flash-latest",
        }
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["x-request-id"]

    def test_image_urls_accept_camel_case(self, client, upstream):
        upstream.images = {
            "https://storage.test/ok.png": httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"}
            ),
        }
        upstream.reply_with(gemini_text_response("A labelled cell."))

        response = client.post(
            "/api/v1/chat",
            json={
                "message": "Describe",
                "imageUrls": ["https://storage.test/404.png", "https://storage.test/ok.png"],
            },
        )

        assert response.status_code == 200
        (payload,) = upstream.gemini_payloads()
        parts = payload["contents"][0]["parts"]
        assert len(parts) == 2
        assert parts[1]["inline_data"]["mime_type"] == "image/png"

    def test_missing_message_is_400(self, client, upstream):
        response = client.post("/api/v1/chat", json={"context": "notes"}, headers={"Origin": ORIGIN})

        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"
        assert response.headers["access-control-allow-origin"] == "*"
        assert upstream.requests == []

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/api/v1/chat",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_safety_block_is_500_with_reason(self, client, upstream):
        upstream.reply_with({"candidates": [], "promptFeedback": {"blockReason": "SAFETY"}})

        response = client.post("/api/v1/chat", json={"message": "hi"}, headers={"Origin": ORIGIN})

        assert response.status_code == 500
        body = response.json()
        assert "SAFETY" in body["error"]
        assert body["request_id"] == response.headers["x-request-id"]
        assert response.headers["access-control-allow-origin"] == "*"

    def test_upstream_status_is_forwarded_without_detail(self, client, upstream):
        upstream.reply_with({"error": {"message": "API key not valid. secret-ish detail"}}, status_code=403)

        response = client.post("/api/v1/chat", json={"message": "hi"})

        assert response.status_code == 403
        assert response.json()["error"] == "Failed to generate response from Gemini"
        assert "secret-ish" not in response.text

    @pytest.mark.parametrize("gemini_key", [None])
    def test_missing_key_is_500_without_network(self, client, upstream):
        response = client.post("/api/v1/chat", json={"message": "hi"})

        assert response.status_code == 500
        assert response.json()["error"] == "Service is not configured"
        assert upstream.requests == []

    def test_unknown_keys_are_ignored(self, client, upstream):
        upstream.reply_with(gemini_text_response("ok"))

        response = client.post("/api/v1/chat", json={"message": "hi", "conversationId": "c-1"})

        assert response.status_code == 200
        assert response.json()["response"] == "ok"

    def test_preflight_allows_supabase_headers(self, client):
        response = client.options(
            "/api/v1/chat",
            headers={
                "Origin": ORIGIN,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        allowed = response.headers["access-control-allow-headers"].lower()
        for header in ("authorization", "x-client-info", "apikey", "content-type"):
            assert header in allowed


class TestStudyPlanEndpoint:
    @pytest.fixture(autouse=True)
    def _assignment(self, assignment_repo):
        assignment_repo.assignments["a-1"] = AssignmentSnapshot(
            title="Midterm review",
            due_date=datetime(2024, 5, 1, 9, 0, tzinfo=UTC),
            course_id=str(uuid4()),
        )

    def test_returns_plan_unwrapped(self, client, upstream):
        plan = {
            "rationale": "Two review blocks.",
            "sessions": [
                {
                    "title": "Review notes",
                    "description": "Skim weeks 1-4.",
                    "scheduled_date": "2024-04-28T17:00:00.000Z",
                    "duration": 60,
                }
            ],
        }
        upstream.reply_with(gemini_text_response(json.dumps(plan)))

        response = client.post("/api/v1/study-plan", json={"assignmentId": "a-1"})

        assert response.status_code == 200
        assert response.json() == plan

    def test_unknown_assignment_is_500_and_skips_upstream(self, client, upstream):
        response = client.post("/api/v1/study-plan", json={"assignmentId": "nope"}, headers={"Origin": ORIGIN})

        assert response.status_code == 500
        assert response.json()["error"] == "Assignment not found"
        assert response.headers["access-control-allow-origin"] == "*"
        assert upstream.requests == []

    def test_missing_assignment_id_is_400(self, client):
        response = client.post("/api/v1/study-plan", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "assignmentId is required"

    def test_unknown_keys_are_ignored(self, client, upstream):
        upstream.reply_with(gemini_text_response(json.dumps({"rationale": "Short.", "sessions": []})))

        response = client.post("/api/v1/study-plan", json={"assignmentId": "a-1", "courseId": "c-1"})

        assert response.status_code == 200
        assert response.json() == {"rationale": "Short.", "sessions": []}

    def test_malformed_plan_is_500(self, client, upstream):
        upstream.reply_with(gemini_text_response("Sure! Here is your plan:"))

        response = client.post("/api/v1/study-plan", json={"assignmentId": "a-1"})

        assert response.status_code == 500
        assert response.json()["error"] == "The AI model returned a malformed response"


class TestAddPlanToPlanner:
    def _payload(self) -> dict:
        return {
            "courseId": str(uuid4()),
            "assignmentTitle": "Midterm review",
            "sessions": [
                {
                    "title": "Review notes",
                    "description": "Skim weeks 1-4.",
                    "scheduled_date": "2024-04-28T17:00:00.000Z",
                    "duration": 60,
                }
            ],
        }

    def test_requires_authentication(self, client, session_repo):
        response = client.post("/api/v1/study-plan/sessions", json=self._payload())

        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required"
        assert session_repo.rows == []

    def test_creates_sessions_for_current_user(self, client, session_repo):
        client.app.dependency_overrides[get_current_user] = lambda: USER

        response = client.post("/api/v1/study-plan/sessions", json=self._payload())

        assert response.status_code == 201
        (row,) = response.json()
        assert row["user_id"] == str(USER.id)
        assert row["completed"] is False
        assert row["description"].startswith('For assignment: "Midterm review"')
        assert len(session_repo.rows) == 1

    @pytest.mark.parametrize("title", ["", "x" * 501])
    def test_out_of_range_session_title_is_400(self, client, session_repo, title):
        client.app.dependency_overrides[get_current_user] = lambda: USER
        payload = self._payload()
        payload["sessions"][0]["title"] = title

        response = client.post("/api/v1/study-plan/sessions", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"
        assert session_repo.rows == []


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_missing_key(self, client, monkeypatch):
        monkeypatch.setattr(
            "studyup.api.v1.endpoints.health.get_supabase_admin_client", lambda: MagicMock()
        )
        monkeypatch.setattr(settings, "gemini_api_key", None)

        response = client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["ai_service"] == "missing_api_key"
        assert response.json()["database"] == "connected"

    def test_ready_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(
            "studyup.api.v1.endpoints.health.get_supabase_admin_client", lambda: MagicMock()
        )
        monkeypatch.setattr(settings, "gemini_api_key", SecretStr("key"))

        response = client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
