from __future__ import annotations

import json
import os
from collections.abc import Callable, Sequence

# Settings are read at import time; provide placeholders before importing the app
os.environ.setdefault("APP_SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("APP_SUPABASE_ANON_KEY", "anon.test.key")
os.environ.setdefault("APP_SUPABASE_SERVICE_ROLE_KEY", "service.test.key")
os.environ.pop("APP_GEMINI_API_KEY", None)

import httpx  # noqa: E402
import pytest  # noqa: E402

from studyup.core.models.assignment import AssignmentSnapshot, MaterialSnapshot  # noqa: E402
from studyup.core.models.study_session import StudySession  # noqa: E402
from studyup.core.repositories.assignment_repository import AssignmentRepository  # noqa: E402
from studyup.core.repositories.study_session_repository import StudySessionRepository  # noqa: E402
from studyup.core.errors import StoreError  # noqa: E402
from studyup.utils.gemini_client import GeminiClient  # noqa: E402

GEMINI_HOST = "generativelanguage.googleapis.com"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def gemini_text_response(*texts: str) -> dict:
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": t} for t in texts]},
                "finishReason": "STOP",
            }
        ]
    }


class FakeUpstream:
    """MockTransport handler standing in for Gemini and image hosts.

    Records every request so tests can assert on what was (not) sent.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.gemini_responses: list[tuple[int, dict | str]] = []
        self.images: dict[str, httpx.Response | Exception] = {}

    def reply_with(self, body: dict | str, status_code: int = 200) -> FakeUpstream:
        self.gemini_responses.append((status_code, body))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == GEMINI_HOST:
            if not self.gemini_responses:
                raise AssertionError("Unexpected Gemini call")
            status_code, body = (
                self.gemini_responses.pop(0) if len(self.gemini_responses) > 1 else self.gemini_responses[0]
            )
            if callable(body):
                body = body(request)
            if isinstance(body, dict):
                return httpx.Response(status_code, json=body)
            return httpx.Response(status_code, text=body)
        outcome = self.images.get(str(request.url))
        if outcome is None:
            return httpx.Response(404, text="not found")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def gemini_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == GEMINI_HOST]

    def gemini_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.gemini_calls]


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self) -> None:
        self.assignments: dict[str, AssignmentSnapshot] = {}
        self.materials: dict[str, list[MaterialSnapshot]] = {}
        self.fail_with: str | None = None

    async def get_snapshot(self, assignment_id: str) -> AssignmentSnapshot | None:
        if self.fail_with:
            raise StoreError(self.fail_with)
        return self.assignments.get(assignment_id)

    async def list_material_snapshots(self, assignment_id: str, *, limit: int = 5) -> Sequence[MaterialSnapshot]:
        return self.materials.get(assignment_id, [])[:limit]


class InMemoryStudySessionRepository(StudySessionRepository):
    def __init__(self) -> None:
        self.rows: list[StudySession] = []

    async def create_many(self, sessions: Sequence[StudySession]) -> Sequence[StudySession]:
        self.rows.extend(sessions)
        return list(sessions)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture()
def make_gemini(http_client: httpx.AsyncClient) -> Callable[..., GeminiClient]:
    def _make(api_key: str | None = "test-key", **kwargs) -> GeminiClient:
        return GeminiClient(http_client, api_key=api_key, **kwargs)

    return _make


@pytest.fixture()
def assignment_repo() -> InMemoryAssignmentRepository:
    return InMemoryAssignmentRepository()


@pytest.fixture()
def session_repo() -> InMemoryStudySessionRepository:
    return InMemoryStudySessionRepository()
