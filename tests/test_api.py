"""Tests for the FastAPI application."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from codementor.history import HistoryStoreError, MemoryHistoryStore
from codementor_api.config import settings
from codementor_api.main import app


class FailingStore(MemoryHistoryStore):
    async def append(self, owner, record):
        raise HistoryStoreError("store down", owner=owner)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "REDIS_URL", None)
    monkeypatch.setattr(settings, "REVIEW_PROFILE", "full")
    with TestClient(app) as test_client:
        yield test_client


class TestReviewStream:
    def test_streams_full_review(self, client, nested_js, full_review):
        response = client.post("/api/v1/review/stream", json={"code": nested_js})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert response.headers["x-review-profile"] == "full"
        assert response.headers["cache-control"] == "no-cache"
        assert response.text == full_review

    def test_profile_selection(self, client, duplicate_users_py, minimal_review):
        response = client.post(
            "/api/v1/review/stream",
            json={"code": duplicate_users_py, "profile": "Minimal"},
        )

        assert response.headers["x-review-profile"] == "minimal"
        assert response.text == minimal_review

    def test_language_override(self, client):
        response = client.post("/api/v1/review/stream", json={"code": "x = 1", "language": "java"})
        assert "Detected language: Java\n" in response.text

    def test_unknown_language_falls_back_to_detection(self, client, nested_js):
        response = client.post("/api/v1/review/stream", json={"code": nested_js, "language": "cobol"})
        assert "Detected language: JavaScript\n" in response.text

    def test_owner_gets_history(self, client, nested_js):
        client.post("/api/v1/review/stream", json={"code": nested_js, "owner": "ada"})

        history = client.get("/api/v1/history/ada").json()
        assert history["success"] is True
        assert len(history["records"]) == 1
        assert history["records"][0]["language"] == "javascript"

    def test_store_failure_still_streams(self, client, nested_js, full_review):
        app.state.history = FailingStore()

        response = client.post("/api/v1/review/stream", json={"code": nested_js, "owner": "ada"})

        assert response.status_code == 200
        assert response.text == full_review


class TestValidation:
    @pytest.mark.parametrize(
        "payload",
        [
            {"code": ""},
            {"code": "   \n"},
            {"code": "x = 1", "profile": "verbose"},
            {"code": "x = 1", "owner": "not an owner!"},
            {},
        ],
    )
    def test_rejected(self, client, payload):
        response = client.post("/api/v1/review/stream", json=payload)

        assert response.status_code == 422
        assert response.json() == {"success": False, "error": "Invalid request format"}

    def test_code_length_limit(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_CODE_LENGTH", 10)
        response = client.post("/api/v1/review", json={"code": "x = 1\n" * 5})
        assert response.status_code == 422


class TestReview:
    def test_complete_review(self, client, nested_js):
        body = client.post("/api/v1/review", json={"code": nested_js}).json()

        assert body["success"] is True
        assert body["report"]["complete"] is True
        assert body["report"]["metrics"]["score"] == 70
        assert body["dashboard"]["band"] == "fair"
        assert body["dashboard"]["downloadName"] == "optimized_code.js"
        assert len(body["dashboard"]["time"]["beforePoints"]) == 51
        assert body["record"] is None

    def test_record_returned_for_owner(self, client, nested_js):
        body = client.post("/api/v1/review", json={"code": nested_js, "owner": "ada"}).json()
        history = client.get("/api/v1/history/ada").json()

        assert history["records"][0]["id"] == body["record"]["id"]

    def test_store_failure_is_503(self, client, nested_js):
        app.state.history = FailingStore()

        response = client.post("/api/v1/review", json={"code": nested_js, "owner": "ada"})

        assert response.status_code == 503
        assert response.json()["code"] == "history_unavailable"


class TestDownload:
    def test_uses_fence_language(self, client, full_review):
        response = client.post("/api/v1/review/download", json={"buffer": full_review})

        assert response.status_code == 200
        assert response.text == "for (let i=0;i<n;i++) for (let j=0;j<n;j++)"
        assert 'filename="optimized_code.js"' in response.headers["content-disposition"]

    def test_explicit_language_wins(self, client, full_review):
        response = client.post(
            "/api/v1/review/download", json={"buffer": full_review, "language": "cpp"}
        )
        assert 'filename="optimized_code.cpp"' in response.headers["content-disposition"]

    def test_plaintext_fence(self, client, minimal_review):
        buffer = minimal_review.replace("```python", "```plaintext")
        response = client.post("/api/v1/review/download", json={"buffer": buffer})
        assert 'filename="optimized_code.txt"' in response.headers["content-disposition"]

    def test_missing_code_is_404(self, client):
        response = client.post("/api/v1/review/download", json={"buffer": "### nothing yet\n```js\n"})
        assert response.status_code == 404


class TestReportEndpoints:
    def test_parse_partial_buffer(self, client, full_review):
        partial = full_review[: full_review.index("<metrics>") + 12]
        body = client.post("/api/v1/report/parse", json={"buffer": partial}).json()

        assert body["report"]["metrics"] is None
        assert body["report"]["complete"] is False
        assert body["nodes"][0]["kind"] == "heading"

    def test_parse_empty(self, client):
        body = client.post("/api/v1/report/parse", json={}).json()
        assert body["report"]["cleanMarkdown"] == ""

    def test_curves(self, client):
        body = client.get("/api/v1/curves", params={"label": "O(n^2)"}).json()

        assert body["shape"] == "quadratic"
        assert len(body["points"]) == 51
        assert body["path"].startswith("M 0,100 L ")

    def test_curves_needs_label(self, client):
        assert client.get("/api/v1/curves").status_code == 422


class TestHistory:
    def test_empty_history(self, client):
        assert client.get("/api/v1/history/nobody").json()["records"] == []

    def test_clear(self, client, nested_js):
        client.post("/api/v1/review", json={"code": nested_js, "owner": "ada"})

        response = client.delete("/api/v1/history/ada")

        assert response.json() == {"success": True, "owner": "ada"}
        assert client.get("/api/v1/history/ada").json()["records"] == []

    def test_invalid_owner(self, client):
        assert client.get("/api/v1/history/bad owner").status_code == 400


class TestService:
    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["profile"] == "full"
        assert "issues" not in body

    def test_health_degraded_without_store(self, client):
        app.state.history = None
        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["issues"] == ["history_unavailable"]
        app.state.history = MemoryHistoryStore()

    def test_security_headers(self, client):
        response = client.get("/")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.json()["name"] == "codementor API"
