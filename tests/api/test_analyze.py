"""Tests for the audit submission, job and health endpoints."""
from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from app.api.services.job_queue import Job, JobQueue
from src.errors import FetchError, ParseError
from src.parser.document import document_from_page
from src.recommend.engine import RecommendationEngine
from src.scoring.auditor import audit_document


class TestAnalyzeEndpoint:
    """Tests for POST /api/v1/analyze."""

    def test_analyze_valid_url_returns_job(self, client, reset_rate_limiter, pending_job):
        """Valid URL should return a job response with pending status."""
        with patch("app.api.services.job_queue.job_queue.submit") as mock_submit, \
                patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_submit.return_value = "a" * 32
            mock_get.return_value = pending_job

            response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["job_id"] == "a" * 32
        assert data["status"] == "pending"
        assert data["url"].rstrip("/") == "https://example.com"

    def test_analyze_invalid_url_scheme_rejected(self, client, reset_rate_limiter):
        """Non-http(s) URLs should be rejected with the error envelope."""
        response = client.post("/api/v1/analyze", json={"url": "ftp://example.com"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    @pytest.mark.parametrize("body", [{"url": "not-a-url"}, {}])
    def test_analyze_bad_body_rejected(self, client, reset_rate_limiter, body):
        response = client.post("/api/v1/analyze", json=body)

        assert response.status_code == 422

    def test_analyze_empty_body_rejected(self, client, reset_rate_limiter):
        """Empty request body should be rejected."""
        response = client.post("/api/v1/analyze")

        assert response.status_code == 422


class TestJobsEndpoint:
    """Tests for GET /api/v1/jobs/{job_id}."""

    def test_get_completed_job(self, client, reset_rate_limiter, poor_page):
        """A completed job returns the validated audit result."""
        job_id = "e" * 32
        result = audit_document(document_from_page(poor_page), max_workers=1).to_dict()
        job = Job(
            id=job_id,
            url=poor_page.url,
            status="completed",
            created_at=datetime.now(UTC),
            completed_at=datetime.now(UTC),
            result=result,
        )

        with patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_get.return_value = job
            response = client.get(f"/api/v1/jobs/{job_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["result"]["grade"] in ("D", "F")
        assert len(data["result"]["category_scores"]) == 10
        assert data["result"]["recommendation_source"] == "rules"

    def test_get_job_invalid_id_format(self, client, reset_rate_limiter):
        """Invalid job ID format should return 400."""
        response = client.get("/api/v1/jobs/invalid-id")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_get_job_not_found(self, client, reset_rate_limiter):
        """Non-existent job ID should return 404."""
        job_id = "b" * 32

        with patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_get.return_value = None
            response = client.get(f"/api/v1/jobs/{job_id}")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "JOB_NOT_FOUND"
        assert error["details"] == {"job_id": job_id}

    def test_get_job_failed_status(self, client, reset_rate_limiter):
        """Failed job should return error message and code."""
        job_id = "d" * 32

        with patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_job = MagicMock()
            mock_job.id = job_id
            mock_job.url = "https://example.com"
            mock_job.status = "failed"
            mock_job.created_at = datetime.now(UTC)
            mock_job.completed_at = datetime.now(UTC)
            mock_job.result = None
            mock_job.error = "Refusing to fetch private address 10.0.0.1"
            mock_job.error_code = "URL_NOT_ACCESSIBLE"
            mock_get.return_value = mock_job

            response = client.get(f"/api/v1/jobs/{job_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["error_code"] == "URL_NOT_ACCESSIBLE"


class TestJobQueue:
    """Audit jobs run through the real pipeline with the fetcher patched."""

    @pytest.fixture
    def queue(self):
        queue = JobQueue(max_workers=1, engine_factory=RecommendationEngine)
        yield queue
        queue.shutdown()

    def _add_job(self, queue, job_id="f" * 32, url="https://example.com/guides/geo"):
        queue.jobs[job_id] = Job(id=job_id, url=url, status="pending", created_at=datetime.now(UTC))
        return job_id

    def test_fetch_error_fails_job(self, queue):
        job_id = self._add_job(queue)
        with patch("app.api.services.job_queue.fetch_page") as mock_fetch:
            mock_fetch.side_effect = FetchError("HTTP 503", url="https://example.com/guides/geo", reason="http")
            queue._run_audit(job_id)

        job = queue.get(job_id)
        assert job.status == "failed"
        assert job.error_code == "URL_NOT_ACCESSIBLE"
        assert job.completed_at is not None

    def test_successful_job(self, queue, excellent_page):
        job_id = self._add_job(queue)
        with patch("app.api.services.job_queue.fetch_page") as mock_fetch:
            mock_fetch.return_value = excellent_page
            queue._run_audit(job_id)

        job = queue.get(job_id)
        assert job.status == "completed"
        assert job.result["url"] == "https://example.com/guides/geo"
        assert len(job.result["advanced_scores"]) == 5
        assert job.result["recommendation_source"] == "rules"

    def test_parse_error_fails_job(self, queue):
        job_id = self._add_job(queue)
        with patch("app.api.services.job_queue.fetch_page") as mock_fetch:
            mock_fetch.side_effect = ParseError("Empty document for https://example.com/guides/geo")
            queue._run_audit(job_id)

        job = queue.get(job_id)
        assert job.status == "failed"
        assert job.error_code == "ANALYSIS_FAILED"
        assert job.error.startswith("Empty document")

    def test_unexpected_error_fails_job(self, queue):
        job_id = self._add_job(queue)
        with patch("app.api.services.job_queue.fetch_page") as mock_fetch:
            mock_fetch.side_effect = RuntimeError("boom")
            queue._run_audit(job_id)

        job = queue.get(job_id)
        assert job.status == "failed"
        assert job.error == "Analysis failed: RuntimeError: boom"


class TestHealthEndpoint:
    """Tests for GET /api/v1/health."""

    def test_health_check(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ("healthy", "degraded")
        assert data["version"] == "1.0.0"
        assert "enrichment_configured" in data["checks"]


class TestRateLimiting:
    """Tests for API rate limiting."""

    def test_rate_limit_exceeded(self, client, reset_rate_limiter, pending_job, monkeypatch):
        """Requests beyond the configured limit get 429 with the error envelope."""
        from src.config.settings import settings

        monkeypatch.setattr(settings.api, "rate_limit", 3)

        with patch("app.api.services.job_queue.job_queue.submit") as mock_submit, \
                patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_submit.return_value = "a" * 32
            mock_get.return_value = pending_job

            for i in range(3):
                response = client.post("/api/v1/analyze", json={"url": "https://example.com"})
                assert response.status_code == 200, f"Request {i+1} failed"

            response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert "Retry-After" in response.headers

    def test_rate_limit_headers_present(self, client, reset_rate_limiter, pending_job):
        """Rate limit headers should be present in response."""
        with patch("app.api.services.job_queue.job_queue.submit") as mock_submit, \
                patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_submit.return_value = "a" * 32
            mock_get.return_value = pending_job

            response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 200
        assert "X-RateLimit-Remaining" in response.headers
        assert "X-RateLimit-Limit" in response.headers


class TestSecurityHeaders:
    """Tests for security headers."""

    def test_security_headers_present(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert response.headers.get("X-Frame-Options") == "DENY"
        assert response.headers.get("Content-Security-Policy") == "default-src 'none'; frame-ancestors 'none'"


class TestRateLimitScopes:
    """Audit submissions and queries draw from separate budgets."""

    def test_polling_does_not_use_audit_budget(self, client, reset_rate_limiter, pending_job, monkeypatch):
        from src.config.settings import settings

        monkeypatch.setattr(settings.api, "rate_limit", 1)

        with patch("app.api.services.job_queue.job_queue.submit") as mock_submit, \
                patch("app.api.services.job_queue.job_queue.get") as mock_get:
            mock_submit.return_value = "a" * 32
            mock_get.return_value = pending_job
            assert client.post("/api/v1/analyze", json={"url": "https://example.com"}).status_code == 200

            mock_get.return_value = None
            for _ in range(3):
                assert client.get(f"/api/v1/jobs/{'b' * 32}").status_code == 404

            mock_get.return_value = pending_job
            response = client.post("/api/v1/analyze", json={"url": "https://example.com"})

        assert response.status_code == 429
        assert response.json()["error"]["details"]["scope"] == "audit"

    def test_query_budget(self, client, reset_rate_limiter, monkeypatch):
        from src.config.settings import settings

        monkeypatch.setattr(settings.api, "query_rate_limit", 2)
        body = {"text": "Widgets widgets widgets. Buy widgets."}

        assert client.post("/api/v1/content", json=body).status_code == 200
        second = client.post("/api/v1/content", json=body)
        assert second.status_code == 200
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert client.post("/api/v1/content", json=body).status_code == 429
