"""Shared fixtures for API tests."""
from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def reset_rate_limiter():
    """Reset the API rate limiter before each test."""
    from app.api.v1.deps import api_rate_limiter

    api_rate_limiter._requests.clear()
    yield
    api_rate_limiter._requests.clear()


@pytest.fixture
def pending_job():
    """A freshly submitted job as returned by the queue."""
    job = MagicMock()
    job.id = "a" * 32
    job.status = "pending"
    job.created_at = datetime.now(UTC)
    return job
