"""In-memory job queue for async audits."""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal
from uuid import uuid4

from app.api.models.errors import ErrorCodes
from src.config.settings import settings
from src.errors import FetchError, ParseError
from src.fetcher.html_fetcher import fetch_page
from src.recommend.engine import RecommendationEngine
from src.recommend.enrichment import OpenRouterEnricher
from src.scoring.auditor import audit

logger = logging.getLogger(__name__)

JobStatus = Literal["pending", "processing", "completed", "failed"]

# Checked in order; anything else is reported as ANALYSIS_FAILED
FAILURE_CODES: tuple[tuple[type[Exception], str], ...] = (
    (FetchError, ErrorCodes.URL_NOT_ACCESSIBLE),
    (ParseError, ErrorCodes.ANALYSIS_FAILED),
)


@dataclass
class Job:
    """Audit job."""

    id: str
    url: str
    status: JobStatus
    created_at: datetime
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    error_code: str | None = None

    def fail(self, exc: Exception) -> None:
        for exc_type, code in FAILURE_CODES:
            if isinstance(exc, exc_type):
                self.error, self.error_code = str(exc), code
                break
        else:
            self.error = f"Analysis failed: {type(exc).__name__}: {exc}"
            self.error_code = ErrorCodes.ANALYSIS_FAILED
        self.status = "failed"


def default_engine() -> RecommendationEngine:
    """Rule-based engine, enriched when an enrichment API key is configured."""
    if settings.enrichment.api_key:
        return RecommendationEngine(enricher=OpenRouterEnricher(settings.enrichment))
    return RecommendationEngine()


class JobQueue:
    """Runs audits on a bounded thread pool and keeps results in memory.

    Args:
        max_workers: Concurrent audits (defaults to settings.api.job_max_workers)
        engine_factory: Builds the RecommendationEngine for each job
    """

    def __init__(
        self,
        max_workers: int | None = None,
        engine_factory: Callable[[], RecommendationEngine] = default_engine,
    ):
        self.max_workers = max_workers or settings.api.job_max_workers
        self.engine_factory = engine_factory
        self.jobs: dict[str, Job] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="audit")
        self._prune_every = 3600  # seconds
        self._last_prune = time.time()

    def submit(self, url: str) -> str:
        """Queue an audit of ``url``; returns the job id."""
        job = Job(id=uuid4().hex, url=url, status="pending", created_at=datetime.now(UTC))
        with self._lock:
            self.jobs[job.id] = job
            self._prune_expired()
        self._executor.submit(self._run_audit, job.id)
        logger.info("Queued audit job %s for %s", job.id, url)
        return job.id

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            return self.jobs.get(job_id)

    def _run_audit(self, job_id: str) -> None:
        job = self.get(job_id)
        if job is None:
            return

        job.status = "processing"
        try:
            result = audit(job.url, fetch=fetch_page, engine=self.engine_factory())
        except (FetchError, ParseError) as exc:
            logger.warning("Audit job %s failed: %s", job_id, exc)
            job.fail(exc)
        except Exception as exc:
            logger.exception("Audit job %s crashed", job_id)
            job.fail(exc)
        else:
            job.result = result.to_dict()
            job.status = "completed"
        finally:
            job.completed_at = datetime.now(UTC)

    def _prune_expired(self) -> None:
        """Drop jobs older than the retention period (lock held by caller)."""
        now = time.time()
        if now - self._last_prune < self._prune_every:
            return
        cutoff = datetime.now(UTC) - timedelta(hours=settings.api.job_retention_hours)
        for job_id in [j.id for j in self.jobs.values() if j.created_at < cutoff]:
            del self.jobs[job_id]
        self._last_prune = now

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


job_queue = JobQueue()
