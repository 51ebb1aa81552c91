"""Rate limiting dependencies.

Two budgets are kept per client: ``audit`` for submissions, which trigger a
remote fetch, and ``query`` for everything that only reads or computes
(job polling, forecasts, content analysis).
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

from cachetools import TTLCache
from fastapi import Request, Response, status

from app.api.models.errors import ErrorCodes, api_error
from src.config.settings import settings

Scope = Literal["audit", "query"]


@dataclass(frozen=True)
class RateLimitState:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(time.time()) + self.reset_seconds),
        }


def scope_limit(scope: Scope) -> int:
    return settings.api.rate_limit if scope == "audit" else settings.api.query_rate_limit


def client_id(request: Request) -> str:
    """Client IP; the first X-Forwarded-For hop wins behind a reverse proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class SlidingWindowLimiter:
    """Sliding-window request log per (scope, client).

    Logs live in a TTLCache sized to twice the window, so idle clients
    drop out without a cleanup pass.
    """

    def __init__(self, max_clients: int = 10000):
        self._requests: TTLCache[tuple[str, str], list[float]] = TTLCache(
            maxsize=max_clients, ttl=settings.api.rate_limit_window * 2
        )

    def hit(self, scope: Scope, client: str) -> RateLimitState:
        """Record one request unless the client is over its budget."""
        key = (scope, client)
        limit = scope_limit(scope)
        window = settings.api.rate_limit_window
        now = time.time()

        recent = [t for t in self._requests.get(key, []) if t > now - window]
        if len(recent) >= limit:
            self._requests[key] = recent
            oldest = min(recent) if recent else now
            return RateLimitState(False, limit, 0, max(1, int(oldest + window - now)))

        recent.append(now)
        self._requests[key] = recent
        return RateLimitState(True, limit, limit - len(recent), window)


api_rate_limiter = SlidingWindowLimiter()


def rate_limit(scope: Scope):
    """Dependency enforcing the ``scope`` budget and setting X-RateLimit-* headers."""

    async def dependency(request: Request, response: Response) -> None:
        state = api_rate_limiter.hit(scope, client_id(request))
        if not state.allowed:
            raise api_error(
                status.HTTP_429_TOO_MANY_REQUESTS,
                ErrorCodes.RATE_LIMIT_EXCEEDED,
                "Too many requests. Please slow down.",
                {"retry_after": state.reset_seconds, "limit": state.limit, "scope": scope},
                headers={"Retry-After": str(state.reset_seconds), **state.headers()},
            )
        response.headers.update(state.headers())

    return dependency
