"""Error taxonomy for the audit and forecasting engine."""
from __future__ import annotations


class GeoScoreError(Exception):
    """Base class for all engine errors."""


class FetchError(GeoScoreError):
    """The page could not be retrieved; the audit cannot run.

    Attributes:
        url: URL that failed
        reason: Short machine-friendly reason (e.g. 'ssrf', 'too_large', 'http')
    """

    def __init__(self, message: str, *, url: str = "", reason: str = "fetch"):
        super().__init__(message)
        self.url = url
        self.reason = reason


class ParseError(GeoScoreError):
    """The fetched document cannot be turned into a DocumentModel."""


class InsufficientHistoryError(GeoScoreError):
    """Fewer history entries than a forecast needs."""

    def __init__(self, available: int, required: int = 2):
        super().__init__(
            f"Forecasting needs at least {required} history entries, got {available}"
        )
        self.available = available
        self.required = required


class EnrichmentUnavailable(GeoScoreError):
    """The recommendation enrichment collaborator could not produce a result.

    Distinct from an empty (but valid) recommendation list.
    """

    def __init__(self, message: str, *, reason: str = "unavailable"):
        super().__init__(message)
        self.reason = reason
