"""Exception hierarchy for the ingestion and query paths."""

from __future__ import annotations


class JobOffersError(Exception):
    """Base error for the package."""


class ProviderFetchError(JobOffersError):
    """Raised when a provider cannot be reached or returns an unusable body."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class NormalizationError(JobOffersError):
    """Raised when a single job entry cannot be decoded."""


class StoreError(JobOffersError):
    """Raised when the store fails to persist or read offers."""


class QueryError(StoreError):
    """Raised when a paginated query cannot be answered."""
