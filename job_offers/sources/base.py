"""Base classes for provider connectors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..errors import ProviderFetchError

logger = logging.getLogger(__name__)


class ProviderSource(ABC):
    """Abstract base class for a provider connector."""

    name: str

    @abstractmethod
    def fetch(self) -> Any:
        """Fetch the provider's whole payload as decoded JSON.

        Raises:
            ProviderFetchError: on network errors, non-2xx responses or a malformed body.
        """
        raise NotImplementedError


@dataclass
class FetchResult:
    """Outcome of fetching one provider: a payload or an error, never both."""

    provider: str
    payload: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fetch_all(sources: Iterable[ProviderSource]) -> List[FetchResult]:
    """Fetch every source independently; a failing source yields a failed result."""
    results: List[FetchResult] = []
    for source in sources:
        try:
            payload = source.fetch()
        except ProviderFetchError as exc:
            logger.error("Error fetching job offers from %s: %s", source.name, exc)
            results.append(FetchResult(provider=source.name, error=str(exc)))
            continue
        except Exception as exc:
            logger.exception("Unexpected error fetching job offers from %s", source.name)
            results.append(FetchResult(provider=source.name, error=f"unexpected error: {exc}"))
            continue
        logger.info("Fetched payload from %s", source.name)
        results.append(FetchResult(provider=source.name, payload=payload))
    return results
