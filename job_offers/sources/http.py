"""HTTP provider connector.

Every provider is a plain GET endpoint returning its whole job payload as JSON;
the shapes differ, which is `normalize.py`'s concern, not this module's. Any
network error, non-2xx status or non-JSON body surfaces as `ProviderFetchError`.

Transient failures (timeouts, connection errors, 429 and 5xx) are retried with
exponential backoff up to `max_retries` times; the default of 0 means one attempt.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional

import httpx

from ..config import Settings
from ..errors import ProviderFetchError
from .base import ProviderSource

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class HttpProviderSource(ProviderSource):
    """Fetch one provider's payload over HTTP GET."""

    def __init__(
        self,
        name: str,
        url: str,
        timeout_s: float = 20.0,
        max_retries: int = 0,
        backoff_s: float = 2.0,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.name = name
        self.url = url
        self._timeout = timeout_s
        self._max_retries = max_retries
        self._backoff_s = backoff_s
        self._client = client
        self._sleep = sleep

    def _get(self, client: httpx.Client) -> httpx.Response:
        retries = 0
        while True:
            try:
                resp = client.get(self.url)
                resp.raise_for_status()
                return resp
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status in RETRYABLE_STATUS and retries < self._max_retries:
                    self._backoff(retries, f"HTTP {status}")
                    retries += 1
                    continue
                raise ProviderFetchError(self.name, f"HTTP {status} from {self.url}") from exc
            except httpx.TransportError as exc:
                if retries < self._max_retries:
                    self._backoff(retries, type(exc).__name__)
                    retries += 1
                    continue
                raise ProviderFetchError(self.name, f"can not connect to {self.url}: {exc!r}") from exc

    def _backoff(self, retries: int, reason: str) -> None:
        sleep_s = self._backoff_s * (2**retries)
        logger.warning("%s: %s, retrying in %.1fs", self.name, reason, sleep_s)
        self._sleep(sleep_s)

    def fetch(self) -> Any:
        """GET the provider endpoint and return the decoded JSON body."""
        if self._client is not None:
            resp = self._get(self._client)
        else:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                resp = self._get(client)

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderFetchError(self.name, "response body is not valid JSON") from exc


def sources_from_settings(settings: Settings, client: Optional[httpx.Client] = None) -> List[HttpProviderSource]:
    """Build one HTTP source per configured provider endpoint."""
    return [
        HttpProviderSource(
            name=name,
            url=url,
            timeout_s=settings.HTTP_TIMEOUT_S,
            max_retries=settings.FETCH_MAX_RETRIES,
            backoff_s=settings.FETCH_BACKOFF_S,
            client=client,
        )
        for name, url in settings.PROVIDER_ENDPOINTS.items()
    ]
