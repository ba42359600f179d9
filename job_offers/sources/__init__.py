"""Provider connectors that fetch raw job payloads."""

from .base import FetchResult, ProviderSource, fetch_all
from .http import HttpProviderSource, sources_from_settings

__all__ = ["FetchResult", "HttpProviderSource", "ProviderSource", "fetch_all", "sources_from_settings"]
