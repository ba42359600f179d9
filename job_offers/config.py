from functools import lru_cache
from pathlib import Path
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Configuration settings for ingestion, storage and the query API.
    """

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Providers, fetched in declaration order. Override with a JSON object in the env.
    PROVIDER_ENDPOINTS: Dict[str, str] = {
        "provider1": "https://assignment.devotel.io/api/provider1/jobs",
        "provider2": "https://assignment.devotel.io/api/provider2/jobs",
    }

    # Ingestion cadence
    INGEST_INTERVAL_S: int = 60
    SCHEDULER_ENABLED: bool = True

    # Provider HTTP
    HTTP_TIMEOUT_S: float = 20.0
    FETCH_MAX_RETRIES: int = 0
    FETCH_BACKOFF_S: float = 2.0  # seconds, doubled per retry

    # Store
    DATABASE_URL: str = "sqlite:///job_offers.db"

    # Query
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
