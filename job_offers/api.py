"""
Job Offers API
job_offers/api.py

Serves stored job offers and, optionally, runs the ingestion scheduler in the
background for the lifetime of the app.

- GET /api/job-offers: paginated list, exact-match filters on title, location,
  salary and company (empty values are ignored)

Every response is wrapped as {success, statusCode, data, timestamp}.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from job_offers.config import Settings, get_settings
from job_offers.errors import QueryError
from job_offers.pipeline import IngestionPipeline
from job_offers.query import JobOfferFilter, JobOfferQuery
from job_offers.scheduler import IngestionScheduler
from job_offers.sources import sources_from_settings
from job_offers.store import JobOfferStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/job-offers", tags=["job-offers"])


def envelope(data: Any, status_code: int = 200) -> dict:
    return {
        "success": 200 <= status_code < 400,
        "statusCode": status_code,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("", summary="Get a list of job-offers")
def get_job_offers(
    request: Request,
    page: int = Query(1, description="Page number for pagination", examples=[1]),
    page_size: Optional[int] = Query(None, description="Limit number of data per page", examples=[10]),
    title: str = Query("", description="Exact title", examples=["Data Scientist"]),
    location: str = Query("", description="Exact location", examples=["Seattle, WA"]),
    salary: str = Query("", description="Exact salary range", examples=["$87k - $129k"]),
    company: str = Query("", description="Exact company name", examples=["TechCorp"]),
):
    """Return one page of stored job offers."""
    settings: Settings = request.app.state.settings
    store: JobOfferStore = request.app.state.store

    try:
        query = JobOfferQuery.model_validate(
            {
                "page": page,
                "page_size": page_size if page_size is not None else settings.DEFAULT_PAGE_SIZE,
                "filter": JobOfferFilter(title=title, location=location, salary=salary, company=company),
            },
            context={"max_page_size": settings.MAX_PAGE_SIZE},
        )
        result = store.find_all(query)
    except (ValidationError, QueryError) as exc:
        logger.error("Error fetching job offers: %s", exc)
        raise HTTPException(status_code=400, detail="can not fetch Job-offers") from exc

    body = result.model_dump(mode="json", by_alias=True)
    body.update(page=query.page, page_size=query.page_size)
    return envelope(body)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[JobOfferStore] = None,
    scheduler: Optional[IngestionScheduler] = None,
) -> FastAPI:
    """Build the app; `store` and `scheduler` default to ones built from settings."""
    settings = settings or get_settings()
    store = store or JobOfferStore(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.create_schema()
        bg = scheduler
        if bg is None and settings.SCHEDULER_ENABLED:
            pipeline = IngestionPipeline(sources_from_settings(settings), store)
            bg = IngestionScheduler(pipeline, interval_s=settings.INGEST_INTERVAL_S)
        if bg is not None:
            bg.start_background()
        app.state.scheduler = bg
        try:
            yield
        finally:
            if bg is not None:
                bg.stop()

    app = FastAPI(
        title="Job Offers API",
        description="Job offers reconciled from multiple providers.",
        version="1.0.0",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(router)
    return app
