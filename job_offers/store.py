"""Deduplicating persistence for canonical job offers.

Writes are check-then-insert on the (jobId, title) dedup key: an offer whose key
is already stored is skipped, never updated. Each offer is written in its own
transaction so one failing record does not roll back the rest of the batch.
The unique constraint on (job_id, title) catches a racing writer; such a
conflict is counted as a skip.

Only one ingestion cycle writes at a time (see `pipeline.IngestionPipeline`);
readers run concurrently and only ever see committed rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import exists, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .db import Base, JobOfferRecord, make_engine
from .errors import QueryError, StoreError
from .models import JobOffer, StoredJobOffer
from .query import JobOfferPage, JobOfferQuery, build_statements, paginate

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Counts for one batch write; `failed` holds the dedup keys that errored."""

    inserted: int = 0
    skipped: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _to_row(offer: JobOffer) -> Dict[str, Any]:
    row = offer.model_dump(by_alias=False)
    row["experience"] = str(row["experience"])
    return row


def _to_model(record: JobOfferRecord) -> StoredJobOffer:
    data = {col.name: getattr(record, col.name) for col in JobOfferRecord.__table__.columns}
    return StoredJobOffer.model_validate(data)


class JobOfferStore:
    """SQLAlchemy-backed store of canonical job offers."""

    def __init__(self, bind: Union[str, Engine]) -> None:
        self.engine = make_engine(bind) if isinstance(bind, str) else bind
        self._session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"can not create job offers schema: {exc}") from exc

    def exists(self, job_id: str, title: str, session: Optional[Session] = None) -> bool:
        """Whether an offer with this (jobId, title) pair is already stored."""
        stmt = select(exists().where(JobOfferRecord.job_id == job_id, JobOfferRecord.title == title))
        if session is not None:
            return bool(session.scalar(stmt))
        with self._session() as s:
            return bool(s.scalar(stmt))

    def count(self) -> int:
        with self._session() as s:
            return s.scalar(select(func.count()).select_from(JobOfferRecord)) or 0

    def save_new(self, offers: Iterable[JobOffer]) -> WriteResult:
        """Insert every offer whose dedup key is not stored yet.

        Never raises for a single record: persistence errors are logged and
        recorded in `WriteResult.failed`, and the next record is attempted.
        """
        result = WriteResult()
        for offer in offers:
            key = "%s / %s" % offer.dedup_key
            try:
                with self._session.begin() as s:
                    if self.exists(offer.job_id, offer.title, session=s):
                        result.skipped += 1
                        continue
                    s.add(JobOfferRecord(**_to_row(offer)))
                result.inserted += 1
            except IntegrityError:
                logger.info("Job offer %s was inserted concurrently; skipping", key)
                result.skipped += 1
            except SQLAlchemyError as exc:
                logger.error("Can not store job offer %s: %s", key, exc)
                result.failed.append(key)

        logger.info(
            "Stored job offers: %d inserted, %d already present, %d failed",
            result.inserted,
            result.skipped,
            len(result.failed),
        )
        return result

    def find_all(self, query: JobOfferQuery) -> JobOfferPage:
        """Return one page of offers matching every supplied filter exactly.

        Raises:
            QueryError: if the store cannot answer the query.
        """
        rows_stmt, count_stmt = build_statements(query)
        try:
            with self._session() as s:
                total = s.scalar(count_stmt) or 0
                records = s.scalars(rows_stmt).all()
                data = [_to_model(r) for r in records]
        except SQLAlchemyError as exc:
            raise QueryError(f"can not query job offers: {exc}") from exc

        return JobOfferPage(data=data, **paginate(total, query.page, query.page_size))

