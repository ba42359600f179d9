"""
SQLAlchemy table definitions for stored job offers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, UniqueConstraint, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobOfferRecord(Base):
    __tablename__ = "job_offers"
    __table_args__ = (UniqueConstraint("job_id", "title", name="uq_job_offers_job_id_title"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    job_id = Column(String(255), nullable=False, index=True)
    job_type = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    location = Column(String(255), nullable=False)
    salary_range = Column(String(255), nullable=False)
    currency_unit = Column(String(64), nullable=False)
    company = Column(String(255), nullable=False)
    company_web_site = Column(String(1000), nullable=False)
    industry = Column(String(255), nullable=False)
    skils = Column(String, nullable=False)
    experience = Column(String(255), nullable=False)
    posted_date = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


def make_engine(url: str) -> Engine:
    """Create an engine; SQLite connections are shared across the scheduler and API threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)
