"""Data models for the job offers service.

The key idea: whatever shape a provider sends, the service owns one *stable*
canonical record. Every canonical field is always populated; a value the provider
did not supply is the literal string ``"unknown"`` rather than ``None``.

Attributes are snake_case in Python and serialize with the canonical camelCase
names (``jobId``, ``salaryRange``, ``companyWebSite`` ...). ``skils`` is kept
verbatim because stored data and API clients already use that spelling.

This file uses Pydantic v2.
"""

from __future__ import annotations

from datetime import datetime
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN = "unknown"

Experience = Union[int, float, str]


class JobOffer(BaseModel):
    """A normalized job offer that has not been persisted yet."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    job_id: str = Field(default=UNKNOWN, description="Provider-assigned id; not unique on its own.")
    job_type: str = UNKNOWN
    title: str = UNKNOWN
    location: str = UNKNOWN
    salary_range: str = UNKNOWN
    currency_unit: str = Field(default=UNKNOWN, description="Human-readable currency name, e.g. 'Dollar'.")
    company: str = UNKNOWN
    company_web_site: str = UNKNOWN
    industry: str = UNKNOWN
    skils: str = Field(default=UNKNOWN, description="Comma-joined skills.")
    experience: Experience = Field(default=UNKNOWN, description="Years of experience or free text.")
    posted_date: str = Field(default=UNKNOWN, description="Date string exactly as received.")

    @property
    def dedup_key(self) -> Tuple[str, str]:
        """The (jobId, title) pair that identifies an equivalent posting."""
        return (self.job_id, self.title)


class StoredJobOffer(JobOffer):
    """A job offer as read back from the store."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
