"""Filtered, paginated reads over stored job offers.

Filters are exact-match and combined with AND. A filter left empty (None or "")
is not applied at all; it never means "match the empty string". The `salary`
filter is compared against the stored salary range.

Results are ordered by `created_at` then `id`, so a page boundary is stable
across requests while no new offers are written.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import Select, func, select

from .db import JobOfferRecord
from .models import StoredJobOffer
from .utils import ceil_div

DEFAULT_MAX_PAGE_SIZE = 100

FILTER_COLUMNS = {
    "title": JobOfferRecord.title,
    "location": JobOfferRecord.location,
    "salary": JobOfferRecord.salary_range,
    "company": JobOfferRecord.company,
}


class JobOfferFilter(BaseModel):
    title: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    company: Optional[str] = None

    @field_validator("title", "location", "salary", "company", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def active(self) -> Dict[str, str]:
        """Return only the filter fields that were supplied."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class JobOfferQuery(BaseModel):
    """A page request. Pass `context={"max_page_size": n}` to validate against a custom cap."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)
    filter: JobOfferFilter = Field(default_factory=JobOfferFilter)

    @field_validator("page_size")
    @classmethod
    def _cap_page_size(cls, value: int, info: ValidationInfo) -> int:
        cap = (info.context or {}).get("max_page_size", DEFAULT_MAX_PAGE_SIZE)
        if value > cap:
            raise ValueError(f"page_size must be at most {cap}")
        return value


class JobOfferPage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data: List[StoredJobOffer]
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


def paginate(total: int, page: int, page_size: int) -> Dict[str, Any]:
    """Page arithmetic for a result set of `total` rows."""
    total_pages = ceil_div(total, page_size)
    return {
        "total": total,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }


def filtered(stmt: Select, flt: JobOfferFilter) -> Select:
    """AND an exact-match condition for every supplied filter field onto `stmt`."""
    for name, value in flt.active().items():
        stmt = stmt.where(FILTER_COLUMNS[name] == value)
    return stmt


def build_statements(query: JobOfferQuery) -> Tuple[Select, Select]:
    """Return (page select, count select) for the query."""
    rows = (
        filtered(select(JobOfferRecord), query.filter)
        .order_by(JobOfferRecord.created_at.asc(), JobOfferRecord.id.asc())
        .offset((query.page - 1) * query.page_size)
        .limit(query.page_size)
    )
    count = filtered(select(func.count()).select_from(JobOfferRecord), query.filter)
    return rows, count
