"""Schema reconciliation for provider payloads.

Providers expose incompatible JSON shapes. This module turns one whole provider
payload into zero or more canonical `JobOffer` records in two steps:

1. Payload decode: the payload is matched against a small, closed registry of
   payload variants (`PAYLOAD_VARIANTS`). The first variant that validates wins
   and enumerates the raw job entries. Supporting a new provider shape means
   adding one variant class to the registry.
2. Entry extraction: every entry is decoded into a typed `RawJob` and mapped to a
   `JobOffer` by `to_offer`, which checks a prioritized list of source fields
   for each canonical field and falls back to "unknown".

Entries are isolated from each other: one malformed entry is logged and counted,
the rest of the batch still normalizes. A payload matching no variant yields no
records and is not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .errors import NormalizationError
from .models import UNKNOWN, JobOffer
from .utils import first_present, format_number, join_nonempty

logger = logging.getLogger(__name__)


# Symbol and ISO code -> human-readable currency name.
CURRENCY_NAMES: Dict[str, str] = {
    "USD": "Dollar",
    "EUR": "Euro",
    "GBP": "Pound",
    "JPY": "Yen",
    "INR": "Rupee",
    "RUB": "Rouble",
    "KRW": "Won",
    "$": "Dollar",
    "€": "Euro",
    "£": "Pound",
    "¥": "Yen",
    "₹": "Rupee",
    "₽": "Rouble",
    "₩": "Won",
}

CURRENCY_SYMBOLS = ("$", "€", "£", "¥", "₹", "₽", "₩")

# Provider fields are loosely typed: numbers where text is expected, nulls inside
# lists, scalars where an object is expected. Each lenient type below coerces what
# it can and turns the rest into None, so only that field falls back to "unknown".


def _lenient_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return format_number(value)
    return None


def _lenient_text_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, (list, tuple)):
        items = [_lenient_text(it) for it in value]
        return [it for it in items if it is not None]
    text = _lenient_text(value)
    return [text] if text is not None else None


def _lenient_number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        for parse in (int, float):
            try:
                return parse(value.strip())
            except ValueError:
                continue
    return None


def _lenient_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}.get(
            value.strip().lower()
        )
    return None


def _lenient_scalar(value: Any) -> Optional[Union[int, float, str]]:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float, str)):
        return value
    return None


def _object_only(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else None


def _object_or_text(value: Any) -> Any:
    if isinstance(value, (dict, BaseModel)):
        return value
    return _lenient_text(value)


Text = Annotated[Optional[str], BeforeValidator(_lenient_text)]
TextList = Annotated[Optional[List[str]], BeforeValidator(_lenient_text_list)]
Number = Annotated[Optional[Union[int, float]], BeforeValidator(_lenient_number)]
Flag = Annotated[Optional[bool], BeforeValidator(_lenient_flag)]
Scalar = Annotated[Optional[Union[int, float, str]], BeforeValidator(_lenient_scalar)]


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Compensation(_Section):
    min: Number = None
    max: Number = None
    currency: Text = None
    salary_range: Text = Field(default=None, alias="salaryRange")


class LocationInfo(_Section):
    city: Text = None
    state: Text = None
    remote: Flag = None
    location: Text = None


class JobDetails(Compensation, LocationInfo):
    """The `details` block some providers use for location, type and pay together."""

    job_type: Text = Field(default=None, alias="type")


class Employer(_Section):
    company_name: Text = Field(default=None, alias="companyName")
    name: Text = None
    website: Text = None
    industry: Text = None


class Requirements(_Section):
    experience: Scalar = None
    technologies: TextList = None


class RawJob(_Section):
    """One provider job entry, with every field shape a known provider uses."""

    job_id: Text = Field(default=None, alias="jobId")
    id: Text = None
    position: Text = None
    title: Text = None
    job_type: Text = Field(default=None, alias="type")
    details: Annotated[Optional[JobDetails], BeforeValidator(_object_only)] = None
    location: Annotated[Optional[Union[LocationInfo, str]], BeforeValidator(_object_or_text)] = None
    compensation: Annotated[Optional[Compensation], BeforeValidator(_object_only)] = None
    salary_range: Text = Field(default=None, alias="salaryRange")
    employer: Annotated[Optional[Employer], BeforeValidator(_object_only)] = None
    company: Annotated[Optional[Union[Employer, str]], BeforeValidator(_object_or_text)] = None
    requirements: Annotated[Optional[Requirements], BeforeValidator(_object_only)] = None
    skills: TextList = None
    date_posted: Text = Field(default=None, alias="datePosted")
    posted_date: Text = Field(default=None, alias="postedDate")


# --- payload variants -------------------------------------------------------


class PayloadVariant(BaseModel):
    """Base for a recognized provider payload shape."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    family: ClassVar[str]

    def entries(self) -> Iterator[Tuple[str, Any]]:
        """Yield (label, raw entry) pairs; the label is used in log messages."""
        raise NotImplementedError


class _JobsList(BaseModel):
    jobs_list: Dict[str, Any] = Field(alias="jobsList")


class MapPayload(PayloadVariant):
    """`{"data": {"jobsList": {"<jobId>": {...}}}}`: entries keyed by job id."""

    family: ClassVar[str] = "map"
    data: _JobsList

    def entries(self) -> Iterator[Tuple[str, Any]]:
        for key, job in self.data.jobs_list.items():
            if not isinstance(job, dict):
                yield key, job
                continue
            # The map key is the job id; entries carry no id of their own.
            yield key, {**job, "jobId": key}


class ListPayload(PayloadVariant):
    """`{"jobs": [{...}, ...]}`: a flat sequence of job objects."""

    family: ClassVar[str] = "list"
    jobs: List[Any]

    def entries(self) -> Iterator[Tuple[str, Any]]:
        for idx, job in enumerate(self.jobs):
            label = str(job.get("jobId") or job.get("id") or idx) if isinstance(job, dict) else str(idx)
            yield label, job


# Checked in order; first match wins.
PAYLOAD_VARIANTS: List[Type[PayloadVariant]] = [MapPayload, ListPayload]


def detect_payload(payload: Any) -> Optional[PayloadVariant]:
    """Return the first payload variant that recognizes `payload`, or None."""
    if not isinstance(payload, dict):
        return None
    for variant in PAYLOAD_VARIANTS:
        try:
            return variant.model_validate(payload)
        except ValidationError:
            continue
    return None


# --- field extraction -------------------------------------------------------


def format_location(city: str, state: str, remote: Optional[bool]) -> str:
    """Render structured location fields as 'City, ST (Remote|OnSite)'."""
    suffix = "Remote" if remote else "OnSite"
    return f"{city}, {state} ({suffix})"


def resolve_currency(code: Optional[str], salary_range: str) -> str:
    """Map an explicit currency code, or the salary range's leading symbol, to a name.

    Unrecognized explicit codes pass through unchanged; an unrecognized leading
    character resolves to "unknown".
    """
    code = (code or "").strip()
    if code:
        return CURRENCY_NAMES.get(code, CURRENCY_NAMES.get(code.upper(), code))
    first_char = (salary_range or "").strip()[:1]
    if first_char in CURRENCY_SYMBOLS:
        return CURRENCY_NAMES[first_char]
    return UNKNOWN


def _location_sections(job: RawJob) -> List[LocationInfo]:
    sections: List[LocationInfo] = []
    if isinstance(job.location, LocationInfo):
        sections.append(job.location)
    if job.details is not None:
        sections.append(job.details)
    return sections


def _extract_location(job: RawJob) -> str:
    sections = _location_sections(job)
    for sec in sections:
        if sec.city and sec.state:
            return format_location(sec.city, sec.state, sec.remote)
    flat = first_present(
        job.location if isinstance(job.location, str) else None,
        *(sec.location for sec in sections),
    )
    return str(flat).strip() if flat is not None else UNKNOWN


def _compensation_sections(job: RawJob) -> List[Compensation]:
    return [sec for sec in (job.compensation, job.details) if sec is not None]


def _extract_salary_range(job: RawJob) -> str:
    sections = _compensation_sections(job)
    for sec in sections:
        if sec.min is not None and sec.max is not None:
            return f"{format_number(sec.min)} - {format_number(sec.max)}"
    flat = first_present(*(sec.salary_range for sec in sections), job.salary_range)
    return str(flat).strip() if flat is not None else UNKNOWN


def _extract_employer(job: RawJob) -> Employer:
    if job.employer is not None:
        return job.employer
    if isinstance(job.company, Employer):
        return job.company
    if isinstance(job.company, str):
        return Employer(name=job.company)
    return Employer()


def _extract_skills(job: RawJob) -> str:
    technologies = job.requirements.technologies if job.requirements else None
    return join_nonempty(technologies) or join_nonempty(job.skills) or UNKNOWN


def _text(*values: Any) -> str:
    val = first_present(*values)
    return str(val).strip() if val is not None else UNKNOWN


def to_offer(job: RawJob) -> JobOffer:
    """Map one decoded provider entry to a canonical `JobOffer`."""
    employer = _extract_employer(job)
    salary_range = _extract_salary_range(job)
    currency_code = first_present(*(sec.currency for sec in _compensation_sections(job)))
    experience = first_present(job.requirements.experience if job.requirements else None)

    return JobOffer(
        job_id=_text(job.job_id, job.id),
        job_type=_text(job.job_type, job.details.job_type if job.details else None),
        title=_text(job.position, job.title),
        location=_extract_location(job),
        salary_range=salary_range,
        currency_unit=resolve_currency(currency_code, salary_range),
        company=_text(employer.company_name, employer.name),
        company_web_site=_text(employer.website),
        industry=_text(employer.industry),
        skils=_extract_skills(job),
        experience=experience if experience is not None else UNKNOWN,
        posted_date=_text(job.date_posted, job.posted_date),
    )


def normalize_entry(entry: Any) -> JobOffer:
    """Decode and map one raw entry; raise NormalizationError if it is malformed."""
    if not isinstance(entry, dict):
        raise NormalizationError(f"job entry must be an object, got {type(entry).__name__}")
    try:
        raw = RawJob.model_validate(entry)
    except ValidationError as exc:
        raise NormalizationError(f"{exc.error_count()} invalid field(s): {exc.errors()[0]['loc']}") from exc
    return to_offer(raw)


@dataclass
class NormalizeResult:
    """Offers extracted from one payload plus the entries that failed."""

    provider: str
    family: Optional[str] = None
    offers: List[JobOffer] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def normalize_payload(payload: Any, provider: str = "unknown") -> NormalizeResult:
    """Convert one whole provider payload into canonical offers.

    Args:
        payload: Decoded JSON of unknown shape.
        provider: Provider name, used for logging only.

    Returns:
        NormalizeResult with one offer per well-formed entry.
    """
    result = NormalizeResult(provider=provider)
    variant = detect_payload(payload)
    if variant is None:
        logger.info("Provider %s: payload matches no known shape; nothing to normalize", provider)
        return result

    result.family = variant.family
    for label, entry in variant.entries():
        try:
            result.offers.append(normalize_entry(entry))
        except NormalizationError as exc:
            logger.warning("Provider %s: skipping job entry %s: %s", provider, label, exc)
            result.errors.append(f"{label}: {exc}")

    logger.info(
        "Provider %s: normalized %d offer(s) from %s payload (%d failed)",
        provider,
        len(result.offers),
        variant.family,
        len(result.errors),
    )
    return result
