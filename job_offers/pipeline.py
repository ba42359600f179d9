"""One ingestion cycle: fetch every provider, normalize, write.

The cycle's offers are a local value threaded from stage to stage, never shared
state, and a non-blocking lock keeps a second cycle from starting while one is
in flight. Each stage returns an explicit result; nothing a stage does is fatal
to the process. The cycle's `CycleReport` summarizes what happened.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence

from .models import JobOffer
from .normalize import NormalizeResult, normalize_payload
from .sources.base import FetchResult, ProviderSource, fetch_all
from .store import JobOfferStore, WriteResult

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    WRITING = "writing"


class CycleStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class CycleReport:
    status: CycleStatus
    providers_ok: List[str] = field(default_factory=list)
    providers_failed: List[str] = field(default_factory=list)
    normalized: int = 0
    entries_failed: int = 0
    inserted: int = 0
    skipped: int = 0
    write_failures: int = 0
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def normalize_all(fetched: Sequence[FetchResult]) -> List[NormalizeResult]:
    """Normalize every successful fetch; failed fetches contribute nothing."""
    return [normalize_payload(res.payload, provider=res.provider) for res in fetched if res.ok]


def _status(fetched: Sequence[FetchResult], normalized: Sequence[NormalizeResult], written: WriteResult) -> CycleStatus:
    if fetched and not any(res.ok for res in fetched):
        return CycleStatus.FAILED
    clean = all(res.ok for res in fetched) and all(res.ok for res in normalized) and written.ok
    return CycleStatus.SUCCESS if clean else CycleStatus.PARTIAL


class IngestionPipeline:
    """Runs fetch -> normalize -> write over a fixed set of providers."""

    def __init__(self, sources: Sequence[ProviderSource], store: JobOfferStore) -> None:
        self.sources = list(sources)
        self.store = store
        self.state = CycleState.IDLE
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def run_cycle(self) -> CycleReport:
        """Run one full cycle, or report `skipped` if another cycle is in flight."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Ingestion cycle already in progress (%s); skipping", self.state.value)
            return CycleReport(status=CycleStatus.SKIPPED)
        try:
            return self._run()
        except Exception as exc:
            logger.exception("Ingestion cycle aborted")
            return CycleReport(status=CycleStatus.FAILED, error=str(exc))
        finally:
            self.state = CycleState.IDLE
            self._lock.release()

    def _run(self) -> CycleReport:
        self.state = CycleState.FETCHING
        fetched = fetch_all(self.sources)

        self.state = CycleState.NORMALIZING
        normalized = normalize_all(fetched)
        offers: List[JobOffer] = [offer for res in normalized for offer in res.offers]

        self.state = CycleState.WRITING
        written = self.store.save_new(offers)

        report = CycleReport(
            status=_status(fetched, normalized, written),
            providers_ok=[res.provider for res in fetched if res.ok],
            providers_failed=[res.provider for res in fetched if not res.ok],
            normalized=len(offers),
            entries_failed=sum(len(res.errors) for res in normalized),
            inserted=written.inserted,
            skipped=written.skipped,
            write_failures=len(written.failed),
        )
        if report.status is CycleStatus.SUCCESS:
            logger.info("Job offers fetched and stored successfully: %d new", report.inserted)
        else:
            logger.warning("Ingestion cycle finished with status %s: %s", report.status.value, report.to_dict())
        return report
