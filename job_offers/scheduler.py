"""Fixed-cadence trigger for ingestion cycles, built on `schedule`."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import schedule

from .pipeline import CycleReport, IngestionPipeline

logger = logging.getLogger(__name__)


class IngestionScheduler:
    """Run `pipeline.run_cycle` every `interval_s` seconds.

    Jobs run on the thread that calls `run_pending`, so cycles never overlap;
    the pipeline's own lock covers manual runs from other threads.
    """

    def __init__(self, pipeline: IngestionPipeline, interval_s: int = 60, run_on_start: bool = True) -> None:
        if interval_s < 1:
            raise ValueError("interval_s must be >= 1")
        self.pipeline = pipeline
        self.interval_s = interval_s
        self.run_on_start = run_on_start
        self.last_report: Optional[CycleReport] = None
        self._scheduler = schedule.Scheduler()
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def tick(self) -> CycleReport:
        self.last_report = self.pipeline.run_cycle()
        return self.last_report

    def start(self) -> None:
        """Register the ingestion job; optionally run a first cycle right away."""
        self._scheduler.clear()
        self._scheduler.every(self.interval_s).seconds.do(self.tick)
        logger.info("Ingestion scheduled every %ds", self.interval_s)
        if self.run_on_start:
            self.tick()

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    def run_forever(self, stop_event: Optional[threading.Event] = None, poll_s: float = 1.0) -> None:
        stop = stop_event or self._stop
        self.start()
        while not stop.is_set():
            self.run_pending()
            stop.wait(poll_s)
        self._scheduler.clear()
        logger.info("Ingestion scheduler stopped")

    def start_background(self) -> threading.Thread:
        """Run the loop in a daemon thread; `stop()` ends it."""
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="ingestion-scheduler", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

