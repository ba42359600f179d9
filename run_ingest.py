"""CLI entry point.

Runs the job offers ingestion pipeline and the query API.

Examples:
    python run_ingest.py once
    python run_ingest.py schedule --interval 60
    python run_ingest.py serve --port 3000

`once` prints the cycle report as JSON. Provider endpoints, the database URL and
the cadence come from the environment / `.env` (see job_offers/config.py).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from job_offers.config import get_settings
from job_offers.pipeline import IngestionPipeline
from job_offers.scheduler import IngestionScheduler
from job_offers.sources import sources_from_settings
from job_offers.store import JobOfferStore


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Ingest job offers from multiple providers and serve them.")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("once", help="Run a single ingestion cycle and exit.")

    sched = sub.add_parser("schedule", help="Run ingestion cycles on a fixed cadence.")
    sched.add_argument("--interval", type=int, default=None, help="Seconds between cycles (default from settings).")

    serve = sub.add_parser("serve", help="Serve the job offers API (runs the scheduler too unless disabled).")
    serve.add_argument("--host", type=str, default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    return p.parse_args()


def build_pipeline() -> IngestionPipeline:
    settings = get_settings()
    store = JobOfferStore(settings.DATABASE_URL)
    store.create_schema()
    return IngestionPipeline(sources_from_settings(settings), store)


def main() -> None:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if args.command == "once":
        report = build_pipeline().run_cycle()
        print(json.dumps(report.to_dict(), indent=2))
        return

    if args.command == "schedule":
        interval = args.interval or settings.INGEST_INTERVAL_S
        scheduler = IngestionScheduler(build_pipeline(), interval_s=interval)
        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            pass
        return

    import uvicorn

    from job_offers.api import create_app

    logging.getLogger(__name__).info("Application is running on port %d", args.port)
    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
