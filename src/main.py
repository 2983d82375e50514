from __future__ import annotations

import argparse
import logging
import signal
import threading
from datetime import timedelta
from pathlib import Path
from typing import Callable, Sequence

import requests
from sqlalchemy.orm import Session

from config import AppSettings, config
from db.db import init_db
from domain.rates import RateOverrides
from services.binance_source import BinanceSource, _BinanceClient
from services.okx_source import OkxSource, _OkxClient
from services.rate_pipeline import RateResolutionPipeline
from services.rate_sources import build_http_session
from services.rate_update_task import RateUpdateTask
from services.scheduler import ScheduledService

logger = logging.getLogger(__name__)


def build_pipeline(settings: AppSettings, session: requests.Session | None = None) -> RateResolutionPipeline:
    http = session or build_http_session(settings.web_proxy)
    okx = OkxSource(client=_OkxClient(base_url=settings.okx_base_url, timeout=settings.request_timeout, session=http))
    binance = BinanceSource(
        client=_BinanceClient(base_url=settings.binance_base_url, timeout=settings.request_timeout, session=http)
    )
    return RateResolutionPipeline(sources=[okx, binance])


def reload_overrides() -> RateOverrides:
    # Re-read .env/environment so override changes apply on the next tick
    return AppSettings().rate_overrides()


def build_task(
    settings: AppSettings,
    session_factory: Callable[[], Session],
    *,
    pipeline: RateResolutionPipeline | None = None,
    overrides: Callable[[], RateOverrides] | None = None,
) -> RateUpdateTask:
    return RateUpdateTask(
        pipeline or build_pipeline(settings),
        session_factory,
        pair=settings.pair(),
        overrides=overrides or settings.rate_overrides,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep the latest USDT/TRX exchange rate in the rates database.")
    parser.add_argument("--once", action="store_true", help="Run a single update and exit.")
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between updates (default: UPDATE_INTERVAL_SECONDS setting, 60).",
    )
    parser.add_argument("--db-file", type=Path, default=None, help="SQLite database file (default: DB_FILE setting).")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")

    settings = config()
    db_file = args.db_file or settings.db_file
    logger.info("Initializing DB at %s", db_file)
    session_factory = init_db(db_file=db_file)

    task = build_task(settings, session_factory, overrides=reload_overrides)
    interval = timedelta(seconds=args.interval or settings.update_interval_seconds)
    service = ScheduledService(task.name, interval, task.run)

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    service.run_forever(stop, max_runs=1 if args.once else None)


if __name__ == "__main__":
    main()
