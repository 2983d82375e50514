# flake8: noqa E402
# Run via uv so project deps are loaded, e.g.:
# uv run scripts/rate_probe.py --source okx --pair USDT_TRX
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from domain.rates import CurrencyPair, RateRecord
from main import build_pipeline


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch a live rate without touching the database.")
    parser.add_argument(
        "--source",
        choices=("okx", "binance", "pipeline"),
        default="pipeline",
        help="Single provider to query, or the full fallback chain including overrides (default: pipeline).",
    )
    parser.add_argument("--pair", default=None, help="Pair as BASE_QUOTE, e.g. USDT_TRX (default: RATE_PAIR setting).")
    return parser.parse_args()


def to_payload(record: RateRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "base": record.base_currency.value,
        "quote": record.quote_currency.value,
        "rate": str(record.rate),
        "inverse_rate": str(record.inverse_rate),
        "source": record.source,
        "last_update_time": record.last_update_time.isoformat(),
    }


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()

    settings = config()
    pair = CurrencyPair.parse(args.pair) if args.pair else settings.pair()
    pipeline = build_pipeline(settings)

    if args.source == "pipeline":
        resolution = pipeline.resolve(pair, settings.rate_overrides())
        if resolution.record is None:
            failures = {failure.source: failure.error.detail for failure in resolution.failures}
            print(json.dumps({"pair": pair.id, "available": False, "failures": failures}, indent=2))
            sys.exit(1)
        print(json.dumps(to_payload(resolution.record), indent=2))
        return

    source = next(source for source in pipeline.sources if source.source_name == args.source)
    print(json.dumps(to_payload(source.fetch_rate(pair)), indent=2))


if __name__ == "__main__":
    main()
