from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from db.repositories import RateRecordRepository
from domain.rates import CurrencyPair, RateOverrides, RateRecord

from .rate_pipeline import RateResolutionPipeline

logger = logging.getLogger(__name__)


class RateUpdateTask:
    """Resolve the configured pair and store the result.

    Meant to be invoked by a scheduler once per interval. Source failures are
    absorbed by the pipeline; when nothing resolves the stored record is left
    untouched until a later run succeeds.
    """

    name = "Update rates"

    def __init__(
        self,
        pipeline: RateResolutionPipeline,
        session_factory: Callable[[], Session],
        *,
        pair: CurrencyPair,
        overrides: Callable[[], RateOverrides] | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.session_factory = session_factory
        self.pair = pair
        self._overrides = overrides or RateOverrides

    def run(self) -> list[RateRecord]:
        logger.info("------------------ %s: start ------------------", self.name)
        persisted: list[RateRecord] = []
        with self.session_factory() as session:
            repository = RateRecordRepository(session)
            resolution = self.pipeline.resolve(self.pair, self._overrides())

            for record in resolution.records:
                logger.info(
                    "Updating rate, %s -> %s = %s (source=%s)",
                    record.base_currency,
                    record.quote_currency,
                    record.rate,
                    record.source,
                )
                persisted.append(repository.upsert(record))

            if not resolution.available:
                logger.info(
                    "No rate available for %s, %d source(s) failed; keeping last stored rate",
                    self.pair,
                    len(resolution.failures),
                )
        logger.info("------------------ %s: end ------------------", self.name)
        return persisted


__all__ = ["RateUpdateTask"]
