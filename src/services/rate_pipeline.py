from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from domain.rates import CurrencyPair, RateOverrides, RateRecord

from .rate_normalizer import normalize
from .rate_sources import RateSource, RateSourceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFailure:
    source: str
    error: RateSourceError


@dataclass(frozen=True)
class RateResolution:
    """Outcome of one resolution run.

    ``record`` is ``None`` when every source was exhausted.
    """

    pair: CurrencyPair
    record: RateRecord | None
    failures: list[SourceFailure] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.record is not None

    @property
    def records(self) -> list[RateRecord]:
        return [self.record] if self.record is not None else []


class RateResolutionPipeline:
    def __init__(self, sources: Sequence[RateSource]) -> None:
        self.sources = list(sources)

    def resolve(self, pair: CurrencyPair, overrides: RateOverrides | None = None) -> RateResolution:
        overrides = overrides or RateOverrides()

        override = self._resolve_override(pair, overrides)
        if override is not None:
            return RateResolution(pair=pair, record=override)

        failures: list[SourceFailure] = []
        for source in self.sources:
            try:
                record = source.fetch_rate(pair)
            except RateSourceError as exc:
                logger.warning("Fetching %s rate from %s failed: %s", pair, source.source_name, exc.detail)
                failures.append(SourceFailure(source=source.source_name, error=exc))
                continue
            return RateResolution(pair=pair, record=record, failures=failures)

        return RateResolution(pair=pair, record=None, failures=failures)

    @staticmethod
    def _resolve_override(pair: CurrencyPair, overrides: RateOverrides) -> RateRecord | None:
        candidates: tuple[tuple[str, Decimal | None], ...] = (
            ("fixed", overrides.fixed_rate),
            ("configured", overrides.configured_rate),
        )
        for source_name, value in candidates:
            if not RateOverrides.is_active(value):
                continue
            record = normalize(source_name, {"rate": value}, pair)
            if source_name == "fixed":
                logger.info("Using fixed rate, %s = %s", pair, record.rate)
            return record
        return None


__all__ = ["RateResolution", "RateResolutionPipeline", "SourceFailure"]
