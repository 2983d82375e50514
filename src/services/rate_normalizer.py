from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from pydantic import ValidationError

from domain.rates import CurrencyPair, RateRecord

from .rate_sources import RateSourceError


class RateNormalizationError(RateSourceError):
    pass


@dataclass(frozen=True)
class FieldMapping:
    """Which payload field holds the rate and which holds the inverse rate.

    A side mapped to ``None`` is derived as the reciprocal of the other one.
    """

    rate_field: str | None
    inverse_field: str | None

    def __post_init__(self) -> None:
        if self.rate_field is None and self.inverse_field is None:
            raise ValueError("FieldMapping needs at least one source field")


NORMALIZATION_TABLE: dict[str, FieldMapping] = {
    "fixed": FieldMapping(rate_field="rate", inverse_field=None),
    "configured": FieldMapping(rate_field="rate", inverse_field=None),
    # OKX quotes both directions: askBaseSz is TRX received for 1 USDT, askPx the USDT price of 1 TRX.
    "okx": FieldMapping(rate_field="askBaseSz", inverse_field="askPx"),
    # Binance only prices TRX in USDT.
    "binance": FieldMapping(rate_field=None, inverse_field="price"),
}


def normalize(
    source_name: str,
    payload: Mapping[str, Any],
    pair: CurrencyPair,
    *,
    timestamp: datetime | None = None,
) -> RateRecord:
    try:
        mapping = NORMALIZATION_TABLE[source_name]
    except KeyError as exc:
        raise RateNormalizationError(f"No field mapping for source {source_name}", source=source_name) from exc

    rate = _read_positive(payload, mapping.rate_field, source_name) if mapping.rate_field else None
    inverse_rate = _read_positive(payload, mapping.inverse_field, source_name) if mapping.inverse_field else None

    try:
        rate, inverse_rate = _complete_directions(rate, inverse_rate, source_name)
        return RateRecord.for_pair(
            pair, rate=rate, inverse_rate=inverse_rate, source=source_name, timestamp=timestamp
        )
    except (ArithmeticError, ValidationError) as exc:
        raise RateNormalizationError(
            f"{source_name} payload does not yield a usable rate: {exc}", source=source_name, payload=payload
        ) from exc


def _complete_directions(
    rate: Decimal | None, inverse_rate: Decimal | None, source_name: str
) -> tuple[Decimal, Decimal]:
    if rate is not None and inverse_rate is not None:
        return rate, inverse_rate
    if rate is not None:
        return rate, Decimal(1) / rate
    if inverse_rate is not None:
        return Decimal(1) / inverse_rate, inverse_rate
    raise RateNormalizationError(f"{source_name} payload has no rate fields", source=source_name)


def _read_positive(payload: Mapping[str, Any], field: str, source_name: str) -> Decimal:
    raw = payload.get(field)
    if raw is None or isinstance(raw, bool):
        raise RateNormalizationError(f"{source_name} payload missing {field}", source=source_name, payload=payload)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise RateNormalizationError(
            f"{source_name} payload has non-numeric {field}: {raw!r}", source=source_name, payload=payload
        ) from exc
    if not value.is_finite() or value <= 0:
        raise RateNormalizationError(
            f"{source_name} payload has non-positive {field}: {raw!r}", source=source_name, payload=payload
        )
    return value


__all__ = ["NORMALIZATION_TABLE", "FieldMapping", "RateNormalizationError", "normalize"]
