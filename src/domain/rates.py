from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class Currency(StrEnum):
    USDT = "USDT"
    USDC = "USDC"
    TRX = "TRX"
    BTC = "BTC"
    ETH = "ETH"


@dataclass(frozen=True)
class CurrencyPair:
    """Directed pair: ``rate`` converts one ``base`` unit into ``quote`` units."""

    base: Currency
    quote: Currency

    @property
    def id(self) -> str:
        return f"{self.base}_{self.quote}"

    @property
    def ticker_symbol(self) -> str:
        # Exchanges list TRX priced in USDT as TRXUSDT
        return f"{self.quote}{self.base}"

    @classmethod
    def parse(cls, raw: str) -> CurrencyPair:
        parts = raw.strip().upper().split("_")
        if len(parts) != 2 or not all(parts):
            msg = f"Currency pair must look like BASE_QUOTE, got {raw!r}"
            raise ValueError(msg)
        base, quote = parts
        return cls(base=Currency(base), quote=Currency(quote))

    def __str__(self) -> str:
        return f"{self.base} -> {self.quote}"


class RateRecord(BaseModel):
    """Latest known conversion factor for a pair.

    ``rate`` is quote units per one base unit, ``inverse_rate`` the opposite
    direction. Both must be positive.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    base_currency: Currency
    quote_currency: Currency
    rate: Decimal
    inverse_rate: Decimal
    last_update_time: datetime
    source: str

    @model_validator(mode="after")
    def _validate_fields(self) -> RateRecord:
        if self.rate <= 0:
            raise ValueError("RateRecord.rate must be positive")
        if self.inverse_rate <= 0:
            raise ValueError("RateRecord.inverse_rate must be positive")
        expected_id = CurrencyPair(self.base_currency, self.quote_currency).id
        if self.id != expected_id:
            raise ValueError(f"RateRecord.id must be {expected_id}, got {self.id}")
        return self

    @property
    def pair(self) -> CurrencyPair:
        return CurrencyPair(self.base_currency, self.quote_currency)

    @classmethod
    def for_pair(
        cls,
        pair: CurrencyPair,
        *,
        rate: Decimal,
        inverse_rate: Decimal,
        source: str,
        timestamp: datetime | None = None,
    ) -> RateRecord:
        return cls(
            id=pair.id,
            base_currency=pair.base,
            quote_currency=pair.quote,
            rate=rate,
            inverse_rate=inverse_rate,
            last_update_time=timestamp or datetime.now(timezone.utc),
            source=source,
        )


@dataclass(frozen=True)
class RateOverrides:
    """Operator supplied rates checked before any provider is queried.

    A value of ``None`` or anything not positive means the override is unset.
    """

    fixed_rate: Decimal | None = None
    configured_rate: Decimal | None = None

    @staticmethod
    def is_active(value: Decimal | None) -> bool:
        return value is not None and value > 0


USDT_TRX = CurrencyPair(Currency.USDT, Currency.TRX)


__all__ = ["USDT_TRX", "Currency", "CurrencyPair", "RateOverrides", "RateRecord"]
