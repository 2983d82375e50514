from __future__ import annotations

from decimal import Decimal
from functools import cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.rates import CurrencyPair, RateOverrides

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DB_FILE = PROJECT_ROOT / "artifacts" / "token_rates.db"


class AppSettings(BaseSettings):
    web_proxy: str | None = Field(default=None, validation_alias=AliasChoices("web_proxy", "WebProxy"))
    trx_rate: Decimal = Field(default=Decimal(0), validation_alias=AliasChoices("trx_rate", "TrxRate"))
    fixed_rate: Decimal = Decimal(0)

    rate_pair: str = "USDT_TRX"
    db_file: Path = DB_FILE
    update_interval_seconds: float = 60.0
    request_timeout: float = 15.0
    okx_base_url: str = "https://www.okx.com"
    binance_base_url: str = "https://api.binance.com"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    def pair(self) -> CurrencyPair:
        return CurrencyPair.parse(self.rate_pair)

    def rate_overrides(self) -> RateOverrides:
        return RateOverrides(fixed_rate=self.fixed_rate, configured_rate=self.trx_rate)


@cache
def config() -> AppSettings:
    return AppSettings()
