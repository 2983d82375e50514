from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from requests import Response

from domain.rates import CurrencyPair, RateRecord

from .rate_normalizer import normalize
from .rate_sources import DEFAULT_REQUEST_TIMEOUT, RateSource, RateSourceError, build_http_session

logger = logging.getLogger(__name__)


class BinanceAPIError(RateSourceError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message, source="binance", status_code=status_code, payload=payload)


@dataclass(frozen=True)
class BinanceTicker:
    symbol: str
    price: str


class _BinanceClient:
    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or build_http_session()

    def get_ticker_price(self, *, symbol: str) -> BinanceTicker:
        if not symbol:
            raise ValueError("symbol must be provided")

        payload = self._request("GET", "/api/v3/ticker/price", params={"symbol": symbol})
        price = payload.get("price")
        if price is None:
            raise BinanceAPIError("Binance ticker payload missing price", payload=payload)
        return BinanceTicker(symbol=str(payload.get("symbol", symbol)), price=str(price))

    def _request(self, method: str, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            message, payload_err = self._extract_error(resp)
            raise BinanceAPIError(
                message, status_code=getattr(resp, "status_code", None), payload=payload_err
            ) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise BinanceAPIError("Binance request failed", status_code=status_code) from exc

        try:
            payload: dict[str, Any] = response.json()
        except ValueError as exc:
            raise BinanceAPIError("Binance returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload, dict):
            raise BinanceAPIError("Binance returned unexpected payload type", payload=payload)

        return payload

    @staticmethod
    def _extract_error(response: Response | None) -> tuple[str, Any | None]:
        message = "Binance request failed"
        payload: Any | None = None
        if response is None:
            return message, payload

        try:
            payload = response.json()
            if isinstance(payload, dict) and payload.get("msg"):
                message = payload["msg"]
        except ValueError:
            payload = response.text
        return message, payload


class BinanceSource(RateSource):
    def __init__(
        self,
        *,
        client: _BinanceClient | None = None,
        source_name: str = "binance",
    ) -> None:
        self.client = client or _BinanceClient()
        self.source_name = source_name

    def fetch_rate(self, pair: CurrencyPair) -> RateRecord:
        ticker = self.client.get_ticker_price(symbol=pair.ticker_symbol)
        record = normalize("binance", {"price": ticker.price}, pair)
        logger.info("Binance rate, %s = %s", pair, record.rate)
        return record


__all__ = ["BinanceAPIError", "BinanceSource", "BinanceTicker"]
