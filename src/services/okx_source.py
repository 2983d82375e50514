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

OKX_SUCCESS_CODE = 0


class OkxAPIError(RateSourceError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message, source="okx", status_code=status_code, payload=payload)


@dataclass(frozen=True)
class OkxQuote:
    code: int
    msg: str
    data: dict[str, Any] | None

    @property
    def ok(self) -> bool:
        return self.code == OKX_SUCCESS_CODE and isinstance(self.data, dict)


class _OkxClient:
    def __init__(
        self,
        base_url: str = "https://www.okx.com",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or build_http_session()

    def get_quick_exchange_quote(
        self,
        *,
        side: str,
        base_ccy: str,
        quote_ccy: str,
        rfq_sz: int | str,
        rfq_sz_ccy: str,
    ) -> OkxQuote:
        if side not in ("buy", "sell"):
            raise ValueError("side must be 'buy' or 'sell'")

        body = {
            "side": side,
            "baseCcy": base_ccy,
            "quoteCcy": quote_ccy,
            "rfqSz": rfq_sz,
            "rfqSzCcy": rfq_sz_ccy,
        }
        payload = self._request("POST", "/v2/asset/quick/exchange/quote", json=body)

        code_raw = payload.get("code")
        try:
            code = int(code_raw)
        except (TypeError, ValueError) as exc:
            raise OkxAPIError("OKX quote response has no numeric code", payload=payload) from exc

        message = payload.get("msg") or payload.get("error_message") or payload.get("detailMsg") or ""
        data = payload.get("data")
        # The quote endpoint sometimes wraps the quote in a single element list
        if isinstance(data, list):
            data = data[0] if data else None
        return OkxQuote(code=code, msg=str(message), data=data if isinstance(data, dict) else None)

    def _request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, json=json, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            message, payload_err = self._extract_error(resp)
            raise OkxAPIError(message, status_code=getattr(resp, "status_code", None), payload=payload_err) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise OkxAPIError("OKX request failed", status_code=status_code) from exc

        try:
            payload: dict[str, Any] = response.json()
        except ValueError as exc:
            raise OkxAPIError("OKX returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload, dict):
            raise OkxAPIError("OKX returned unexpected payload type", payload=payload)

        return payload

    @staticmethod
    def _extract_error(response: Response | None) -> tuple[str, Any | None]:
        message = "OKX request failed"
        payload: Any | None = None
        if response is None:
            return message, payload

        try:
            payload = response.json()
            if isinstance(payload, dict):
                message = payload.get("msg") or payload.get("error_message") or message
        except ValueError:
            payload = response.text
        return message, payload


class OkxSource(RateSource):
    """Rate from the OKX quick exchange quote for buying one base unit."""

    def __init__(
        self,
        *,
        client: _OkxClient | None = None,
        source_name: str = "okx",
    ) -> None:
        self.client = client or _OkxClient()
        self.source_name = source_name

    def fetch_rate(self, pair: CurrencyPair) -> RateRecord:
        quote = self.client.get_quick_exchange_quote(
            side="buy",
            base_ccy=str(pair.quote),
            quote_ccy=str(pair.base),
            rfq_sz=1,
            rfq_sz_ccy=str(pair.base),
        )
        if not quote.ok or quote.data is None:
            message = quote.msg or f"OKX quote returned code {quote.code}"
            raise OkxAPIError(message, payload=quote.data)

        record = normalize("okx", quote.data, pair)
        logger.info("OKX rate, %s = %s", pair, record.rate)
        return record


__all__ = ["OKX_SUCCESS_CODE", "OkxAPIError", "OkxQuote", "OkxSource"]
