from __future__ import annotations

from typing import Any, Protocol

import requests

from domain.rates import CurrencyPair, RateRecord

DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/104.0.0.0 Safari/537.36"
)


class RateSourceError(RuntimeError):
    """Any reason a source could not produce a rate: transport, protocol or payload."""

    def __init__(
        self,
        message: str,
        *,
        source: str,
        status_code: int | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code
        self.payload = payload

    @property
    def detail(self) -> str:
        cause = self.__cause__
        if cause is None:
            return str(self)
        return f"{cause}; {self}"


class RateSource(Protocol):
    source_name: str

    def fetch_rate(self, pair: CurrencyPair) -> RateRecord: ...


def build_http_session(proxy: str | None = None, *, user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    if proxy:
        session.proxies.update({"http": proxy, "https": proxy})
    return session


__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "RateSource",
    "RateSourceError",
    "build_http_session",
]
