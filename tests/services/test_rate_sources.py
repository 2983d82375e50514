from __future__ import annotations

import pytest
import requests

from services.rate_sources import DEFAULT_USER_AGENT, RateSourceError, build_http_session


def test_session_routes_both_schemes_through_proxy() -> None:
    session = build_http_session("http://127.0.0.1:8080")

    assert session.proxies == {"http": "http://127.0.0.1:8080", "https": "http://127.0.0.1:8080"}


@pytest.mark.parametrize("proxy", [None, ""])
def test_session_without_proxy_has_no_proxies(proxy: str | None) -> None:
    session = build_http_session(proxy)

    assert session.proxies == {}


def test_session_sends_browser_user_agent() -> None:
    session = build_http_session()

    assert session.headers["User-Agent"] == DEFAULT_USER_AGENT
    assert DEFAULT_USER_AGENT.startswith("Mozilla/5.0")


def test_session_accepts_custom_user_agent() -> None:
    session = build_http_session(user_agent="rate-updater/1.0")

    assert session.headers["User-Agent"] == "rate-updater/1.0"


def test_error_detail_joins_cause_and_message() -> None:
    try:
        try:
            raise requests.ConnectTimeout("connect timed out")
        except requests.RequestException as exc:
            raise RateSourceError("OKX request failed", source="okx") from exc
    except RateSourceError as error:
        assert error.detail == "connect timed out; OKX request failed"


def test_error_detail_without_cause_is_message() -> None:
    assert RateSourceError("Quote expired", source="okx", status_code=200).detail == "Quote expired"
