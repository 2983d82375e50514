from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from db.repositories import RateRecordRepository
from domain.rates import Currency, CurrencyPair
from tests.helpers.rate_stubs import make_record


@pytest.fixture()
def repo(test_session: Session) -> RateRecordRepository:
    return RateRecordRepository(test_session)


def test_upsert_inserts_missing_record(repo: RateRecordRepository) -> None:
    record = make_record("4.0799", "0.2451", source="okx")

    repo.upsert(record)

    fetched = repo.get("USDT_TRX")
    assert fetched == record
    assert fetched is not None
    assert fetched.last_update_time.tzinfo is not None


def test_upsert_overwrites_existing_record(repo: RateRecordRepository) -> None:
    repo.upsert(make_record("4.0799", "0.2451", source="okx"))
    later = datetime(2025, 1, 1, 12, 1, tzinfo=timezone.utc)
    replacement = make_record("7.142857142857142857142857143", "0.14", source="binance", timestamp=later)

    repo.upsert(replacement)

    records = repo.list()
    assert records == [replacement]
    assert records[0].rate == Decimal("7.142857142857142857142857143")


def test_upsert_is_idempotent(repo: RateRecordRepository) -> None:
    record = make_record("7")

    repo.upsert(record)
    repo.upsert(record)

    assert repo.list() == [record]


def test_records_are_keyed_per_pair(repo: RateRecordRepository) -> None:
    usdt_trx = make_record("4")
    usdc_trx = make_record("4.1", pair=CurrencyPair(Currency.USDC, Currency.TRX))

    repo.upsert(usdt_trx)
    repo.upsert(usdc_trx)

    assert [record.id for record in repo.list()] == ["USDC_TRX", "USDT_TRX"]


def test_get_missing_record_returns_none(repo: RateRecordRepository) -> None:
    assert repo.get("USDT_TRX") is None
