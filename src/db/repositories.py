from __future__ import annotations

from datetime import timezone

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db import models
from domain.rates import Currency, RateRecord


class RateRecordRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, record: RateRecord) -> RateRecord:
        values = {
            "id": record.id,
            "base_currency": record.base_currency.value,
            "quote_currency": record.quote_currency.value,
            "rate": record.rate,
            "inverse_rate": record.inverse_rate,
            "last_update_time": record.last_update_time,
            "source": record.source,
        }
        stmt = sqlite_insert(models.TokenRateOrm).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[models.TokenRateOrm.id],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )
        self._session.execute(stmt)
        self._session.commit()
        return record

    def get(self, record_id: str) -> RateRecord | None:
        orm_rate = self._session.get(models.TokenRateOrm, record_id, populate_existing=True)
        if orm_rate is None:
            return None
        return self._to_domain(orm_rate)

    def list(self) -> list[RateRecord]:
        stmt = select(models.TokenRateOrm).order_by(models.TokenRateOrm.id)
        return [self._to_domain(row) for row in self._session.scalars(stmt).all()]

    @staticmethod
    def _to_domain(orm_rate: models.TokenRateOrm) -> RateRecord:
        last_update_time = orm_rate.last_update_time
        if last_update_time.tzinfo is None:
            last_update_time = last_update_time.replace(tzinfo=timezone.utc)

        return RateRecord(
            id=orm_rate.id,
            base_currency=Currency(orm_rate.base_currency),
            quote_currency=Currency(orm_rate.quote_currency),
            rate=orm_rate.rate,
            inverse_rate=orm_rate.inverse_rate,
            last_update_time=last_update_time,
            source=orm_rate.source,
        )
