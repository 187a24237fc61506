"""Meter reading persistence operations and period aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from caixa_rotas.db.models.reading import Reading
from caixa_rotas.domain.money import ZERO, quantize_money
from caixa_rotas.domain.value_objects import Period


@dataclass(frozen=True, slots=True)
class ReadingPeriodTotals:
    """Sums of active readings of a location in a period."""

    gross_sales: Decimal
    commissions: Decimal
    machine_expenses: Decimal
    readings_count: int


class ReadingRepository:
    """Repository for meter readings."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, reading: Reading) -> Reading:
        self._session.add(reading)
        self._session.flush()
        return reading

    def get_active(self, reading_id: UUID) -> Reading | None:
        statement = select(Reading).where(
            Reading.id == reading_id,
            Reading.is_active.is_(True),
        )
        return self._session.scalar(statement)

    def get_last_active_for_operator(self, operator_id: str) -> Reading | None:
        statement = (
            select(Reading)
            .where(
                Reading.operator_id == operator_id,
                Reading.is_active.is_(True),
            )
            .order_by(Reading.reading_date.desc(), Reading.created_at.desc())
            .limit(1)
        )
        return self._session.scalar(statement)

    def get_period_totals(
        self, *, location_id: str, period: Period
    ) -> ReadingPeriodTotals:
        statement = select(
            func.coalesce(func.sum(Reading.total_general), ZERO),
            func.coalesce(func.sum(Reading.commission_amount), ZERO),
            func.coalesce(func.sum(Reading.expense), ZERO),
            func.count(Reading.id),
        ).where(
            Reading.location_id == location_id,
            Reading.is_active.is_(True),
            Reading.reading_date >= period.first_day,
            Reading.reading_date <= period.last_day,
        )
        gross, commissions, expenses, count = self._session.execute(statement).one()
        return ReadingPeriodTotals(
            gross_sales=quantize_money(Decimal(gross)),
            commissions=quantize_money(Decimal(commissions)),
            machine_expenses=quantize_money(Decimal(expenses)),
            readings_count=int(count),
        )
