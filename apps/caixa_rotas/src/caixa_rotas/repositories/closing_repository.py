"""Monthly closing persistence operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.domain.value_objects import Period


class ClosingRepository:
    """Repository for closing records, the lock of each period."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def exists_for_period(self, *, location_id: str, period: Period) -> bool:
        statement = select(MonthlyClosing.id).where(
            MonthlyClosing.location_id == location_id,
            MonthlyClosing.period_year == period.year,
            MonthlyClosing.period_month == period.month,
        )
        return self._session.scalar(statement) is not None

    def get_by_period(
        self, *, location_id: str, period: Period
    ) -> MonthlyClosing | None:
        statement = select(MonthlyClosing).where(
            MonthlyClosing.location_id == location_id,
            MonthlyClosing.period_year == period.year,
            MonthlyClosing.period_month == period.month,
        )
        return self._session.scalar(statement)

    def add(
        self,
        closing: MonthlyClosing,
        settlements: list[SettlementDetailRow],
    ) -> MonthlyClosing:
        """Insert the closing with its settlement rows and flush.

        A concurrent closing of the same period fails here with
        ``IntegrityError`` on ``uq_monthly_closings_location_period``.
        """
        closing.settlements = settlements
        self._session.add(closing)
        self._session.flush()
        return closing
