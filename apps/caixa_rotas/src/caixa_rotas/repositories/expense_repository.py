"""Expense persistence operations and the advance ledger queries."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.domain.money import ZERO, quantize_money
from caixa_rotas.domain.value_objects import Period


class ExpenseRepository:
    """Repository for general expenses and shareholder advances."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, expense: Expense) -> Expense:
        self._session.add(expense)
        self._session.flush()
        return expense

    def get_active(self, expense_id: UUID) -> Expense | None:
        statement = select(Expense).where(
            Expense.id == expense_id,
            Expense.is_active.is_(True),
        )
        return self._session.scalar(statement)

    def sum_advances_for_period(
        self,
        *,
        shareholder_id: str,
        location_id: str,
        period: Period,
    ) -> Decimal:
        """Return the total advanced to a shareholder during the period."""

        statement = select(func.coalesce(func.sum(Expense.amount), ZERO)).where(
            Expense.expense_type == ExpenseType.ADVANCE,
            Expense.is_active.is_(True),
            Expense.shareholder_id == shareholder_id,
            Expense.location_id == location_id,
            Expense.expense_date >= period.first_day,
            Expense.expense_date <= period.last_day,
        )
        return quantize_money(Decimal(self._session.scalar(statement) or ZERO))

    def get_advances_by_shareholder(
        self, *, location_id: str, period: Period
    ) -> dict[str, Decimal]:
        statement = (
            select(
                Expense.shareholder_id,
                func.coalesce(func.sum(Expense.amount), ZERO),
            )
            .where(
                Expense.expense_type == ExpenseType.ADVANCE,
                Expense.is_active.is_(True),
                Expense.location_id == location_id,
                Expense.expense_date >= period.first_day,
                Expense.expense_date <= period.last_day,
            )
            .group_by(Expense.shareholder_id)
        )
        rows = self._session.execute(statement).all()
        return {
            str(shareholder_id): quantize_money(Decimal(total))
            for shareholder_id, total in rows
        }

    def get_operational_total(self, *, location_id: str, period: Period) -> Decimal:
        statement = select(func.coalesce(func.sum(Expense.amount), ZERO)).where(
            Expense.expense_type == ExpenseType.OPERATIONAL,
            Expense.is_active.is_(True),
            Expense.location_id == location_id,
            Expense.expense_date >= period.first_day,
            Expense.expense_date <= period.last_day,
        )
        return quantize_money(Decimal(self._session.scalar(statement) or ZERO))

    def list_for_period(self, *, location_id: str, period: Period) -> list[Expense]:
        """Active expenses and advances of the period, newest first."""
        statement = (
            select(Expense)
            .where(
                Expense.is_active.is_(True),
                Expense.location_id == location_id,
                Expense.expense_date >= period.first_day,
                Expense.expense_date <= period.last_day,
            )
            .order_by(Expense.expense_date.desc(), Expense.created_at.desc())
        )
        return list(self._session.scalars(statement).all())
