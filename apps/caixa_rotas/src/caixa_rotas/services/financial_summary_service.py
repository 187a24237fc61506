"""Monthly financial summary of a location (reading aggregator)."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.domain.money import ZERO, quantize_money
from caixa_rotas.domain.value_objects import Period
from caixa_rotas.repositories.reading_repository import ReadingPeriodTotals


class ReadingTotalsProtocol(Protocol):
    def get_period_totals(
        self, *, location_id: str, period: Period
    ) -> ReadingPeriodTotals: ...


class ExpenseTotalsProtocol(Protocol):
    def get_operational_total(
        self, *, location_id: str, period: Period
    ) -> Decimal: ...

    def get_advances_by_shareholder(
        self, *, location_id: str, period: Period
    ) -> dict[str, Decimal]: ...

    def list_for_period(self, *, location_id: str, period: Period) -> list[Expense]: ...


class ClosingLookupProtocol(Protocol):
    def exists_for_period(self, *, location_id: str, period: Period) -> bool: ...


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    """Consolidated period values of one location."""

    location_id: str
    period: Period
    gross_sales: Decimal
    commissions: Decimal
    machine_expenses: Decimal
    operational_expenses: Decimal
    net_profit: Decimal
    total_advances: Decimal
    advances_by_shareholder: dict[str, Decimal]
    readings_count: int
    is_closed: bool
    expenses: list[Expense] = field(default_factory=list)
    advances: list[Expense] = field(default_factory=list)

    @property
    def total_expenses(self) -> Decimal:
        return self.machine_expenses + self.operational_expenses


class FinancialSummaryService:
    """Aggregates readings and expenses into period totals.

    Net profit is the machine result minus point commissions, expenses paid
    at the points and operational expenses. Advances are not expenses: they
    are settled against each shareholder at closing.
    """

    def __init__(
        self,
        *,
        reading_repository: ReadingTotalsProtocol,
        expense_repository: ExpenseTotalsProtocol,
        closing_repository: ClosingLookupProtocol,
    ) -> None:
        self._reading_repository = reading_repository
        self._expense_repository = expense_repository
        self._closing_repository = closing_repository

    def get_summary(self, *, location_id: str, year: int, month: int) -> FinancialSummary:
        period = Period(year=year, month=month)
        readings = self._reading_repository.get_period_totals(
            location_id=location_id, period=period
        )
        operational = self._expense_repository.get_operational_total(
            location_id=location_id, period=period
        )
        advances = self._expense_repository.get_advances_by_shareholder(
            location_id=location_id, period=period
        )
        items = self._expense_repository.list_for_period(
            location_id=location_id, period=period
        )
        net_profit = quantize_money(
            readings.gross_sales
            - readings.commissions
            - readings.machine_expenses
            - operational
        )
        return FinancialSummary(
            location_id=location_id,
            period=period,
            gross_sales=readings.gross_sales,
            commissions=readings.commissions,
            machine_expenses=readings.machine_expenses,
            operational_expenses=operational,
            net_profit=net_profit,
            total_advances=sum(advances.values(), ZERO),
            advances_by_shareholder=advances,
            readings_count=readings.readings_count,
            expenses=[
                item for item in items if item.expense_type == ExpenseType.OPERATIONAL
            ],
            advances=[
                item for item in items if item.expense_type == ExpenseType.ADVANCE
            ],
            is_closed=self._closing_repository.exists_for_period(
                location_id=location_id, period=period
            ),
        )

    def fetch_period_net_profit(self, *, location_id: str, period: Period) -> Decimal:
        return self.get_summary(
            location_id=location_id, year=period.year, month=period.month
        ).net_profit
