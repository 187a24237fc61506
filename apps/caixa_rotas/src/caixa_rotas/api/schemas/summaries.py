"""Schemas for the monthly financial summary response."""

from __future__ import annotations

from pydantic import BaseModel, Field

from caixa_rotas.api.schemas.common import MONEY_PATTERN, PeriodResponse
from caixa_rotas.api.schemas.expenses import ExpenseResponse
from caixa_rotas.domain.money import format_money
from caixa_rotas.services.financial_summary_service import FinancialSummary


class FinancialSummaryResponse(BaseModel):
    """Consolidated period values of a location."""

    location_id: str
    period: PeriodResponse
    is_closed: bool
    readings_count: int = Field(ge=0)
    gross_sales: str = Field(pattern=MONEY_PATTERN)
    commissions: str = Field(pattern=MONEY_PATTERN)
    machine_expenses: str = Field(pattern=MONEY_PATTERN)
    operational_expenses: str = Field(pattern=MONEY_PATTERN)
    total_expenses: str = Field(pattern=MONEY_PATTERN)
    net_profit: str = Field(pattern=MONEY_PATTERN)
    total_advances: str = Field(pattern=MONEY_PATTERN)
    advances_by_shareholder: dict[str, str]
    expenses: list[ExpenseResponse]
    advances: list[ExpenseResponse]

    @classmethod
    def from_summary(cls, summary: FinancialSummary) -> FinancialSummaryResponse:
        return cls(
            location_id=summary.location_id,
            period=PeriodResponse(year=summary.period.year, month=summary.period.month),
            is_closed=summary.is_closed,
            readings_count=summary.readings_count,
            gross_sales=format_money(summary.gross_sales),
            commissions=format_money(summary.commissions),
            machine_expenses=format_money(summary.machine_expenses),
            operational_expenses=format_money(summary.operational_expenses),
            total_expenses=format_money(summary.total_expenses),
            net_profit=format_money(summary.net_profit),
            total_advances=format_money(summary.total_advances),
            advances_by_shareholder={
                shareholder_id: format_money(amount)
                for shareholder_id, amount in summary.advances_by_shareholder.items()
            },
            expenses=[ExpenseResponse.from_model(item) for item in summary.expenses],
            advances=[ExpenseResponse.from_model(item) for item in summary.advances],
        )
