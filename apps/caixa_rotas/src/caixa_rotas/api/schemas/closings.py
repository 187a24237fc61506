"""Schemas for monthly closing endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from caixa_rotas.api.schemas.common import (
    MONEY_PATTERN,
    NON_NEGATIVE_MONEY_PATTERN,
    PERCENTAGE_PATTERN,
    PeriodResponse,
)
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.domain.distribution import SettlementDetail
from caixa_rotas.domain.money import format_money
from caixa_rotas.services.closing_service import (
    ClosingOutcome,
    CloseMonthCommand,
    DistributionPreview,
    ShareholderSnapshot,
)


class ShareholderSnapshotRequest(BaseModel):
    """Shareholder values the caller based the closing on."""

    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    percentage: str = Field(pattern=PERCENTAGE_PATTERN)
    participates_in_loss: bool
    accumulated_balance: str = Field(pattern=MONEY_PATTERN)

    def to_snapshot(self) -> ShareholderSnapshot:
        return ShareholderSnapshot(
            shareholder_id=self.id,
            name=self.name,
            percentage=Decimal(self.percentage),
            participates_in_loss=self.participates_in_loss,
            accumulated_balance=Decimal(self.accumulated_balance),
        )


class CreateClosingRequest(BaseModel):
    """Payload for closing a month of a location."""

    year: int = Field(ge=1000, le=9999)
    month: int = Field(ge=1, le=12)
    retained_amount: str = Field(pattern=NON_NEGATIVE_MONEY_PATTERN)
    shareholders: list[ShareholderSnapshotRequest]
    net_profit: str | None = Field(default=None, pattern=MONEY_PATTERN)

    def to_command(self, *, location_id: str, closed_by: str) -> CloseMonthCommand:
        return CloseMonthCommand(
            location_id=location_id,
            year=self.year,
            month=self.month,
            retained_amount=Decimal(self.retained_amount),
            closed_by=closed_by,
            shareholders=[item.to_snapshot() for item in self.shareholders],
            net_profit=(
                Decimal(self.net_profit) if self.net_profit is not None else None
            ),
        )


class PreviewClosingRequest(BaseModel):
    """Payload for a distribution preview."""

    year: int = Field(ge=1000, le=9999)
    month: int = Field(ge=1, le=12)
    retained_amount: str = Field(pattern=NON_NEGATIVE_MONEY_PATTERN)
    net_profit: str | None = Field(default=None, pattern=MONEY_PATTERN)


class SettlementResponse(BaseModel):
    """One shareholder line of a closing."""

    shareholder_id: str
    shareholder_name: str
    period_share: str = Field(pattern=MONEY_PATTERN)
    prior_balance_carried: str = Field(pattern=MONEY_PATTERN)
    advances_deducted: str = Field(pattern=MONEY_PATTERN)
    final_amount: str = Field(pattern=MONEY_PATTERN)
    new_accumulated_balance: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_values(
        cls,
        *,
        shareholder_id: str,
        shareholder_name: str,
        period_share: Decimal,
        prior_balance_carried: Decimal,
        advances_deducted: Decimal,
        final_amount: Decimal,
        new_accumulated_balance: Decimal,
    ) -> SettlementResponse:
        return cls(
            shareholder_id=shareholder_id,
            shareholder_name=shareholder_name,
            period_share=format_money(period_share),
            prior_balance_carried=format_money(prior_balance_carried),
            advances_deducted=format_money(advances_deducted),
            final_amount=format_money(final_amount),
            new_accumulated_balance=format_money(new_accumulated_balance),
        )

    @classmethod
    def from_detail(
        cls, detail: SettlementDetail | SettlementDetailRow
    ) -> SettlementResponse:
        return cls.from_values(
            shareholder_id=detail.shareholder_id,
            shareholder_name=detail.shareholder_name,
            period_share=detail.period_share,
            prior_balance_carried=detail.prior_balance_carried,
            advances_deducted=detail.advances_deducted,
            final_amount=detail.final_amount,
            new_accumulated_balance=detail.new_accumulated_balance,
        )


class ClosingResponse(BaseModel):
    """Closing record with its settlement lines."""

    closing_record_id: UUID
    location_id: str
    period: PeriodResponse
    net_profit: str = Field(pattern=MONEY_PATTERN)
    retained_amount: str = Field(pattern=MONEY_PATTERN)
    distributed_amount: str = Field(pattern=MONEY_PATTERN)
    closed_by: str
    closed_at: datetime
    settlements: list[SettlementResponse]

    @classmethod
    def from_outcome(cls, outcome: ClosingOutcome) -> ClosingResponse:
        return cls(
            closing_record_id=outcome.closing_id,
            location_id=outcome.location_id,
            period=PeriodResponse(year=outcome.period.year, month=outcome.period.month),
            net_profit=format_money(outcome.net_profit),
            retained_amount=format_money(outcome.retained_amount),
            distributed_amount=format_money(outcome.distributed_amount),
            closed_by=outcome.closed_by,
            closed_at=outcome.closed_at,
            settlements=[
                SettlementResponse.from_detail(item) for item in outcome.settlements
            ],
        )

    @classmethod
    def from_model(cls, closing: MonthlyClosing) -> ClosingResponse:
        return cls(
            closing_record_id=closing.id,
            location_id=closing.location_id,
            period=PeriodResponse(year=closing.period_year, month=closing.period_month),
            net_profit=format_money(closing.total_net_profit),
            retained_amount=format_money(closing.retained_amount),
            distributed_amount=format_money(closing.distributed_amount),
            closed_by=closing.closed_by,
            closed_at=closing.closed_at,
            settlements=[
                SettlementResponse.from_detail(item) for item in closing.settlements
            ],
        )


class DistributionPreviewResponse(BaseModel):
    """Distribution simulated with the current ledger."""

    location_id: str
    period: PeriodResponse
    is_closed: bool
    net_profit: str = Field(pattern=MONEY_PATTERN)
    retained_amount: str = Field(pattern=MONEY_PATTERN)
    distributable_base: str = Field(pattern=MONEY_PATTERN)
    undistributed_amount: str = Field(pattern=MONEY_PATTERN)
    settlements: list[SettlementResponse]

    @classmethod
    def from_preview(cls, preview: DistributionPreview) -> DistributionPreviewResponse:
        result = preview.result
        return cls(
            location_id=preview.location_id,
            period=PeriodResponse(year=preview.period.year, month=preview.period.month),
            is_closed=preview.is_closed,
            net_profit=format_money(result.net_profit),
            retained_amount=format_money(result.retained_amount),
            distributable_base=format_money(result.distributable_base),
            undistributed_amount=format_money(result.undistributed_amount),
            settlements=[
                SettlementResponse.from_detail(item)
                for item in result.settlements
                if item.is_presentable
            ],
        )
