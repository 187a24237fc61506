"""Per-shareholder settlement rows embedded in a monthly closing."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from caixa_rotas.db.base import Base


class SettlementDetailRow(Base):
    """Breakdown of one shareholder's result for one closing."""

    __tablename__ = "settlement_details"
    __table_args__ = (
        UniqueConstraint(
            "closing_id",
            "shareholder_id",
            name="uq_settlement_details_closing_shareholder",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    closing_id: Mapped[UUID] = mapped_column(
        ForeignKey("monthly_closings.id"), nullable=False
    )
    shareholder_id: Mapped[str] = mapped_column(
        ForeignKey("shareholders.id"), nullable=False
    )
    shareholder_name: Mapped[str] = mapped_column(String(120), nullable=False)
    period_share: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    prior_balance_carried: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False
    )
    advances_deducted: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    final_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    new_accumulated_balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False)
