"""Monthly closing ORM model, the lock record of a period."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caixa_rotas.db.base import Base
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow


class MonthlyClosing(Base):
    """Immutable closing of one location for one calendar month."""

    __tablename__ = "monthly_closings"
    __table_args__ = (
        CheckConstraint(
            "period_month >= 1 AND period_month <= 12",
            name="ck_monthly_closings_month_range",
        ),
        CheckConstraint(
            "retained_amount >= 0",
            name="ck_monthly_closings_retained_non_negative",
        ),
        CheckConstraint(
            "retained_amount = 0 OR retained_amount <= total_net_profit",
            name="ck_monthly_closings_retained_within_profit",
        ),
        UniqueConstraint(
            "location_id",
            "period_year",
            "period_month",
            name="uq_monthly_closings_location_period",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    location_id: Mapped[str] = mapped_column(String(64), nullable=False)
    period_year: Mapped[int] = mapped_column(Integer, nullable=False)
    period_month: Mapped[int] = mapped_column(Integer, nullable=False)
    total_net_profit: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    retained_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    distributed_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False
    )
    closed_by: Mapped[str] = mapped_column(String(128), nullable=False)
    closed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    settlements: Mapped[list[SettlementDetailRow]] = relationship(
        "SettlementDetailRow",
        order_by="SettlementDetailRow.display_order",
        lazy="selectin",
    )
