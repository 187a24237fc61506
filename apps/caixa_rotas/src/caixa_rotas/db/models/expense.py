"""General expense ORM model (operational expenses and advances)."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from caixa_rotas.db.base import Base


class ExpenseType(enum.StrEnum):
    """Supported expense types."""

    OPERATIONAL = "operational"
    ADVANCE = "advance"


class Expense(Base):
    """Expense booked against a location in a given date."""

    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        CheckConstraint(
            """
            (expense_type = 'operational' AND shareholder_id IS NULL)
            OR
            (expense_type = 'advance' AND shareholder_id IS NOT NULL)
            """,
            name="ck_expenses_advance_requires_shareholder",
        ),
        Index("ix_expenses_location_date", "location_id", "expense_date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    location_id: Mapped[str] = mapped_column(String(64), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(280), nullable=False)
    expense_type: Mapped[ExpenseType] = mapped_column(
        Enum(
            ExpenseType,
            name="expense_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    shareholder_id: Mapped[str | None] = mapped_column(
        ForeignKey("shareholders.id"),
        nullable=True,
    )
    cost_center_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )
