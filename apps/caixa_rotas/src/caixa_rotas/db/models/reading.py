"""Meter reading ORM model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Index,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from caixa_rotas.db.base import Base


class Reading(Base):
    """Meter reading of one operator (machine) with its cash result."""

    __tablename__ = "readings"
    __table_args__ = (
        Index("ix_readings_location_date", "location_id", "reading_date"),
        Index("ix_readings_operator_date", "operator_id", "reading_date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    location_id: Mapped[str] = mapped_column(String(64), nullable=False)
    route_id: Mapped[str] = mapped_column(String(64), nullable=False)
    point_id: Mapped[str] = mapped_column(String(64), nullable=False)
    operator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reading_date: Mapped[date] = mapped_column(Date, nullable=False)

    previous_entries: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    current_entries: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_entries: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    previous_exits: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    current_exits: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_exits: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_general: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    commission_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False
    )
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    expense: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    total_final: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    description: Mapped[str | None] = mapped_column(String(280), nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
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
