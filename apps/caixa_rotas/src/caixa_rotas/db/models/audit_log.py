"""Append-only audit trail ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from caixa_rotas.db.base import Base


class AuditAction(enum.StrEnum):
    """Actions recorded in the audit trail."""

    CREATE = "create"
    UPDATE = "update"
    SOFT_DELETE = "soft-delete"
    CLOSE_MONTH = "close-month"


class AuditLogEntry(Base):
    """One audit entry describing a mutating action."""

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_document", "collection", "document_id"),)

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    action: Mapped[AuditAction] = mapped_column(
        Enum(
            AuditAction,
            name="audit_action",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[str] = mapped_column(String(500), nullable=False)
