"""Audit trail persistence operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from caixa_rotas.db.models.audit_log import AuditLogEntry


class AuditLogRepository:
    """Append-only repository for audit entries."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_for_document(
        self, *, collection: str, document_id: str
    ) -> list[AuditLogEntry]:
        statement = (
            select(AuditLogEntry)
            .where(
                AuditLogEntry.collection == collection,
                AuditLogEntry.document_id == document_id,
            )
            .order_by(AuditLogEntry.occurred_at.asc())
        )
        return list(self._session.scalars(statement).all())
