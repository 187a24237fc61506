"""Best-effort audit trail for mutating operations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class AuditLogRepositoryProtocol(Protocol):
    """Audit repository contract."""

    def add(self, entry: AuditLogEntry) -> AuditLogEntry: ...


def build_audit_entry(
    *,
    occurred_at: datetime,
    user_id: str,
    action: AuditAction,
    collection: str,
    document_id: str,
    details: str,
) -> AuditLogEntry:
    return AuditLogEntry(
        occurred_at=occurred_at,
        user_id=user_id,
        action=action,
        collection=collection,
        document_id=document_id,
        details=details[:500],
    )


class AuditService:
    """Appends audit entries after the primary write has been committed.

    A failure here is logged and never reaches the caller: the audited
    operation already succeeded.
    """

    def __init__(
        self,
        *,
        audit_repository: AuditLogRepositoryProtocol,
        session: SessionProtocol,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._audit_repository = audit_repository
        self._session = session
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def record(
        self,
        *,
        user_id: str,
        action: AuditAction,
        collection: str,
        document_id: str,
        details: str,
    ) -> None:
        entry = build_audit_entry(
            occurred_at=self._now_provider(),
            user_id=user_id,
            action=action,
            collection=collection,
            document_id=document_id,
            details=details,
        )
        try:
            self._audit_repository.add(entry)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception(
                "audit_log_write_failed",
                extra={
                    "action": action.value,
                    "collection": collection,
                    "document_id": document_id,
                },
            )
