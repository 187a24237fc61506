"""API dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from caixa_rotas.core.settings import get_settings
from caixa_rotas.db.session import get_db_session
from caixa_rotas.repositories.audit_log_repository import AuditLogRepository
from caixa_rotas.repositories.closing_repository import ClosingRepository
from caixa_rotas.repositories.expense_repository import ExpenseRepository
from caixa_rotas.repositories.reading_repository import ReadingRepository
from caixa_rotas.repositories.shareholder_repository import ShareholderRepository
from caixa_rotas.services.audit_service import AuditService
from caixa_rotas.services.closing_service import ClosingService
from caixa_rotas.services.expense_service import ExpenseService
from caixa_rotas.services.financial_summary_service import FinancialSummaryService
from caixa_rotas.services.period_lock import PeriodLockGuard
from caixa_rotas.services.reading_service import ReadingService


def get_current_user_id(
    x_user_id: Annotated[str, Header(min_length=1, max_length=128)],
) -> str:
    """Return the acting user id forwarded by the authenticated front end."""

    return x_user_id.strip()


def build_financial_summary_service(session: Session) -> FinancialSummaryService:
    return FinancialSummaryService(
        reading_repository=ReadingRepository(session),
        expense_repository=ExpenseRepository(session),
        closing_repository=ClosingRepository(session),
    )


def build_closing_service(session: Session) -> ClosingService:
    """Wire the closing service; shared by the API and the CLI."""

    return ClosingService(
        closing_repository=ClosingRepository(session),
        shareholder_repository=ShareholderRepository(session),
        advance_ledger=ExpenseRepository(session),
        net_profit_source=build_financial_summary_service(session),
        audit_repository=AuditLogRepository(session),
        session=session,
    )


def get_closing_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> ClosingService:
    """Build closing service with per-request session."""

    return build_closing_service(session)


def get_financial_summary_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> FinancialSummaryService:
    """Build financial summary service with per-request session."""

    return build_financial_summary_service(session)


def get_shareholder_repository(
    session: Annotated[Session, Depends(get_db_session)],
) -> ShareholderRepository:
    """Build shareholder repository with per-request session."""

    return ShareholderRepository(session)


def get_reading_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> ReadingService:
    """Build reading service with per-request session."""

    return ReadingService(
        reading_repository=ReadingRepository(session),
        period_lock_guard=PeriodLockGuard(ClosingRepository(session)),
        audit_service=AuditService(
            audit_repository=AuditLogRepository(session),
            session=session,
        ),
        session=session,
        default_commission_percentage=get_settings().default_commission_percentage,
    )


def get_expense_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> ExpenseService:
    """Build expense service with per-request session."""

    return ExpenseService(
        expense_repository=ExpenseRepository(session),
        shareholder_repository=ShareholderRepository(session),
        period_lock_guard=PeriodLockGuard(ClosingRepository(session)),
        audit_service=AuditService(
            audit_repository=AuditLogRepository(session),
            session=session,
        ),
        session=session,
    )
