"""Business service for operational expenses and shareholder advances."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from caixa_rotas.db.models.audit_log import AuditAction
from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.domain.errors import (
    RecordNotFoundError,
    ValidationError,
    compose_error_message,
)
from caixa_rotas.domain.money import quantize_money
from caixa_rotas.services.reading_service import (
    AuditRecorderProtocol,
    PeriodLockGuardProtocol,
    SessionProtocol,
    require_user,
)

logger = logging.getLogger(__name__)

EXPENSES_COLLECTION = "expenses"


class ExpenseRepositoryProtocol(Protocol):
    def add(self, expense: Expense) -> Expense: ...
    def get_active(self, expense_id: UUID) -> Expense | None: ...


class ShareholderLookupProtocol(Protocol):
    def get(self, shareholder_id: str) -> Shareholder | None: ...


@dataclass(slots=True, frozen=True)
class CreateExpenseInput:
    """Input model for a general expense or an advance."""

    location_id: str
    expense_date: date
    amount: Decimal
    description: str
    expense_type: ExpenseType
    shareholder_id: str | None = None
    cost_center_id: str | None = None


@dataclass(slots=True, frozen=True)
class UpdateExpenseInput:
    """Partial update of an expense; ``None`` keeps the stored value."""

    expense_date: date | None = None
    amount: Decimal | None = None
    description: str | None = None
    cost_center_id: str | None = None


class ExpenseService:
    """Registers, corrects and removes expenses of open periods."""

    def __init__(
        self,
        *,
        expense_repository: ExpenseRepositoryProtocol,
        shareholder_repository: ShareholderLookupProtocol,
        period_lock_guard: PeriodLockGuardProtocol,
        audit_service: AuditRecorderProtocol,
        session: SessionProtocol,
    ) -> None:
        self._expense_repository = expense_repository
        self._shareholder_repository = shareholder_repository
        self._guard = period_lock_guard
        self._audit_service = audit_service
        self._session = session

    def create_expense(self, payload: CreateExpenseInput, *, user_id: str) -> Expense:
        require_user(user_id)
        amount = _validate_amount(payload.amount)
        description = payload.description.strip()
        if not description:
            raise ValidationError(
                message=compose_error_message(
                    cause="Description cannot be blank.",
                    action="Describe the expense.",
                )
            )
        shareholder_id = self._resolve_shareholder(payload)

        try:
            self._guard.check_period_open(payload.location_id, payload.expense_date)
            expense = self._expense_repository.add(
                Expense(
                    location_id=payload.location_id,
                    expense_date=payload.expense_date,
                    amount=amount,
                    description=description,
                    expense_type=payload.expense_type,
                    shareholder_id=shareholder_id,
                    cost_center_id=payload.cost_center_id,
                    created_by=user_id,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(expense)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "expense_created",
            extra={
                "expense_id": str(expense.id),
                "location_id": expense.location_id,
                "type": expense.expense_type.value,
                "amount": str(expense.amount),
            },
        )
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.CREATE,
            collection=EXPENSES_COLLECTION,
            document_id=str(expense.id),
            details=f"Expense {expense.expense_type.value} amount {amount}",
        )
        return expense

    def update_expense(
        self, expense_id: UUID, payload: UpdateExpenseInput, *, user_id: str
    ) -> Expense:
        require_user(user_id)
        expense = self._get_expense(expense_id)
        new_date = payload.expense_date or expense.expense_date
        amount = (
            _validate_amount(payload.amount)
            if payload.amount is not None
            else expense.amount
        )

        try:
            self._guard.check_period_open(expense.location_id, expense.expense_date)
            self._guard.check_period_open(expense.location_id, new_date)
            expense.expense_date = new_date
            expense.amount = amount
            if payload.description is not None and payload.description.strip():
                expense.description = payload.description.strip()
            if payload.cost_center_id is not None:
                expense.cost_center_id = payload.cost_center_id
            self._session.commit()
            self._session.refresh(expense)
        except Exception:
            self._session.rollback()
            raise

        logger.info("expense_updated", extra={"expense_id": str(expense.id)})
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.UPDATE,
            collection=EXPENSES_COLLECTION,
            document_id=str(expense.id),
            details=f"Expense updated amount {amount}",
        )
        return expense

    def soft_delete_expense(self, expense_id: UUID, *, user_id: str) -> None:
        require_user(user_id)
        expense = self._get_expense(expense_id)
        try:
            self._guard.check_period_open(expense.location_id, expense.expense_date)
            expense.is_active = False
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("expense_soft_deleted", extra={"expense_id": str(expense.id)})
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.SOFT_DELETE,
            collection=EXPENSES_COLLECTION,
            document_id=str(expense.id),
            details=f"Expense of {expense.expense_date.isoformat()} removed",
        )

    def _resolve_shareholder(self, payload: CreateExpenseInput) -> str | None:
        if payload.expense_type == ExpenseType.OPERATIONAL:
            if payload.shareholder_id:
                raise ValidationError(
                    message=compose_error_message(
                        cause="Operational expenses cannot reference a shareholder.",
                        action="Register it as an advance or drop shareholder_id.",
                    )
                )
            return None

        if not payload.shareholder_id:
            raise ValidationError(
                message=compose_error_message(
                    cause="Advance is missing the shareholder it was paid to.",
                    action="Provide shareholder_id.",
                )
            )
        shareholder = self._shareholder_repository.get(payload.shareholder_id)
        if (
            shareholder is None
            or not shareholder.is_active
            or shareholder.location_id != payload.location_id
        ):
            raise RecordNotFoundError(
                message=compose_error_message(
                    cause="Shareholder was not found for this location.",
                    action="Use an active shareholder of the expense location.",
                ),
                details={"shareholder_id": payload.shareholder_id},
            )
        return shareholder.id

    def _get_expense(self, expense_id: UUID) -> Expense:
        expense = self._expense_repository.get_active(expense_id)
        if expense is None:
            raise RecordNotFoundError(
                message=compose_error_message(
                    cause="Expense was not found or was already removed.",
                    action="Check the expense id and retry.",
                ),
                details={"expense_id": str(expense_id)},
            )
        return expense


def _validate_amount(amount: Decimal) -> Decimal:
    quantized = quantize_money(amount)
    if quantized <= 0:
        raise ValidationError(
            message=compose_error_message(
                cause="Amount must be greater than zero.",
                action="Provide a positive decimal amount with two digits.",
            )
        )
    return quantized
