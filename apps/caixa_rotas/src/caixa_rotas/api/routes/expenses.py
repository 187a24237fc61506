"""Expense and advance routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from caixa_rotas.api.dependencies import get_current_user_id, get_expense_service
from caixa_rotas.api.schemas.expenses import (
    CreateExpenseRequest,
    ExpenseResponse,
    UpdateExpenseRequest,
)
from caixa_rotas.services.expense_service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Payload invalido"},
        404: {"description": "Socio nao encontrado"},
        409: {"description": "Periodo ja fechado"},
    },
)
def create_expense(
    payload: CreateExpenseRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ExpenseService, Depends(get_expense_service)],
) -> ExpenseResponse:
    """Register an operational expense or a shareholder advance."""

    expense = service.create_expense(payload.to_input(), user_id=user_id)
    return ExpenseResponse.from_model(expense)


@router.patch(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={
        400: {"description": "Payload invalido"},
        404: {"description": "Despesa nao encontrada"},
        409: {"description": "Periodo ja fechado"},
    },
)
def update_expense(
    expense_id: UUID,
    payload: UpdateExpenseRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ExpenseService, Depends(get_expense_service)],
) -> ExpenseResponse:
    """Edit an expense of an open period."""

    expense = service.update_expense(expense_id, payload.to_input(), user_id=user_id)
    return ExpenseResponse.from_model(expense)


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Despesa nao encontrada"},
        409: {"description": "Periodo ja fechado"},
    },
)
def delete_expense(
    expense_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ExpenseService, Depends(get_expense_service)],
) -> Response:
    """Soft delete an expense of an open period."""

    service.soft_delete_expense(expense_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
