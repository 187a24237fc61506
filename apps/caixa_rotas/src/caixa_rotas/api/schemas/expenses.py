"""Schemas for expense endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from caixa_rotas.api.schemas.common import MONEY_PATTERN, NON_NEGATIVE_MONEY_PATTERN
from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.domain.money import format_money
from caixa_rotas.services.expense_service import CreateExpenseInput, UpdateExpenseInput

ExpenseKind = Literal["operational", "advance"]


class CreateExpenseRequest(BaseModel):
    """Payload for registering an operational expense or an advance."""

    location_id: str = Field(min_length=1, max_length=64)
    expense_date: date
    type: ExpenseKind
    amount: str = Field(pattern=NON_NEGATIVE_MONEY_PATTERN)
    description: str = Field(min_length=1, max_length=280)
    shareholder_id: str | None = Field(default=None, max_length=64)
    cost_center_id: str | None = Field(default=None, max_length=64)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Description cannot be blank.")
        return trimmed

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: str) -> str:
        if Decimal(value) <= Decimal("0"):
            raise ValueError("Amount must be greater than zero.")
        return value

    @model_validator(mode="after")
    def validate_shareholder_reference(self) -> CreateExpenseRequest:
        if self.type == "advance" and not self.shareholder_id:
            raise ValueError("Advance requires shareholder_id.")
        if self.type == "operational" and self.shareholder_id:
            raise ValueError("Operational expense cannot reference a shareholder.")
        return self

    def to_input(self) -> CreateExpenseInput:
        return CreateExpenseInput(
            location_id=self.location_id.strip(),
            expense_date=self.expense_date,
            amount=Decimal(self.amount),
            description=self.description,
            expense_type=ExpenseType(self.type),
            shareholder_id=self.shareholder_id,
            cost_center_id=self.cost_center_id,
        )


class UpdateExpenseRequest(BaseModel):
    """Partial update of an expense."""

    expense_date: date | None = None
    amount: str | None = Field(default=None, pattern=NON_NEGATIVE_MONEY_PATTERN)
    description: str | None = Field(default=None, max_length=280)
    cost_center_id: str | None = Field(default=None, max_length=64)

    def to_input(self) -> UpdateExpenseInput:
        return UpdateExpenseInput(
            expense_date=self.expense_date,
            amount=Decimal(self.amount) if self.amount is not None else None,
            description=self.description,
            cost_center_id=self.cost_center_id,
        )


class ExpenseResponse(BaseModel):
    """Serialized expense returned by API."""

    id: UUID
    location_id: str
    expense_date: date
    type: ExpenseKind
    amount: str = Field(pattern=MONEY_PATTERN)
    description: str
    shareholder_id: str | None
    cost_center_id: str | None
    created_by: str
    created_at: datetime

    @classmethod
    def from_model(cls, expense: Expense) -> ExpenseResponse:
        return cls(
            id=expense.id,
            location_id=expense.location_id,
            expense_date=expense.expense_date,
            type=expense.expense_type.value,
            amount=format_money(expense.amount),
            description=expense.description,
            shareholder_id=expense.shareholder_id,
            cost_center_id=expense.cost_center_id,
            created_by=expense.created_by,
            created_at=expense.created_at,
        )
