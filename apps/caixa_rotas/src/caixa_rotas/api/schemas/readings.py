"""Schemas for meter reading endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from caixa_rotas.api.schemas.common import (
    COUNTER_PATTERN,
    MONEY_PATTERN,
    NON_NEGATIVE_MONEY_PATTERN,
    PERCENTAGE_PATTERN,
)
from caixa_rotas.db.models.reading import Reading
from caixa_rotas.domain.money import format_money
from caixa_rotas.services.reading_service import CreateReadingInput, UpdateReadingInput


def _optional_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


class CreateReadingRequest(BaseModel):
    """Payload for registering a meter reading."""

    location_id: str = Field(min_length=1, max_length=64)
    route_id: str = Field(min_length=1, max_length=64)
    point_id: str = Field(min_length=1, max_length=64)
    operator_id: str = Field(min_length=1, max_length=64)
    reading_date: date
    current_entries: str = Field(pattern=COUNTER_PATTERN)
    current_exits: str = Field(pattern=COUNTER_PATTERN)
    previous_entries: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    previous_exits: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    commission_percentage: str | None = Field(default=None, pattern=PERCENTAGE_PATTERN)
    expense: str = Field(default="0.00", pattern=NON_NEGATIVE_MONEY_PATTERN)
    description: str | None = Field(default=None, max_length=280)

    @field_validator("location_id", "route_id", "point_id", "operator_id")
    @classmethod
    def validate_identifiers(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Identifier cannot be blank.")
        return trimmed

    def to_input(self) -> CreateReadingInput:
        return CreateReadingInput(
            location_id=self.location_id,
            route_id=self.route_id,
            point_id=self.point_id,
            operator_id=self.operator_id,
            reading_date=self.reading_date,
            current_entries=Decimal(self.current_entries),
            current_exits=Decimal(self.current_exits),
            previous_entries=_optional_decimal(self.previous_entries),
            previous_exits=_optional_decimal(self.previous_exits),
            commission_percentage=_optional_decimal(self.commission_percentage),
            expense=Decimal(self.expense),
            description=self.description,
        )


class UpdateReadingRequest(BaseModel):
    """Partial update of a meter reading."""

    reading_date: date | None = None
    previous_entries: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    current_entries: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    previous_exits: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    current_exits: str | None = Field(default=None, pattern=COUNTER_PATTERN)
    commission_percentage: str | None = Field(default=None, pattern=PERCENTAGE_PATTERN)
    expense: str | None = Field(default=None, pattern=NON_NEGATIVE_MONEY_PATTERN)
    description: str | None = Field(default=None, max_length=280)

    def to_input(self) -> UpdateReadingInput:
        return UpdateReadingInput(
            reading_date=self.reading_date,
            previous_entries=_optional_decimal(self.previous_entries),
            current_entries=_optional_decimal(self.current_entries),
            previous_exits=_optional_decimal(self.previous_exits),
            current_exits=_optional_decimal(self.current_exits),
            commission_percentage=_optional_decimal(self.commission_percentage),
            expense=_optional_decimal(self.expense),
            description=self.description,
        )


class ReadingResponse(BaseModel):
    """Serialized reading returned by API."""

    id: UUID
    location_id: str
    route_id: str
    point_id: str
    operator_id: str
    reading_date: date
    previous_entries: str
    current_entries: str
    total_entries: str
    previous_exits: str
    current_exits: str
    total_exits: str
    total_general: str = Field(pattern=MONEY_PATTERN)
    commission_percentage: str
    commission_amount: str = Field(pattern=MONEY_PATTERN)
    expense: str = Field(pattern=MONEY_PATTERN)
    total_final: str = Field(pattern=MONEY_PATTERN)
    description: str | None
    created_by: str
    updated_by: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, reading: Reading) -> ReadingResponse:
        return cls(
            id=reading.id,
            location_id=reading.location_id,
            route_id=reading.route_id,
            point_id=reading.point_id,
            operator_id=reading.operator_id,
            reading_date=reading.reading_date,
            previous_entries=format_money(reading.previous_entries),
            current_entries=format_money(reading.current_entries),
            total_entries=format_money(reading.total_entries),
            previous_exits=format_money(reading.previous_exits),
            current_exits=format_money(reading.current_exits),
            total_exits=format_money(reading.total_exits),
            total_general=format_money(reading.total_general),
            commission_percentage=format_money(reading.commission_percentage),
            commission_amount=format_money(reading.commission_amount),
            expense=format_money(reading.expense),
            total_final=format_money(reading.total_final),
            description=reading.description,
            created_by=reading.created_by,
            updated_by=reading.updated_by,
            created_at=reading.created_at,
        )
