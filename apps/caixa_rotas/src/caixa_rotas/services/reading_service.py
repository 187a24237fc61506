"""Business service for meter readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from caixa_rotas.db.models.audit_log import AuditAction
from caixa_rotas.db.models.reading import Reading
from caixa_rotas.domain.errors import (
    RecordNotFoundError,
    ValidationError,
    compose_error_message,
)
from caixa_rotas.domain.money import ZERO, quantize_money
from caixa_rotas.domain.readings import compute_reading_totals

logger = logging.getLogger(__name__)

READINGS_COLLECTION = "readings"


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class ReadingRepositoryProtocol(Protocol):
    def add(self, reading: Reading) -> Reading: ...
    def get_active(self, reading_id: UUID) -> Reading | None: ...
    def get_last_active_for_operator(self, operator_id: str) -> Reading | None: ...


class PeriodLockGuardProtocol(Protocol):
    def check_period_open(self, location_id: str, period_date: date) -> None: ...


class AuditRecorderProtocol(Protocol):
    def record(
        self,
        *,
        user_id: str,
        action: AuditAction,
        collection: str,
        document_id: str,
        details: str,
    ) -> None: ...


@dataclass(slots=True, frozen=True)
class CreateReadingInput:
    """Input model for a new meter reading.

    Previous counters default to the current counters of the operator's last
    active reading, or zero for a machine without history.
    """

    location_id: str
    route_id: str
    point_id: str
    operator_id: str
    reading_date: date
    current_entries: Decimal
    current_exits: Decimal
    previous_entries: Decimal | None = None
    previous_exits: Decimal | None = None
    commission_percentage: Decimal | None = None
    expense: Decimal = ZERO
    description: str | None = None


@dataclass(slots=True, frozen=True)
class UpdateReadingInput:
    """Partial update of a reading; ``None`` keeps the stored value."""

    reading_date: date | None = None
    previous_entries: Decimal | None = None
    current_entries: Decimal | None = None
    previous_exits: Decimal | None = None
    current_exits: Decimal | None = None
    commission_percentage: Decimal | None = None
    expense: Decimal | None = None
    description: str | None = None


class ReadingService:
    """Registers, corrects and removes readings of open periods."""

    def __init__(
        self,
        *,
        reading_repository: ReadingRepositoryProtocol,
        period_lock_guard: PeriodLockGuardProtocol,
        audit_service: AuditRecorderProtocol,
        session: SessionProtocol,
        default_commission_percentage: Decimal,
    ) -> None:
        self._reading_repository = reading_repository
        self._guard = period_lock_guard
        self._audit_service = audit_service
        self._session = session
        self._default_commission_percentage = default_commission_percentage

    def get_last_reading(self, operator_id: str) -> Reading | None:
        return self._reading_repository.get_last_active_for_operator(
            operator_id.strip()
        )

    def create_reading(self, payload: CreateReadingInput, *, user_id: str) -> Reading:
        require_user(user_id)
        previous_entries = payload.previous_entries
        previous_exits = payload.previous_exits
        if previous_entries is None or previous_exits is None:
            last = self._reading_repository.get_last_active_for_operator(
                payload.operator_id
            )
            if previous_entries is None:
                previous_entries = last.current_entries if last else ZERO
            if previous_exits is None:
                previous_exits = last.current_exits if last else ZERO

        commission_percentage = (
            payload.commission_percentage
            if payload.commission_percentage is not None
            else self._default_commission_percentage
        )
        totals = compute_reading_totals(
            previous_entries=previous_entries,
            current_entries=payload.current_entries,
            previous_exits=previous_exits,
            current_exits=payload.current_exits,
            commission_percentage=commission_percentage,
            expense=payload.expense,
        )

        try:
            self._guard.check_period_open(payload.location_id, payload.reading_date)
            reading = self._reading_repository.add(
                Reading(
                    location_id=payload.location_id,
                    route_id=payload.route_id,
                    point_id=payload.point_id,
                    operator_id=payload.operator_id,
                    reading_date=payload.reading_date,
                    previous_entries=previous_entries,
                    current_entries=payload.current_entries,
                    total_entries=totals.total_entries,
                    previous_exits=previous_exits,
                    current_exits=payload.current_exits,
                    total_exits=totals.total_exits,
                    total_general=totals.total_general,
                    commission_percentage=commission_percentage,
                    commission_amount=totals.commission_amount,
                    expense=quantize_money(payload.expense),
                    total_final=totals.total_final,
                    description=_clean(payload.description),
                    created_by=user_id,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(reading)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "reading_created",
            extra={
                "reading_id": str(reading.id),
                "location_id": reading.location_id,
                "operator_id": reading.operator_id,
                "reading_date": reading.reading_date.isoformat(),
            },
        )
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.CREATE,
            collection=READINGS_COLLECTION,
            document_id=str(reading.id),
            details=f"New reading for operator {reading.operator_id}",
        )
        return reading

    def update_reading(
        self, reading_id: UUID, payload: UpdateReadingInput, *, user_id: str
    ) -> Reading:
        require_user(user_id)
        reading = self._get_reading(reading_id)
        new_date = payload.reading_date or reading.reading_date
        previous_entries = _pick(payload.previous_entries, reading.previous_entries)
        current_entries = _pick(payload.current_entries, reading.current_entries)
        previous_exits = _pick(payload.previous_exits, reading.previous_exits)
        current_exits = _pick(payload.current_exits, reading.current_exits)
        commission_percentage = _pick(
            payload.commission_percentage, reading.commission_percentage
        )
        expense = _pick(payload.expense, reading.expense)
        totals = compute_reading_totals(
            previous_entries=previous_entries,
            current_entries=current_entries,
            previous_exits=previous_exits,
            current_exits=current_exits,
            commission_percentage=commission_percentage,
            expense=expense,
        )

        try:
            # Moving a reading between months touches both periods.
            self._guard.check_period_open(reading.location_id, reading.reading_date)
            self._guard.check_period_open(reading.location_id, new_date)
            reading.reading_date = new_date
            reading.previous_entries = previous_entries
            reading.current_entries = current_entries
            reading.total_entries = totals.total_entries
            reading.previous_exits = previous_exits
            reading.current_exits = current_exits
            reading.total_exits = totals.total_exits
            reading.total_general = totals.total_general
            reading.commission_percentage = commission_percentage
            reading.commission_amount = totals.commission_amount
            reading.expense = quantize_money(expense)
            reading.total_final = totals.total_final
            if payload.description is not None:
                reading.description = _clean(payload.description)
            reading.updated_by = user_id
            self._session.commit()
            self._session.refresh(reading)
        except Exception:
            self._session.rollback()
            raise

        logger.info("reading_updated", extra={"reading_id": str(reading.id)})
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.UPDATE,
            collection=READINGS_COLLECTION,
            document_id=str(reading.id),
            details="Reading updated",
        )
        return reading

    def soft_delete_reading(self, reading_id: UUID, *, user_id: str) -> None:
        require_user(user_id)
        reading = self._get_reading(reading_id)
        try:
            self._guard.check_period_open(reading.location_id, reading.reading_date)
            reading.is_active = False
            reading.updated_by = user_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("reading_soft_deleted", extra={"reading_id": str(reading.id)})
        self._audit_service.record(
            user_id=user_id,
            action=AuditAction.SOFT_DELETE,
            collection=READINGS_COLLECTION,
            document_id=str(reading.id),
            details=f"Reading of {reading.reading_date.isoformat()} removed",
        )

    def _get_reading(self, reading_id: UUID) -> Reading:
        reading = self._reading_repository.get_active(reading_id)
        if reading is None:
            raise RecordNotFoundError(
                message=compose_error_message(
                    cause="Reading was not found or was already removed.",
                    action="Check the reading id and retry.",
                ),
                details={"reading_id": str(reading_id)},
            )
        return reading


def require_user(user_id: str) -> None:
    if not user_id or not user_id.strip():
        raise ValidationError(
            message=compose_error_message(
                cause="The acting user was not informed.",
                action="Send the X-User-Id header.",
            )
        )


def _pick(value: Decimal | None, current: Decimal) -> Decimal:
    return current if value is None else value


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
