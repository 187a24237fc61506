"""Monthly closing: lock the period and distribute the net profit."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.domain.distribution import (
    DistributionResult,
    SettlementDetail,
    ShareholderInput,
    distribute,
    ensure_retained_within_profit,
)
from caixa_rotas.domain.errors import (
    DomainError,
    PeriodAlreadyClosedError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
    compose_error_message,
)
from caixa_rotas.domain.money import ZERO, quantize_money
from caixa_rotas.domain.value_objects import Period
from caixa_rotas.services.audit_service import build_audit_entry
from caixa_rotas.services.period_lock import PeriodLockGuard

logger = logging.getLogger(__name__)

CLOSINGS_COLLECTION = "monthly_closings"


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class ClosingRepositoryProtocol(Protocol):
    def exists_for_period(self, *, location_id: str, period: Period) -> bool: ...

    def get_by_period(
        self, *, location_id: str, period: Period
    ) -> MonthlyClosing | None: ...

    def add(
        self,
        closing: MonthlyClosing,
        settlements: list[SettlementDetailRow],
    ) -> MonthlyClosing: ...


class ShareholderLedgerProtocol(Protocol):
    def list_active_by_location(self, location_id: str) -> list[Shareholder]: ...

    def lock_active_by_location(self, location_id: str) -> list[Shareholder]: ...

    def apply_closing_balance(
        self,
        shareholder: Shareholder,
        *,
        new_balance: Decimal,
        closing_id: UUID,
    ) -> None: ...


class AdvanceLedgerProtocol(Protocol):
    def sum_advances_for_period(
        self,
        *,
        shareholder_id: str,
        location_id: str,
        period: Period,
    ) -> Decimal: ...


class NetProfitSourceProtocol(Protocol):
    def fetch_period_net_profit(self, *, location_id: str, period: Period) -> Decimal: ...


class AuditLogRepositoryProtocol(Protocol):
    def add(self, entry: AuditLogEntry) -> AuditLogEntry: ...


@dataclass(frozen=True, slots=True)
class ShareholderSnapshot:
    """Shareholder values as seen by the caller when closing was requested."""

    shareholder_id: str
    name: str
    percentage: Decimal
    participates_in_loss: bool
    accumulated_balance: Decimal


@dataclass(frozen=True, slots=True)
class CloseMonthCommand:
    """Input of a monthly closing."""

    location_id: str
    year: int
    month: int
    retained_amount: Decimal
    closed_by: str
    shareholders: list[ShareholderSnapshot] = field(default_factory=list)
    net_profit: Decimal | None = None


@dataclass(frozen=True, slots=True)
class ClosingOutcome:
    """Result of a committed closing."""

    closing_id: UUID
    location_id: str
    period: Period
    net_profit: Decimal
    retained_amount: Decimal
    distributed_amount: Decimal
    settlements: list[SettlementDetail]
    closed_by: str
    closed_at: datetime


@dataclass(frozen=True, slots=True)
class DistributionPreview:
    """Distribution computed without writing anything."""

    location_id: str
    period: Period
    is_closed: bool
    result: DistributionResult


class ClosingService:
    """Runs the monthly closing as a single all-or-nothing transaction."""

    def __init__(
        self,
        *,
        closing_repository: ClosingRepositoryProtocol,
        shareholder_repository: ShareholderLedgerProtocol,
        advance_ledger: AdvanceLedgerProtocol,
        net_profit_source: NetProfitSourceProtocol,
        audit_repository: AuditLogRepositoryProtocol,
        session: SessionProtocol,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._closing_repository = closing_repository
        self._shareholder_repository = shareholder_repository
        self._advance_ledger = advance_ledger
        self._net_profit_source = net_profit_source
        self._audit_repository = audit_repository
        self._session = session
        self._guard = PeriodLockGuard(closing_repository)
        self._now_provider = now_provider or (lambda: datetime.now(UTC))

    def close_month(self, command: CloseMonthCommand) -> ClosingOutcome:
        period = _resolve_period(command.year, command.month)
        closed_by = command.closed_by.strip()
        retained_amount = quantize_money(command.retained_amount)

        try:
            # A closed period is reported before any argument problem.
            self._guard.ensure_period_open(command.location_id, period)
            _validate_command(command, closed_by, retained_amount)
            net_profit = self._resolve_net_profit(command, period)
            ledger = self._lock_ledger(command)
            result = distribute(
                net_profit,
                retained_amount,
                self._build_inputs(command.location_id, period, ledger),
            )

            # Re-checked inside the transaction, next to the lock insert.
            self._guard.ensure_period_open(command.location_id, period)
            closed_at = self._now_provider()
            closing = self._closing_repository.add(
                MonthlyClosing(
                    location_id=command.location_id,
                    period_year=period.year,
                    period_month=period.month,
                    total_net_profit=net_profit,
                    retained_amount=retained_amount,
                    distributed_amount=result.distributable_base,
                    closed_by=closed_by,
                    closed_at=closed_at,
                ),
                _settlement_rows(result.settlements),
            )
            shareholders_by_id = {row.id: row for row in ledger}
            for settlement in result.settlements:
                self._shareholder_repository.apply_closing_balance(
                    shareholders_by_id[settlement.shareholder_id],
                    new_balance=settlement.new_accumulated_balance,
                    closing_id=closing.id,
                )
            self._audit_repository.add(
                build_audit_entry(
                    occurred_at=closed_at,
                    user_id=closed_by,
                    action=AuditAction.CLOSE_MONTH,
                    collection=CLOSINGS_COLLECTION,
                    document_id=str(closing.id),
                    details=(
                        f"Closing {period.label()} location {command.location_id}"
                    ),
                )
            )
            self._session.commit()
        except DomainError:
            self._session.rollback()
            raise
        except IntegrityError as exc:
            self._session.rollback()
            if self._closing_repository.exists_for_period(
                location_id=command.location_id, period=period
            ):
                raise PeriodAlreadyClosedError(
                    location_id=command.location_id,
                    month=period.month,
                    year=period.year,
                ) from exc
            raise PersistenceError("integrity constraint violated") from exc
        except StaleDataError as exc:
            self._session.rollback()
            raise PersistenceError(
                "shareholder balance was changed by another transaction"
            ) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception(
                "closing_transaction_failed",
                extra={
                    "location_id": command.location_id,
                    "period": period.to_key(),
                },
            )
            raise PersistenceError(type(exc).__name__) from exc
        except Exception:
            self._session.rollback()
            raise

        if result.undistributed_amount != ZERO:
            logger.warning(
                "closing_undistributed_amount",
                extra={
                    "closing_id": str(closing.id),
                    "undistributed_amount": str(result.undistributed_amount),
                },
            )
        logger.info(
            "closing_committed",
            extra={
                "closing_id": str(closing.id),
                "location_id": command.location_id,
                "period": period.to_key(),
                "distributed_amount": str(result.distributable_base),
                "shareholders": len(result.settlements),
            },
        )
        return ClosingOutcome(
            closing_id=closing.id,
            location_id=command.location_id,
            period=period,
            net_profit=net_profit,
            retained_amount=retained_amount,
            distributed_amount=result.distributable_base,
            settlements=result.settlements,
            closed_by=closed_by,
            closed_at=closed_at,
        )

    def preview(
        self,
        *,
        location_id: str,
        year: int,
        month: int,
        retained_amount: Decimal,
        net_profit: Decimal | None = None,
    ) -> DistributionPreview:
        """Compute the distribution with the current ledger, writing nothing."""

        period = _resolve_period(year, month)
        try:
            if net_profit is None:
                net_profit = self._net_profit_source.fetch_period_net_profit(
                    location_id=location_id, period=period
                )
            shareholders = self._shareholder_repository.list_active_by_location(
                location_id
            )
            result = distribute(
                quantize_money(net_profit),
                quantize_money(retained_amount),
                self._build_inputs(location_id, period, shareholders),
            )
            is_closed = self._guard.is_closed(location_id, period)
        finally:
            self._session.rollback()
        return DistributionPreview(
            location_id=location_id,
            period=period,
            is_closed=is_closed,
            result=result,
        )

    def get_closing(self, *, location_id: str, year: int, month: int) -> MonthlyClosing:
        period = _resolve_period(year, month)
        closing = self._closing_repository.get_by_period(
            location_id=location_id, period=period
        )
        if closing is None:
            raise RecordNotFoundError(
                message=compose_error_message(
                    cause=(
                        f"Period {period.label()} has not been closed for "
                        f"location {location_id}."
                    ),
                    action="Close the month before requesting its settlement.",
                ),
                details={
                    "location_id": location_id,
                    "month": period.month,
                    "year": period.year,
                },
            )
        return closing

    def _resolve_net_profit(self, command: CloseMonthCommand, period: Period) -> Decimal:
        if command.net_profit is not None:
            return quantize_money(command.net_profit)
        return quantize_money(
            self._net_profit_source.fetch_period_net_profit(
                location_id=command.location_id, period=period
            )
        )

    def _lock_ledger(self, command: CloseMonthCommand) -> list[Shareholder]:
        """Lock the location ledger and check the caller's snapshot is current.

        The snapshot must list every active shareholder of the location, no
        more and no less, so nobody is left out of a closing.
        """

        requested_ids = [item.shareholder_id for item in command.shareholders]
        if len(set(requested_ids)) != len(requested_ids):
            raise ValidationError(
                message=compose_error_message(
                    cause="The shareholder list has repeated entries.",
                    action="Send each shareholder a single time.",
                )
            )
        locked = {
            row.id: row
            for row in self._shareholder_repository.lock_active_by_location(
                command.location_id
            )
        }

        missing = sorted(set(locked) - set(requested_ids))
        unknown = sorted(set(requested_ids) - set(locked))
        if missing or unknown:
            raise ValidationError(
                message=compose_error_message(
                    cause=(
                        "The shareholder list does not match the active "
                        f"shareholders of location {command.location_id}."
                    ),
                    action="Reload the shareholder list and retry.",
                ),
                details={"missing": missing, "unknown": unknown},
            )

        ledger: list[Shareholder] = []
        for snapshot in command.shareholders:
            row = locked[snapshot.shareholder_id]
            if quantize_money(snapshot.accumulated_balance) != quantize_money(
                row.accumulated_balance
            ) or Decimal(snapshot.percentage) != Decimal(row.percentage):
                raise PersistenceError(
                    "shareholder data changed since it was loaded",
                    details={"shareholder_id": snapshot.shareholder_id},
                )
            ledger.append(row)
        return ledger

    def _build_inputs(
        self,
        location_id: str,
        period: Period,
        shareholders: list[Shareholder],
    ) -> list[ShareholderInput]:
        return [
            ShareholderInput(
                shareholder_id=row.id,
                name=row.name,
                percentage=Decimal(row.percentage),
                participates_in_loss=row.participates_in_loss,
                accumulated_balance=Decimal(row.accumulated_balance),
                advances_for_period=self._advance_ledger.sum_advances_for_period(
                    shareholder_id=row.id,
                    location_id=location_id,
                    period=period,
                ),
            )
            for row in shareholders
        ]


def _resolve_period(year: int, month: int) -> Period:
    try:
        return Period(year=year, month=month)
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause=str(exc),
                action="Send a month between 1 and 12 and a four-digit year.",
            ),
            details={"year": year, "month": month},
        ) from exc


def _validate_command(
    command: CloseMonthCommand, closed_by: str, retained_amount: Decimal
) -> None:
    if not closed_by:
        raise ValidationError(
            message=compose_error_message(
                cause="The user closing the month was not informed.",
                action="Send the initiating user id.",
            )
        )
    if not command.shareholders:
        raise ValidationError(
            message=compose_error_message(
                cause="No shareholder list was sent for the closing.",
                action="Load the location shareholders and retry.",
            )
        )
    if command.net_profit is not None:
        ensure_retained_within_profit(
            quantize_money(command.net_profit), retained_amount
        )


def _settlement_rows(settlements: list[SettlementDetail]) -> list[SettlementDetailRow]:
    return [
        SettlementDetailRow(
            shareholder_id=item.shareholder_id,
            shareholder_name=item.shareholder_name,
            period_share=item.period_share,
            prior_balance_carried=item.prior_balance_carried,
            advances_deducted=item.advances_deducted,
            final_amount=item.final_amount,
            new_accumulated_balance=item.new_accumulated_balance,
            display_order=position,
        )
        for position, item in enumerate(settlements)
    ]
