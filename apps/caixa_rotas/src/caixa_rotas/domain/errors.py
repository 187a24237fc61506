"""Domain exceptions used across API, CLI and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from http import HTTPStatus
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class PeriodAlreadyClosedError(DomainError):
    """Raised when a write or a closing targets an already closed period."""

    def __init__(self, *, location_id: str, month: int, year: int) -> None:
        super().__init__(
            code="PERIOD_ALREADY_CLOSED",
            message=compose_error_message(
                cause=(
                    f"Period {month}/{year} is already closed for location "
                    f"{location_id}."
                ),
                action=(
                    "Review the closing record; closed periods no longer "
                    "accept changes."
                ),
            ),
            status_code=HTTPStatus.CONFLICT,
            details={"location_id": location_id, "month": month, "year": year},
        )


class InvalidDistributionError(DomainError):
    """Raised when distribution inputs break business rules."""

    def __init__(
        self,
        message: str | None = None,
        *,
        retained_amount: Decimal | None = None,
        net_profit: Decimal | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = dict(details or {})
        if retained_amount is not None:
            payload["retained_amount"] = str(retained_amount)
        if net_profit is not None:
            payload["net_profit"] = str(net_profit)
        super().__init__(
            code="INVALID_DISTRIBUTION",
            message=message
            or compose_error_message(
                cause="Distribution values violate closing rules.",
                action="Correct the retained amount or shareholder percentages.",
            ),
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details=payload,
        )


class PersistenceError(DomainError):
    """Raised when the storage transaction fails or conflicts."""

    def __init__(self, cause: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="PERSISTENCE_ERROR",
            message=compose_error_message(
                cause=f"The storage transaction did not complete: {cause}",
                action="Nothing was saved. Reload the data and retry.",
            ),
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            details={"cause": cause, **(details or {})},
        )


class ValidationError(DomainError):
    """Raised when required fields are missing or malformed."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message
            or compose_error_message(
                cause="Request data is incomplete or malformed.",
                action="Fill in the required fields and try again.",
            ),
            status_code=HTTPStatus.BAD_REQUEST,
            details=details or {},
        )


class RecordNotFoundError(DomainError):
    """Raised when a referenced record does not exist or is inactive."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="RECORD_NOT_FOUND",
            message=message
            or compose_error_message(
                cause="The requested record was not found.",
                action="Check the identifier and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )
