"""Guard that rejects writes dated inside a closed period."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol

from caixa_rotas.domain.competence import period_of
from caixa_rotas.domain.errors import PeriodAlreadyClosedError
from caixa_rotas.domain.value_objects import Period

logger = logging.getLogger(__name__)


class ClosingLookupProtocol(Protocol):
    """Closing repository contract consumed by the guard."""

    def exists_for_period(self, *, location_id: str, period: Period) -> bool: ...


class PeriodLockGuard:
    """Checks that a (location, month, year) has no closing record yet.

    Call it right before the write it protects; it has no side effects.
    """

    def __init__(self, closing_repository: ClosingLookupProtocol) -> None:
        self._closing_repository = closing_repository

    def check_period_open(self, location_id: str, period_date: date | datetime) -> None:
        """Raise ``PeriodAlreadyClosedError`` when the date's month is closed."""

        self.ensure_period_open(location_id, period_of(period_date))

    def ensure_period_open(self, location_id: str, period: Period) -> None:
        if self._closing_repository.exists_for_period(
            location_id=location_id, period=period
        ):
            logger.warning(
                "period_locked_write_rejected",
                extra={"location_id": location_id, "period": period.to_key()},
            )
            raise PeriodAlreadyClosedError(
                location_id=location_id,
                month=period.month,
                year=period.year,
            )

    def is_closed(self, location_id: str, period: Period) -> bool:
        return self._closing_repository.exists_for_period(
            location_id=location_id, period=period
        )
