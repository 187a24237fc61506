"""Shareholder ledger persistence operations."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from caixa_rotas.db.models.shareholder import Shareholder


class ShareholderRepository:
    """Single access point to shareholder balances."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_active_by_location(self, location_id: str) -> list[Shareholder]:
        statement = (
            select(Shareholder)
            .where(
                Shareholder.location_id == location_id,
                Shareholder.is_active.is_(True),
            )
            .order_by(Shareholder.name.asc(), Shareholder.id.asc())
        )
        return list(self._session.scalars(statement).all())

    def lock_active_by_location(self, location_id: str) -> list[Shareholder]:
        """Lock every active ledger row of a location until the transaction ends."""
        statement = (
            select(Shareholder)
            .where(
                Shareholder.location_id == location_id,
                Shareholder.is_active.is_(True),
            )
            .order_by(Shareholder.id.asc())
            .with_for_update()
        )
        return list(self._session.scalars(statement).all())

    def apply_closing_balance(
        self,
        shareholder: Shareholder,
        *,
        new_balance: Decimal,
        closing_id: UUID,
    ) -> None:
        """Write the balance produced by a closing.

        The mapper's version column turns a concurrent write into
        ``StaleDataError`` at flush time.
        """
        shareholder.accumulated_balance = new_balance
        shareholder.last_closing_id = closing_id
        self._session.flush()

    def get(self, shareholder_id: str) -> Shareholder | None:
        return self._session.get(Shareholder, shareholder_id)
