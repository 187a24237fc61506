from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from caixa_rotas.api.dependencies import (
    build_closing_service,
    build_financial_summary_service,
)
from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry
from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.reading import Reading
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.domain.errors import (
    PeriodAlreadyClosedError,
    PersistenceError,
    ValidationError,
)
from caixa_rotas.repositories.audit_log_repository import AuditLogRepository
from caixa_rotas.repositories.closing_repository import ClosingRepository
from caixa_rotas.repositories.expense_repository import ExpenseRepository
from caixa_rotas.repositories.shareholder_repository import ShareholderRepository
from caixa_rotas.services.closing_service import (
    CloseMonthCommand,
    ClosingService,
    ShareholderSnapshot,
)

LOCATION_ID = "loc-1"


def seed_two_shareholders(session: Session) -> None:
    session.add_all(
        [
            Shareholder(
                id="socio-a",
                location_id=LOCATION_ID,
                name="Ana",
                percentage=Decimal("60.00"),
                participates_in_loss=True,
                accumulated_balance=Decimal("0.00"),
                is_active=True,
            ),
            Shareholder(
                id="socio-b",
                location_id=LOCATION_ID,
                name="Bia",
                percentage=Decimal("40.00"),
                participates_in_loss=False,
                accumulated_balance=Decimal("0.00"),
                is_active=True,
            ),
        ]
    )
    session.commit()


def _snapshots(session: Session) -> list[ShareholderSnapshot]:
    rows = ShareholderRepository(session).list_active_by_location(LOCATION_ID)
    return [
        ShareholderSnapshot(
            shareholder_id=row.id,
            name=row.name,
            percentage=row.percentage,
            participates_in_loss=row.participates_in_loss,
            accumulated_balance=row.accumulated_balance,
        )
        for row in rows
    ]


def _balances(session: Session) -> dict[str, Decimal]:
    rows = session.scalars(select(Shareholder).order_by(Shareholder.id)).all()
    return {row.id: row.accumulated_balance for row in rows}


def _reading(total_general: str, reading_date: date) -> Reading:
    amount = Decimal(total_general)
    return Reading(
        location_id=LOCATION_ID,
        route_id="rota-1",
        point_id="ponto-1",
        operator_id="maq-1",
        reading_date=reading_date,
        previous_entries=Decimal("0.00"),
        current_entries=amount,
        total_entries=amount,
        previous_exits=Decimal("0.00"),
        current_exits=Decimal("0.00"),
        total_exits=Decimal("0.00"),
        total_general=amount,
        commission_percentage=Decimal("0.00"),
        commission_amount=Decimal("0.00"),
        expense=Decimal("0.00"),
        total_final=amount,
        created_by="user-1",
        is_active=True,
    )


def test_close_month_derives_net_profit_and_updates_ledger(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        seed_two_shareholders(session)
        session.add_all(
            [
                _reading("1200.00", date(2024, 6, 3)),
                _reading("999.00", date(2024, 7, 1)),
                Expense(
                    location_id=LOCATION_ID,
                    expense_date=date(2024, 6, 15),
                    amount=Decimal("200.00"),
                    description="Frete",
                    expense_type=ExpenseType.OPERATIONAL,
                    created_by="user-1",
                    is_active=True,
                ),
                Expense(
                    location_id=LOCATION_ID,
                    expense_date=date(2024, 6, 20),
                    amount=Decimal("80.00"),
                    description="Vale",
                    expense_type=ExpenseType.ADVANCE,
                    shareholder_id="socio-a",
                    created_by="user-1",
                    is_active=True,
                ),
            ]
        )
        session.commit()

        outcome = build_closing_service(session).close_month(
            CloseMonthCommand(
                location_id=LOCATION_ID,
                year=2024,
                month=6,
                retained_amount=Decimal("0.00"),
                closed_by="user-1",
                shareholders=_snapshots(session),
            )
        )

    assert outcome.net_profit == Decimal("1000.00")

    with sqlite_session_factory() as session:
        assert _balances(session) == {
            "socio-a": Decimal("520.00"),
            "socio-b": Decimal("400.00"),
        }
        closing = ClosingRepository(session).get_by_period(
            location_id=LOCATION_ID, period=outcome.period
        )
        assert closing is not None
        assert [row.advances_deducted for row in closing.settlements] == [
            Decimal("80.00"),
            Decimal("0.00"),
        ]
        shareholder_a = session.get(Shareholder, "socio-a")
        assert shareholder_a is not None
        assert shareholder_a.last_closing_id == closing.id
        assert shareholder_a.balance_version == 2
        (entry,) = AuditLogRepository(session).list_for_document(
            collection="monthly_closings", document_id=str(closing.id)
        )
        assert entry.action == AuditAction.CLOSE_MONTH


def test_closing_same_period_twice_keeps_first_result(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        seed_two_shareholders(session)
        service = build_closing_service(session)
        service.close_month(
            CloseMonthCommand(
                location_id=LOCATION_ID,
                year=2024,
                month=6,
                retained_amount=Decimal("200.00"),
                closed_by="user-1",
                shareholders=_snapshots(session),
                net_profit=Decimal("1000.00"),
            )
        )

    with sqlite_session_factory() as session:
        service = build_closing_service(session)
        with pytest.raises(PeriodAlreadyClosedError) as exc_info:
            service.close_month(
                CloseMonthCommand(
                    location_id=LOCATION_ID,
                    year=2024,
                    month=6,
                    retained_amount=Decimal("0.00"),
                    closed_by="user-2",
                    shareholders=_snapshots(session),
                    net_profit=Decimal("5000.00"),
                )
            )
        assert "6/2024" in exc_info.value.message

    with sqlite_session_factory() as session:
        assert _balances(session) == {
            "socio-a": Decimal("480.00"),
            "socio-b": Decimal("320.00"),
        }
        assert session.scalar(select(func.count(MonthlyClosing.id))) == 1


class BrokenAuditRepository(AuditLogRepository):
    def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk full"))


def test_failure_after_ledger_update_leaves_no_partial_state(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        seed_two_shareholders(session)
        service = ClosingService(
            closing_repository=ClosingRepository(session),
            shareholder_repository=ShareholderRepository(session),
            advance_ledger=ExpenseRepository(session),
            net_profit_source=build_financial_summary_service(session),
            audit_repository=BrokenAuditRepository(session),
            session=session,
        )

        with pytest.raises(PersistenceError):
            service.close_month(
                CloseMonthCommand(
                    location_id=LOCATION_ID,
                    year=2024,
                    month=6,
                    retained_amount=Decimal("0.00"),
                    closed_by="user-1",
                    shareholders=_snapshots(session),
                    net_profit=Decimal("1000.00"),
                )
            )

    with sqlite_session_factory() as session:
        assert _balances(session) == {
            "socio-a": Decimal("0.00"),
            "socio-b": Decimal("0.00"),
        }
        assert session.scalar(select(func.count(MonthlyClosing.id))) == 0
        assert session.scalar(select(func.count(SettlementDetailRow.id))) == 0


def test_closing_that_leaves_out_a_shareholder_is_rejected(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    with sqlite_session_factory() as session:
        seed_two_shareholders(session)
        shareholder_b = session.get(Shareholder, "socio-b")
        assert shareholder_b is not None
        shareholder_b.accumulated_balance = Decimal("-150.00")
        session.commit()

        only_ana = [
            item for item in _snapshots(session) if item.shareholder_id == "socio-a"
        ]
        with pytest.raises(ValidationError) as exc_info:
            build_closing_service(session).close_month(
                CloseMonthCommand(
                    location_id=LOCATION_ID,
                    year=2024,
                    month=6,
                    retained_amount=Decimal("0.00"),
                    closed_by="user-1",
                    shareholders=only_ana,
                    net_profit=Decimal("1000.00"),
                )
            )
        assert exc_info.value.details["missing"] == ["socio-b"]

    with sqlite_session_factory() as session:
        assert _balances(session) == {
            "socio-a": Decimal("0.00"),
            "socio-b": Decimal("-150.00"),
        }
        shareholder_b = session.get(Shareholder, "socio-b")
        assert shareholder_b is not None
        assert shareholder_b.last_closing_id is None
        assert session.scalar(select(func.count(MonthlyClosing.id))) == 0
