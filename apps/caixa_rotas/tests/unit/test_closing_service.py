from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.domain.errors import (
    InvalidDistributionError,
    PeriodAlreadyClosedError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from caixa_rotas.domain.value_objects import Period
from caixa_rotas.services.closing_service import (
    CloseMonthCommand,
    ClosingService,
    ShareholderSnapshot,
)

NOW = datetime(2024, 7, 1, 9, 0, tzinfo=UTC)


class FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


@dataclass
class FakeClosingRepository:
    closings: list[MonthlyClosing] = field(default_factory=list)
    fail_with: Exception | None = None

    def exists_for_period(self, *, location_id: str, period: Period) -> bool:
        return self.get_by_period(location_id=location_id, period=period) is not None

    def get_by_period(
        self, *, location_id: str, period: Period
    ) -> MonthlyClosing | None:
        for closing in self.closings:
            if (
                closing.location_id == location_id
                and closing.period_year == period.year
                and closing.period_month == period.month
            ):
                return closing
        return None

    def add(
        self, closing: MonthlyClosing, settlements: list[SettlementDetailRow]
    ) -> MonthlyClosing:
        if self.fail_with is not None:
            raise self.fail_with
        closing.id = uuid4()
        closing.settlements = settlements
        self.closings.append(closing)
        return closing


@dataclass
class FakeShareholderRepository:
    rows: list[Shareholder]
    applied: dict[str, Decimal] = field(default_factory=dict)

    def list_active_by_location(self, location_id: str) -> list[Shareholder]:
        return [
            row
            for row in self.rows
            if row.location_id == location_id and row.is_active
        ]

    def lock_active_by_location(self, location_id: str) -> list[Shareholder]:
        return self.list_active_by_location(location_id)

    def apply_closing_balance(
        self, shareholder: Shareholder, *, new_balance: Decimal, closing_id: UUID
    ) -> None:
        self.applied[shareholder.id] = new_balance


@dataclass
class FakeAdvanceLedger:
    advances: dict[str, Decimal] = field(default_factory=dict)

    def sum_advances_for_period(
        self, *, shareholder_id: str, location_id: str, period: Period
    ) -> Decimal:
        return self.advances.get(shareholder_id, Decimal("0.00"))


@dataclass
class FakeNetProfitSource:
    net_profit: Decimal

    def fetch_period_net_profit(self, *, location_id: str, period: Period) -> Decimal:
        return self.net_profit


@dataclass
class FakeAuditRepository:
    entries: list[AuditLogEntry] = field(default_factory=list)
    fail_with: Exception | None = None

    def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        if self.fail_with is not None:
            raise self.fail_with
        self.entries.append(entry)
        return entry


def _shareholder_rows() -> list[Shareholder]:
    return [
        Shareholder(
            id="socio-a",
            location_id="loc-1",
            name="Ana",
            percentage=Decimal("60.00"),
            participates_in_loss=True,
            accumulated_balance=Decimal("0.00"),
            is_active=True,
        ),
        Shareholder(
            id="socio-b",
            location_id="loc-1",
            name="Bia",
            percentage=Decimal("40.00"),
            participates_in_loss=False,
            accumulated_balance=Decimal("0.00"),
            is_active=True,
        ),
    ]


def _snapshots(rows: list[Shareholder]) -> list[ShareholderSnapshot]:
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


def _command(**overrides: object) -> CloseMonthCommand:
    values: dict[str, object] = {
        "location_id": "loc-1",
        "year": 2024,
        "month": 6,
        "retained_amount": Decimal("200.00"),
        "closed_by": "user-1",
        "shareholders": _snapshots(_shareholder_rows()),
    }
    values.update(overrides)
    return CloseMonthCommand(**values)  # type: ignore[arg-type]


@dataclass
class Harness:
    service: ClosingService
    session: FakeSession
    closings: FakeClosingRepository
    shareholders: FakeShareholderRepository
    audit: FakeAuditRepository


def _harness(
    *,
    net_profit: Decimal = Decimal("1000.00"),
    advances: dict[str, Decimal] | None = None,
) -> Harness:
    session = FakeSession()
    closings = FakeClosingRepository()
    shareholders = FakeShareholderRepository(rows=_shareholder_rows())
    audit = FakeAuditRepository()
    service = ClosingService(
        closing_repository=closings,
        shareholder_repository=shareholders,
        advance_ledger=FakeAdvanceLedger(advances=advances or {}),
        net_profit_source=FakeNetProfitSource(net_profit=net_profit),
        audit_repository=audit,
        session=session,
        now_provider=lambda: NOW,
    )
    return Harness(service, session, closings, shareholders, audit)


def test_close_month_persists_closing_balances_and_audit_entry() -> None:
    harness = _harness()

    outcome = harness.service.close_month(_command())

    assert outcome.net_profit == Decimal("1000.00")
    assert outcome.distributed_amount == Decimal("800.00")
    assert [item.period_share for item in outcome.settlements] == [
        Decimal("480.00"),
        Decimal("320.00"),
    ]
    assert harness.shareholders.applied == {
        "socio-a": Decimal("480.00"),
        "socio-b": Decimal("320.00"),
    }
    (closing,) = harness.closings.closings
    assert closing.closed_at == NOW
    assert [row.display_order for row in closing.settlements] == [0, 1]
    (entry,) = harness.audit.entries
    assert entry.action == AuditAction.CLOSE_MONTH
    assert entry.document_id == str(closing.id)
    assert harness.session.commits == 1


def test_close_month_deducts_advances_from_the_ledger() -> None:
    harness = _harness(advances={"socio-a": Decimal("80.00")})

    outcome = harness.service.close_month(_command())

    assert outcome.settlements[0].advances_deducted == Decimal("80.00")
    assert harness.shareholders.applied["socio-a"] == Decimal("400.00")


def test_second_close_of_same_period_is_rejected() -> None:
    harness = _harness()
    harness.service.close_month(_command())

    with pytest.raises(PeriodAlreadyClosedError) as exc_info:
        harness.service.close_month(_command(retained_amount=Decimal("-1.00")))

    assert exc_info.value.details == {"location_id": "loc-1", "month": 6, "year": 2024}
    assert len(harness.closings.closings) == 1
    assert harness.session.commits == 1


def test_retained_above_profit_fails_before_any_write() -> None:
    harness = _harness()

    with pytest.raises(InvalidDistributionError):
        harness.service.close_month(
            _command(
                net_profit=Decimal("1000.00"),
                retained_amount=Decimal("1200.00"),
            )
        )

    assert harness.closings.closings == []
    assert harness.shareholders.applied == {}
    assert harness.audit.entries == []
    assert harness.session.commits == 0
    assert harness.session.rollbacks == 1


def test_stale_shareholder_snapshot_is_rejected() -> None:
    harness = _harness()
    snapshots = _snapshots(_shareholder_rows())
    snapshots[0] = ShareholderSnapshot(
        shareholder_id="socio-a",
        name="Ana",
        percentage=Decimal("60.00"),
        participates_in_loss=True,
        accumulated_balance=Decimal("99.00"),
    )

    with pytest.raises(PersistenceError) as exc_info:
        harness.service.close_month(_command(shareholders=snapshots))

    assert exc_info.value.details["shareholder_id"] == "socio-a"
    assert harness.closings.closings == []


def test_unknown_shareholder_is_rejected() -> None:
    harness = _harness()
    snapshot = ShareholderSnapshot(
        shareholder_id="ghost",
        name="Ghost",
        percentage=Decimal("10.00"),
        participates_in_loss=False,
        accumulated_balance=Decimal("0.00"),
    )

    with pytest.raises(ValidationError) as exc_info:
        harness.service.close_month(
            _command(shareholders=[*_snapshots(_shareholder_rows()), snapshot])
        )

    assert exc_info.value.details == {"missing": [], "unknown": ["ghost"]}
    assert harness.closings.closings == []


def test_closing_without_every_active_shareholder_is_rejected() -> None:
    harness = _harness()
    only_ana = _snapshots(_shareholder_rows())[:1]

    with pytest.raises(ValidationError) as exc_info:
        harness.service.close_month(_command(shareholders=only_ana))

    assert exc_info.value.details == {"missing": ["socio-b"], "unknown": []}
    assert harness.closings.closings == []
    assert harness.shareholders.applied == {}
    assert harness.session.commits == 0


def test_missing_user_and_empty_list_are_rejected() -> None:
    harness = _harness()

    with pytest.raises(ValidationError):
        harness.service.close_month(_command(closed_by="  "))
    with pytest.raises(ValidationError):
        harness.service.close_month(_command(shareholders=[]))


def test_invalid_month_is_rejected() -> None:
    harness = _harness()

    with pytest.raises(ValidationError):
        harness.service.close_month(_command(month=13))


def test_audit_failure_rolls_back_the_whole_closing() -> None:
    harness = _harness()
    harness.audit.fail_with = OperationalError(
        "INSERT INTO audit_logs", {}, Exception("disk full")
    )

    with pytest.raises(PersistenceError):
        harness.service.close_month(_command())

    assert harness.session.commits == 0
    assert harness.session.rollbacks == 1


def test_concurrent_insert_of_same_period_maps_to_already_closed() -> None:
    harness = _harness()
    concurrent = MonthlyClosing(
        location_id="loc-1",
        period_year=2024,
        period_month=6,
    )

    def add_raising_integrity(
        closing: MonthlyClosing, settlements: list[SettlementDetailRow]
    ) -> MonthlyClosing:
        # The other transaction committed between the guard check and insert.
        harness.closings.closings.append(concurrent)
        raise IntegrityError("INSERT INTO monthly_closings", {}, Exception("dup"))

    harness.closings.add = add_raising_integrity  # type: ignore[method-assign]

    with pytest.raises(PeriodAlreadyClosedError):
        harness.service.close_month(_command())

    assert harness.shareholders.applied == {}
    assert harness.session.rollbacks == 1


def test_preview_computes_without_committing() -> None:
    harness = _harness(net_profit=Decimal("-500.00"))

    preview = harness.service.preview(
        location_id="loc-1",
        year=2024,
        month=6,
        retained_amount=Decimal("0.00"),
    )

    assert preview.is_closed is False
    assert [item.period_share for item in preview.result.settlements] == [
        Decimal("-300.00"),
        Decimal("0.00"),
    ]
    assert harness.session.commits == 0


def test_get_closing_of_open_period_raises_not_found() -> None:
    harness = _harness()

    with pytest.raises(RecordNotFoundError):
        harness.service.get_closing(location_id="loc-1", year=2024, month=6)
