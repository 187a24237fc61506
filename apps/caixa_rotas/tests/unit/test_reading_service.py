from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry
from caixa_rotas.db.models.reading import Reading
from caixa_rotas.domain.errors import (
    PeriodAlreadyClosedError,
    RecordNotFoundError,
    ValidationError,
)
from caixa_rotas.domain.value_objects import Period
from caixa_rotas.services.audit_service import AuditService
from caixa_rotas.services.period_lock import PeriodLockGuard
from caixa_rotas.services.reading_service import (
    CreateReadingInput,
    ReadingService,
    UpdateReadingInput,
)


class FakeSession:
    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def refresh(self, instance: object) -> None:
        _ = instance


@dataclass
class FakeReadingRepository:
    readings: list[Reading] = field(default_factory=list)

    def add(self, reading: Reading) -> Reading:
        reading.id = uuid4()
        self.readings.append(reading)
        return reading

    def get_active(self, reading_id: UUID) -> Reading | None:
        for reading in self.readings:
            if reading.id == reading_id and reading.is_active:
                return reading
        return None

    def get_last_active_for_operator(self, operator_id: str) -> Reading | None:
        candidates = [
            item
            for item in self.readings
            if item.operator_id == operator_id and item.is_active
        ]
        return candidates[-1] if candidates else None


@dataclass
class FakeClosingRepository:
    closed: set[tuple[str, Period]] = field(default_factory=set)

    def exists_for_period(self, *, location_id: str, period: Period) -> bool:
        return (location_id, period) in self.closed


@dataclass
class FakeAuditRecorder:
    actions: list[AuditAction] = field(default_factory=list)

    def record(
        self,
        *,
        user_id: str,
        action: AuditAction,
        collection: str,
        document_id: str,
        details: str,
    ) -> None:
        self.actions.append(action)


@dataclass
class Harness:
    service: ReadingService
    repository: FakeReadingRepository
    closings: FakeClosingRepository
    audit: FakeAuditRecorder
    session: FakeSession


def _harness() -> Harness:
    repository = FakeReadingRepository()
    closings = FakeClosingRepository()
    audit = FakeAuditRecorder()
    session = FakeSession()
    service = ReadingService(
        reading_repository=repository,
        period_lock_guard=PeriodLockGuard(closings),
        audit_service=audit,
        session=session,
        default_commission_percentage=Decimal("20"),
    )
    return Harness(service, repository, closings, audit, session)


def _payload(**overrides: object) -> CreateReadingInput:
    values: dict[str, object] = {
        "location_id": "loc-1",
        "route_id": "rota-1",
        "point_id": "ponto-1",
        "operator_id": "maq-1",
        "reading_date": date(2024, 6, 10),
        "current_entries": Decimal("1500"),
        "current_exits": Decimal("300"),
    }
    values.update(overrides)
    return CreateReadingInput(**values)  # type: ignore[arg-type]


def test_create_reading_defaults_previous_counters_and_commission() -> None:
    harness = _harness()

    reading = harness.service.create_reading(_payload(), user_id="user-1")

    assert reading.previous_entries == Decimal("0.00")
    assert reading.total_general == Decimal("1200.00")
    assert reading.commission_percentage == Decimal("20")
    assert reading.commission_amount == Decimal("240.00")
    assert reading.total_final == Decimal("960.00")
    assert harness.session.committed is True
    assert harness.audit.actions == [AuditAction.CREATE]


def test_create_reading_continues_from_last_operator_reading() -> None:
    harness = _harness()
    harness.service.create_reading(_payload(), user_id="user-1")

    reading = harness.service.create_reading(
        _payload(
            reading_date=date(2024, 6, 20),
            current_entries=Decimal("1800"),
            current_exits=Decimal("350"),
        ),
        user_id="user-1",
    )

    assert reading.previous_entries == Decimal("1500")
    assert reading.previous_exits == Decimal("300")
    assert reading.total_general == Decimal("250.00")


def test_create_reading_in_closed_period_writes_nothing() -> None:
    harness = _harness()
    harness.closings.closed.add(("loc-1", Period(year=2024, month=6)))

    with pytest.raises(PeriodAlreadyClosedError):
        harness.service.create_reading(_payload(), user_id="user-1")

    assert harness.repository.readings == []
    assert harness.audit.actions == []
    assert harness.session.rolled_back is True


def test_update_cannot_move_reading_into_closed_period() -> None:
    harness = _harness()
    reading = harness.service.create_reading(_payload(), user_id="user-1")
    harness.closings.closed.add(("loc-1", Period(year=2024, month=5)))

    with pytest.raises(PeriodAlreadyClosedError):
        harness.service.update_reading(
            reading.id,
            UpdateReadingInput(reading_date=date(2024, 5, 31)),
            user_id="user-1",
        )

    assert reading.reading_date == date(2024, 6, 10)


def test_update_recomputes_totals() -> None:
    harness = _harness()
    reading = harness.service.create_reading(_payload(), user_id="user-1")

    updated = harness.service.update_reading(
        reading.id,
        UpdateReadingInput(expense=Decimal("60.00")),
        user_id="user-2",
    )

    assert updated.total_final == Decimal("900.00")
    assert updated.updated_by == "user-2"
    assert harness.audit.actions == [AuditAction.CREATE, AuditAction.UPDATE]


def test_soft_delete_hides_reading() -> None:
    harness = _harness()
    reading = harness.service.create_reading(_payload(), user_id="user-1")

    harness.service.soft_delete_reading(reading.id, user_id="user-1")

    assert reading.is_active is False
    with pytest.raises(RecordNotFoundError):
        harness.service.soft_delete_reading(reading.id, user_id="user-1")


def test_create_reading_requires_user() -> None:
    harness = _harness()

    with pytest.raises(ValidationError):
        harness.service.create_reading(_payload(), user_id=" ")


class BrokenAuditRepository:
    def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("down"))


def test_audit_failure_does_not_undo_reading() -> None:
    repository = FakeReadingRepository()
    session = FakeSession()
    service = ReadingService(
        reading_repository=repository,
        period_lock_guard=PeriodLockGuard(FakeClosingRepository()),
        audit_service=AuditService(
            audit_repository=BrokenAuditRepository(), session=session
        ),
        session=session,
        default_commission_percentage=Decimal("20"),
    )

    reading = service.create_reading(_payload(), user_id="user-1")

    assert repository.readings == [reading]
    assert session.committed is True
