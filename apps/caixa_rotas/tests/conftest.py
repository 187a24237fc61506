from __future__ import annotations

from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from caixa_rotas.api.app import create_app
from caixa_rotas.db.base import Base, import_orm_models
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.db.session import get_db_session

LOCATION_ID = "loc-1"


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)


def seed_two_shareholders(session: Session) -> tuple[str, str]:
    shareholder_a = Shareholder(
        id="socio-a",
        location_id=LOCATION_ID,
        name="Ana",
        percentage=Decimal("60.00"),
        participates_in_loss=True,
        accumulated_balance=Decimal("0.00"),
        is_active=True,
    )
    shareholder_b = Shareholder(
        id="socio-b",
        location_id=LOCATION_ID,
        name="Bia",
        percentage=Decimal("40.00"),
        participates_in_loss=False,
        accumulated_balance=Decimal("0.00"),
        is_active=True,
    )
    session.add_all([shareholder_a, shareholder_b])
    session.commit()
    return shareholder_a.id, shareholder_b.id


@pytest.fixture
def client(
    sqlite_session_factory: sessionmaker[Session],
) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def shareholders(sqlite_session_factory: sessionmaker[Session]) -> tuple[str, str]:
    with sqlite_session_factory() as session:
        shareholder_a, shareholder_b = seed_two_shareholders(session)
    return shareholder_a, shareholder_b
