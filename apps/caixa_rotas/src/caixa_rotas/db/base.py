"""SQLAlchemy base metadata and model registration utilities."""

from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "caixa_rotas.db.models.shareholder",
        "caixa_rotas.db.models.monthly_closing",
        "caixa_rotas.db.models.settlement_detail",
        "caixa_rotas.db.models.reading",
        "caixa_rotas.db.models.expense",
        "caixa_rotas.db.models.audit_log",
    )
    for module_name in modules:
        import_module(module_name)
