"""ORM models for the caixa_rotas domain."""

from caixa_rotas.db.models.audit_log import AuditAction, AuditLogEntry
from caixa_rotas.db.models.expense import Expense, ExpenseType
from caixa_rotas.db.models.monthly_closing import MonthlyClosing
from caixa_rotas.db.models.reading import Reading
from caixa_rotas.db.models.settlement_detail import SettlementDetailRow
from caixa_rotas.db.models.shareholder import Shareholder

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "Expense",
    "ExpenseType",
    "MonthlyClosing",
    "Reading",
    "SettlementDetailRow",
    "Shareholder",
]
