"""API request and response schemas."""

from caixa_rotas.api.schemas.closings import (
    ClosingResponse,
    CreateClosingRequest,
    DistributionPreviewResponse,
    PreviewClosingRequest,
)
from caixa_rotas.api.schemas.expenses import CreateExpenseRequest, ExpenseResponse
from caixa_rotas.api.schemas.readings import CreateReadingRequest, ReadingResponse
from caixa_rotas.api.schemas.summaries import FinancialSummaryResponse

__all__ = [
    "ClosingResponse",
    "CreateClosingRequest",
    "CreateExpenseRequest",
    "CreateReadingRequest",
    "DistributionPreviewResponse",
    "ExpenseResponse",
    "FinancialSummaryResponse",
    "PreviewClosingRequest",
    "ReadingResponse",
]
