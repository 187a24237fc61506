"""Monthly financial summary routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from caixa_rotas.api.dependencies import get_financial_summary_service
from caixa_rotas.api.schemas.summaries import FinancialSummaryResponse
from caixa_rotas.services.financial_summary_service import FinancialSummaryService

router = APIRouter(prefix="/locations/{location_id}/months", tags=["Summaries"])


@router.get("/{year}/{month}/summary", response_model=FinancialSummaryResponse)
def get_monthly_summary(
    location_id: Annotated[str, Path(min_length=1, max_length=64)],
    year: Annotated[int, Path(ge=1000, le=9999)],
    month: Annotated[int, Path(ge=1, le=12)],
    service: Annotated[
        FinancialSummaryService, Depends(get_financial_summary_service)
    ],
) -> FinancialSummaryResponse:
    """Return consolidated revenue, expenses and net profit of the month."""

    summary = service.get_summary(location_id=location_id, year=year, month=month)
    return FinancialSummaryResponse.from_summary(summary)
