"""Monthly closing routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from caixa_rotas.api.dependencies import get_closing_service, get_current_user_id
from caixa_rotas.api.schemas.closings import (
    ClosingResponse,
    CreateClosingRequest,
    DistributionPreviewResponse,
    PreviewClosingRequest,
)
from caixa_rotas.services.closing_service import ClosingService

router = APIRouter(prefix="/locations/{location_id}/closings", tags=["Closings"])

LocationId = Annotated[str, Path(min_length=1, max_length=64)]


@router.post(
    "",
    response_model=ClosingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Payload invalido"},
        409: {"description": "Periodo ja fechado"},
        422: {"description": "Distribuicao invalida"},
        503: {"description": "Falha ao persistir o fechamento"},
    },
)
def close_month(
    location_id: LocationId,
    payload: CreateClosingRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ClosingService, Depends(get_closing_service)],
) -> ClosingResponse:
    """Close the month and distribute the profit among shareholders."""

    outcome = service.close_month(
        payload.to_command(location_id=location_id, closed_by=user_id)
    )
    return ClosingResponse.from_outcome(outcome)


@router.post(
    "/preview",
    response_model=DistributionPreviewResponse,
    responses={
        400: {"description": "Payload invalido"},
        422: {"description": "Distribuicao invalida"},
    },
)
def preview_closing(
    location_id: LocationId,
    payload: PreviewClosingRequest,
    service: Annotated[ClosingService, Depends(get_closing_service)],
) -> DistributionPreviewResponse:
    """Simulate the distribution with the current ledger, without persisting."""

    preview = service.preview(
        location_id=location_id,
        year=payload.year,
        month=payload.month,
        retained_amount=Decimal(payload.retained_amount),
        net_profit=(
            Decimal(payload.net_profit) if payload.net_profit is not None else None
        ),
    )
    return DistributionPreviewResponse.from_preview(preview)


@router.get(
    "/{year}/{month}",
    response_model=ClosingResponse,
    responses={
        404: {"description": "Periodo nao fechado"},
    },
)
def get_closing(
    location_id: LocationId,
    year: Annotated[int, Path(ge=1000, le=9999)],
    month: Annotated[int, Path(ge=1, le=12)],
    service: Annotated[ClosingService, Depends(get_closing_service)],
) -> ClosingResponse:
    """Return the persisted closing and settlement lines of a period."""

    closing = service.get_closing(location_id=location_id, year=year, month=month)
    return ClosingResponse.from_model(closing)
