"""Shareholder routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from caixa_rotas.api.dependencies import get_shareholder_repository
from caixa_rotas.api.schemas.shareholders import ShareholdersListResponse
from caixa_rotas.repositories.shareholder_repository import ShareholderRepository

router = APIRouter(prefix="/locations/{location_id}", tags=["Shareholders"])


@router.get("/shareholders", response_model=ShareholdersListResponse)
def list_shareholders(
    location_id: Annotated[str, Path(min_length=1, max_length=64)],
    repository: Annotated[ShareholderRepository, Depends(get_shareholder_repository)],
) -> ShareholdersListResponse:
    """List active shareholders with their current balances."""

    shareholders = repository.list_active_by_location(location_id)
    return ShareholdersListResponse.from_models(shareholders)
