"""Meter reading routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from caixa_rotas.api.dependencies import get_current_user_id, get_reading_service
from caixa_rotas.api.schemas.readings import (
    CreateReadingRequest,
    ReadingResponse,
    UpdateReadingRequest,
)
from caixa_rotas.domain.errors import RecordNotFoundError, compose_error_message
from caixa_rotas.services.reading_service import ReadingService

router = APIRouter(prefix="/readings", tags=["Readings"])
operators_router = APIRouter(prefix="/operators", tags=["Readings"])


@router.post(
    "",
    response_model=ReadingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Payload invalido"},
        409: {"description": "Periodo ja fechado"},
    },
)
def create_reading(
    payload: CreateReadingRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ReadingService, Depends(get_reading_service)],
) -> ReadingResponse:
    """Register a meter reading and compute its totals."""

    reading = service.create_reading(payload.to_input(), user_id=user_id)
    return ReadingResponse.from_model(reading)


@router.patch(
    "/{reading_id}",
    response_model=ReadingResponse,
    responses={
        400: {"description": "Payload invalido"},
        404: {"description": "Leitura nao encontrada"},
        409: {"description": "Periodo ja fechado"},
    },
)
def update_reading(
    reading_id: UUID,
    payload: UpdateReadingRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ReadingService, Depends(get_reading_service)],
) -> ReadingResponse:
    """Edit a reading of an open period and recompute its totals."""

    reading = service.update_reading(reading_id, payload.to_input(), user_id=user_id)
    return ReadingResponse.from_model(reading)


@router.delete(
    "/{reading_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Leitura nao encontrada"},
        409: {"description": "Periodo ja fechado"},
    },
)
def delete_reading(
    reading_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[ReadingService, Depends(get_reading_service)],
) -> Response:
    """Soft delete a reading of an open period."""

    service.soft_delete_reading(reading_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@operators_router.get(
    "/{operator_id}/last-reading",
    response_model=ReadingResponse,
    responses={
        404: {"description": "Operador sem leituras"},
    },
)
def get_last_reading(
    operator_id: Annotated[str, Path(min_length=1, max_length=64)],
    service: Annotated[ReadingService, Depends(get_reading_service)],
) -> ReadingResponse:
    """Return the most recent active reading of an operator."""

    reading = service.get_last_reading(operator_id)
    if reading is None:
        raise RecordNotFoundError(
            message=compose_error_message(
                cause=f"Operator {operator_id} has no active reading.",
                action="Register a reading for this operator first.",
            ),
            details={"operator_id": operator_id},
        )
    return ReadingResponse.from_model(reading)
