"""Pydantic schemas for shareholder endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from caixa_rotas.api.schemas.common import MONEY_PATTERN
from caixa_rotas.db.models.shareholder import Shareholder
from caixa_rotas.domain.money import format_money


class ShareholderResponse(BaseModel):
    """Public shareholder representation, usable as a closing snapshot."""

    id: str
    name: str
    percentage: str
    participates_in_loss: bool
    accumulated_balance: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_model(cls, shareholder: Shareholder) -> ShareholderResponse:
        return cls(
            id=shareholder.id,
            name=shareholder.name,
            percentage=format_money(shareholder.percentage),
            participates_in_loss=shareholder.participates_in_loss,
            accumulated_balance=format_money(shareholder.accumulated_balance),
        )


class ShareholdersListResponse(BaseModel):
    """Shareholders list payload."""

    shareholders: list[ShareholderResponse]

    @classmethod
    def from_models(cls, shareholders: list[Shareholder]) -> ShareholdersListResponse:
        return cls(
            shareholders=[ShareholderResponse.from_model(item) for item in shareholders]
        )
