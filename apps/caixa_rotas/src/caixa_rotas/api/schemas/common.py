"""Shared field patterns for money and percentages."""

from __future__ import annotations

from pydantic import BaseModel, Field

MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"
NON_NEGATIVE_MONEY_PATTERN = r"^[0-9]+\.[0-9]{2}$"
COUNTER_PATTERN = r"^[0-9]+(\.[0-9]{1,2})?$"
PERCENTAGE_PATTERN = r"^[0-9]{1,3}(\.[0-9]{1,2})?$"


class PeriodResponse(BaseModel):
    """Calendar period of a closing."""

    year: int = Field(ge=1000, le=9999)
    month: int = Field(ge=1, le=12)
