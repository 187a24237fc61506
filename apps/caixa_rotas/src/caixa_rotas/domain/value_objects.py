"""Domain value objects for period handling."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class Period:
    """Represents a calendar month of one year."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError("Month must be between 1 and 12")
        if not 1000 <= self.year <= 9999:
            raise ValueError("Year must have four digits")

    @classmethod
    def from_date(cls, value: date) -> Period:
        """Return the period containing the given date."""
        return cls(year=value.year, month=value.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(
            self.year, self.month, calendar.monthrange(self.year, self.month)[1]
        )

    def label(self) -> str:
        """Return the human label used in messages, e.g. ``6/2024``."""
        return f"{self.month}/{self.year}"

    def to_key(self) -> str:
        """Return normalized period key in YYYY-MM format."""
        return f"{self.year:04d}-{self.month:02d}"
