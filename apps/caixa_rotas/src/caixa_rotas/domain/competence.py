"""Period resolution helpers based on the application timezone."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from caixa_rotas.core.settings import get_settings
from caixa_rotas.domain.value_objects import Period

APP_TIMEZONE = ZoneInfo(get_settings().app_timezone)


def localize(value: datetime) -> datetime:
    """Return value expressed in the application timezone."""

    if value.tzinfo is None:
        return value.replace(tzinfo=APP_TIMEZONE)
    return value.astimezone(APP_TIMEZONE)


def today() -> date:
    """Return the current date in the application timezone."""

    return datetime.now(tz=APP_TIMEZONE).date()


def period_of(value: date | datetime) -> Period:
    """Compute the calendar period containing a date or timestamp."""

    if isinstance(value, datetime):
        value = localize(value).date()
    return Period.from_date(value)
