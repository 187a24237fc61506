"""Meter reading arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from caixa_rotas.domain.errors import ValidationError, compose_error_message
from caixa_rotas.domain.money import ZERO, quantize_money


@dataclass(frozen=True, slots=True)
class ReadingTotals:
    """Derived values of a meter reading."""

    total_entries: Decimal
    total_exits: Decimal
    total_general: Decimal
    commission_amount: Decimal
    total_final: Decimal


def compute_reading_totals(
    *,
    previous_entries: Decimal,
    current_entries: Decimal,
    previous_exits: Decimal,
    current_exits: Decimal,
    commission_percentage: Decimal,
    expense: Decimal = ZERO,
) -> ReadingTotals:
    """Compute machine result, commission and net cash of a reading.

    Commission is charged only over a positive machine result. The expense
    paid at the point is subtracted from the cash delivered to the company.
    """

    if current_entries < previous_entries or current_exits < previous_exits:
        raise ValidationError(
            message=compose_error_message(
                cause="Current meter counters are lower than the previous ones.",
                action="Check the counters typed for this reading.",
            ),
            details={
                "previous_entries": str(previous_entries),
                "current_entries": str(current_entries),
                "previous_exits": str(previous_exits),
                "current_exits": str(current_exits),
            },
        )
    if not ZERO <= commission_percentage <= Decimal("100"):
        raise ValidationError(
            message=compose_error_message(
                cause="Commission percentage must be between 0 and 100.",
                action="Fix the commission percentage.",
            )
        )
    if expense < 0:
        raise ValidationError(
            message=compose_error_message(
                cause="Expense at the point cannot be negative.",
                action="Send zero or a positive expense.",
            )
        )

    total_entries = current_entries - previous_entries
    total_exits = current_exits - previous_exits
    total_general = total_entries - total_exits
    commission_amount = ZERO
    if total_general > 0:
        commission_amount = quantize_money(
            total_general * commission_percentage / Decimal("100")
        )
    total_final = quantize_money(total_general - commission_amount - expense)
    return ReadingTotals(
        total_entries=quantize_money(total_entries),
        total_exits=quantize_money(total_exits),
        total_general=quantize_money(total_general),
        commission_amount=commission_amount,
        total_final=total_final,
    )
