"""Profit distribution among the shareholders of a location.

Everything here is pure: callers fetch balances and advances beforehand and
pass them as value objects. Amounts are ``Decimal``; the period share is
rounded once, when the settlement line is built, so that the final amount
and the new balance are exact sums of persisted values.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from caixa_rotas.domain.errors import (
    InvalidDistributionError,
    ValidationError,
    compose_error_message,
)
from caixa_rotas.domain.money import ZERO, quantize_money

ONE_HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class ShareholderInput:
    """Shareholder state required to compute one settlement line."""

    shareholder_id: str
    name: str
    percentage: Decimal
    participates_in_loss: bool
    accumulated_balance: Decimal = ZERO
    advances_for_period: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class SettlementDetail:
    """Computed breakdown of one shareholder's result for one closing."""

    shareholder_id: str
    shareholder_name: str
    percentage: Decimal
    period_share: Decimal
    prior_balance_carried: Decimal
    advances_deducted: Decimal
    final_amount: Decimal
    new_accumulated_balance: Decimal

    @property
    def is_presentable(self) -> bool:
        """False for lines with no percentage, balance or advance at all."""
        return not (
            self.percentage == 0
            and self.prior_balance_carried == 0
            and self.advances_deducted == 0
        )


@dataclass(frozen=True, slots=True)
class DistributionResult:
    """Settlement lines plus the period totals they were derived from."""

    net_profit: Decimal
    retained_amount: Decimal
    distributable_base: Decimal
    settlements: list[SettlementDetail]

    @property
    def total_period_share(self) -> Decimal:
        return sum((item.period_share for item in self.settlements), ZERO)

    @property
    def undistributed_amount(self) -> Decimal:
        """Part of the base not assigned to anyone.

        Non-zero when percentages sum below 100 or when a negative base is
        shielded for shareholders outside loss participation.
        """
        return self.distributable_base - self.total_period_share


def validate_distribution_inputs(
    net_profit: Decimal,
    retained_amount: Decimal,
    shareholders: Sequence[ShareholderInput],
) -> None:
    """Reject inputs that must never reach the distribution."""

    if not shareholders:
        raise ValidationError(
            message=compose_error_message(
                cause="No shareholder was provided for the distribution.",
                action="Register the location shareholders before closing.",
            )
        )

    seen_ids: set[str] = set()
    for shareholder in shareholders:
        if shareholder.shareholder_id in seen_ids:
            raise ValidationError(
                message=compose_error_message(
                    cause=(
                        f"Shareholder {shareholder.shareholder_id} appears more "
                        "than once."
                    ),
                    action="Send each shareholder a single time.",
                ),
                details={"shareholder_id": shareholder.shareholder_id},
            )
        seen_ids.add(shareholder.shareholder_id)
        if not ZERO <= shareholder.percentage <= ONE_HUNDRED:
            raise ValidationError(
                message=compose_error_message(
                    cause=(
                        f"Percentage of shareholder {shareholder.shareholder_id} "
                        "must be between 0 and 100."
                    ),
                    action="Fix the shareholder percentage.",
                ),
                details={
                    "shareholder_id": shareholder.shareholder_id,
                    "percentage": str(shareholder.percentage),
                },
            )

    total_percentage = sum((item.percentage for item in shareholders), ZERO)
    if total_percentage > ONE_HUNDRED:
        raise InvalidDistributionError(
            message=compose_error_message(
                cause=(
                    f"Shareholder percentages sum to {total_percentage}%, "
                    "above 100%."
                ),
                action="Adjust the percentages so they total at most 100%.",
            ),
            details={"total_percentage": str(total_percentage)},
        )

    ensure_retained_within_profit(net_profit, retained_amount)


def ensure_retained_within_profit(
    net_profit: Decimal, retained_amount: Decimal
) -> None:
    """Check the retained amount against the period net profit.

    Retaining nothing is always allowed, including in a loss month.
    """

    if retained_amount < 0 or (
        retained_amount > 0 and retained_amount > net_profit
    ):
        raise InvalidDistributionError(
            message=compose_error_message(
                cause=(
                    f"Retained amount {retained_amount} is not within the "
                    f"period net profit {net_profit}."
                ),
                action="Retain a non-negative amount up to the net profit.",
            ),
            retained_amount=retained_amount,
            net_profit=net_profit,
        )


def settle_shareholder(
    distributable_base: Decimal, shareholder: ShareholderInput
) -> SettlementDetail:
    """Compute the settlement line of a single shareholder."""

    raw_share = distributable_base * (shareholder.percentage / ONE_HUNDRED)
    if distributable_base < 0 and not shareholder.participates_in_loss:
        raw_share = ZERO

    period_share = quantize_money(raw_share)
    prior_balance = quantize_money(shareholder.accumulated_balance)
    advances = quantize_money(shareholder.advances_for_period)
    final_amount = period_share + prior_balance - advances
    return SettlementDetail(
        shareholder_id=shareholder.shareholder_id,
        shareholder_name=shareholder.name,
        percentage=shareholder.percentage,
        period_share=period_share,
        prior_balance_carried=prior_balance,
        advances_deducted=advances,
        final_amount=final_amount,
        # Running current account: whatever is owed is carried forward.
        new_accumulated_balance=final_amount,
    )


def distribute(
    net_profit: Decimal,
    retained_amount: Decimal,
    shareholders: Sequence[ShareholderInput],
) -> DistributionResult:
    """Validate inputs and compute every settlement line."""

    validate_distribution_inputs(net_profit, retained_amount, shareholders)
    distributable_base = net_profit - retained_amount
    settlements = [
        settle_shareholder(distributable_base, shareholder)
        for shareholder in shareholders
    ]
    return DistributionResult(
        net_profit=net_profit,
        retained_amount=retained_amount,
        distributable_base=distributable_base,
        settlements=settlements,
    )


def compute_distribution(
    net_profit: Decimal,
    retained_amount: Decimal,
    shareholders: Sequence[ShareholderInput],
) -> list[SettlementDetail]:
    """Return the settlement lines for the given period values."""

    return distribute(net_profit, retained_amount, shareholders).settlements
