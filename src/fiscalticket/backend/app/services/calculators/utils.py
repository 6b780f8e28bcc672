"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fiscalticket.backend.config.dataset import TaxBracket


@dataclass(frozen=True, slots=True)
class BracketTranche:
    """Portion of a taxable base that falls inside a single bracket."""

    lower: float
    upper: float | None
    rate: float
    taxed_amount: float
    tax: float
    active: bool
    fill_ratio: float


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = value * 100
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def calculate_progressive_tax(amount: float, brackets: Sequence[TaxBracket]) -> float:
    """Calculate progressive tax for ``amount`` using ``brackets``."""

    if amount <= 0:
        return 0.0

    total = 0.0
    remaining = amount
    previous_limit = 0.0

    for bracket in brackets:
        upper = bracket.upper_bound
        span = remaining if upper is None else upper - previous_limit
        tranche = min(remaining, span)
        if tranche <= 0:
            break

        total += tranche * bracket.rate
        remaining -= tranche
        if upper is None:
            break
        previous_limit = upper

    return total


def bracket_tranches(amount: float, brackets: Sequence[TaxBracket]) -> list[BracketTranche]:
    """Describe how ``amount`` fills every bracket of the scale.

    Brackets the amount does not reach are still listed with a zero tax so that
    callers can render the full scale.
    """

    tranches: list[BracketTranche] = []
    remaining = max(amount, 0.0)
    previous_limit = 0.0

    for bracket in brackets:
        upper = bracket.upper_bound
        span = None if upper is None else upper - previous_limit
        taxed = remaining if span is None else min(remaining, span)
        taxed = max(taxed, 0.0)
        remaining -= taxed

        if taxed <= 0:
            fill_ratio = 0.0
        elif span is None or span <= 0:
            fill_ratio = 1.0
        else:
            fill_ratio = min(taxed / span, 1.0)

        tranches.append(
            BracketTranche(
                lower=previous_limit,
                upper=upper,
                rate=bracket.rate,
                taxed_amount=taxed,
                tax=taxed * bracket.rate,
                active=taxed > 0,
                fill_ratio=fill_ratio,
            )
        )
        if upper is not None:
            previous_limit = upper

    return tranches


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
