"""Copy-on-write editing helpers for expense categories.

Categories are immutable; every helper returns a new tuple and leaves the input
untouched. Unknown category or item identifiers are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from fiscalticket.backend.config.dataset import ExpenseCatalog

from .calculators.indirect_taxes import (
    DEFAULT_VAT_RATES,
    ConsumptionLineItem,
    ExpenseCategory,
    TaxTreatment,
)


def update_category(
    categories: Sequence[ExpenseCategory], category_id: str, **changes: Any
) -> tuple[ExpenseCategory, ...]:
    """Return ``categories`` with ``changes`` applied to ``category_id``."""

    return tuple(
        replace(category, **changes) if category.id == category_id else category
        for category in categories
    )


def update_line_item(
    categories: Sequence[ExpenseCategory],
    category_id: str,
    item_id: str,
    **changes: Any,
) -> tuple[ExpenseCategory, ...]:
    """Return ``categories`` with ``changes`` applied to a single line item.

    The category total follows the edited amounts.
    """

    updated: list[ExpenseCategory] = []
    for category in categories:
        if category.id != category_id:
            updated.append(category)
            continue
        items = tuple(
            replace(item, **changes) if item.id == item_id else item
            for item in category.line_items
        )
        updated.append(replace(category, line_items=items))
    return tuple(updated)


def update_vat_distribution(
    categories: Sequence[ExpenseCategory],
    category_id: str,
    rate: int,
    percentage: float,
) -> tuple[ExpenseCategory, ...]:
    """Return ``categories`` with the share of ``rate`` set to ``percentage``."""

    updated: list[ExpenseCategory] = []
    for category in categories:
        if category.id != category_id:
            updated.append(category)
            continue
        distribution = dict(category.vat_distribution)
        distribution[rate] = percentage
        updated.append(replace(category, vat_distribution=distribution))
    return tuple(updated)


def total_monthly_expenses(categories: Iterable[ExpenseCategory]) -> float:
    """Sum the monthly totals of ``categories``."""

    return sum(category.total for category in categories)


def default_categories(
    catalog: ExpenseCatalog, vat_rates: Sequence[int] = DEFAULT_VAT_RATES
) -> tuple[ExpenseCategory, ...]:
    """Build zero-amount categories from the expense catalogue."""

    categories: list[ExpenseCategory] = []
    for entry in catalog.categories:
        items = tuple(
            ConsumptionLineItem(
                id=item.id,
                name=item.name,
                vat_rate=item.vat_rate,
                treatment=TaxTreatment(item.treatment),
                special_rate=item.special_rate,
                unit_price=item.unit_price,
            )
            for item in entry.items
        )
        categories.append(
            ExpenseCategory(
                id=entry.id,
                name=entry.name,
                line_items=items,
                vat_distribution={rate: 0.0 for rate in vat_rates},
            )
        )
    return tuple(categories)


__all__ = [
    "default_categories",
    "total_monthly_expenses",
    "update_category",
    "update_line_item",
    "update_vat_distribution",
]
