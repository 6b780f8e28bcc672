"""Unit tests for the expense editing helpers."""

from __future__ import annotations

from fiscalticket.backend.app.services.calculators import (
    ConsumptionLineItem,
    ExpenseCategory,
    TaxTreatment,
)
from fiscalticket.backend.app.services.expenses import (
    default_categories,
    total_monthly_expenses,
    update_category,
    update_line_item,
    update_vat_distribution,
)
from fiscalticket.backend.config.dataset import load_catalog


def _categories() -> tuple[ExpenseCategory, ...]:
    return (
        ExpenseCategory(
            id="transport",
            name="Transporte",
            line_items=(
                ConsumptionLineItem(id="fuel", name="Gasolina", amount=120, treatment=TaxTreatment.FUEL_EXCISE),
                ConsumptionLineItem(id="bus", name="Bus", amount=40, vat_rate=10),
            ),
        ),
        ExpenseCategory(id="food", name="Alimentación", total=300, vat_distribution={4: 60, 10: 40}),
    )


def test_update_line_item_recomputes_category_total() -> None:
    original = _categories()
    updated = update_line_item(original, "transport", "bus", amount=60)

    assert updated[0].total == 180
    assert updated[0].line_items[1].amount == 60
    assert original[0].total == 160
    assert updated[1] is original[1]


def test_update_category_in_simple_mode() -> None:
    original = _categories()
    updated = update_category(original, "food", total=450)

    assert updated[1].total == 450
    assert original[1].total == 300


def test_update_vat_distribution_copies_mapping() -> None:
    original = _categories()
    updated = update_vat_distribution(original, "food", 21, 10)

    assert dict(updated[1].vat_distribution) == {4: 60, 10: 40, 21: 10}
    assert 21 not in original[1].vat_distribution


def test_unknown_identifiers_leave_categories_untouched() -> None:
    original = _categories()

    assert update_category(original, "missing", total=10) == original
    assert update_line_item(original, "transport", "missing", amount=10) == original


def test_total_monthly_expenses() -> None:
    assert total_monthly_expenses(_categories()) == 460
    assert total_monthly_expenses([]) == 0


def test_default_categories_follow_catalog() -> None:
    catalog = load_catalog()
    categories = default_categories(catalog)

    assert [category.id for category in categories] == [entry.id for entry in catalog.categories]
    assert all(category.total == 0 for category in categories)
    assert all(dict(category.vat_distribution) == {4: 0.0, 10: 0.0, 21: 0.0} for category in categories)

    treatments = {item.treatment for category in categories for item in category.line_items}
    assert TaxTreatment.FUEL_EXCISE in treatments
    assert TaxTreatment.INSURANCE_PREMIUM_TAX in treatments
