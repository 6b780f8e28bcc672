"""Orchestrate request validation, the fiscal calculators and serialisation.

The calculation service converts validated API payloads into the frozen
calculator inputs, runs the income tax, contribution, consumption and
aggregation steps against the active dataset and assembles a localised,
rounded response. Profiling hooks live here so that the calculators stay pure.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from fiscalticket.backend.app.localization import Translator, get_translator
from fiscalticket.backend.app.models import (
    CalculationRequest,
    CalculationResponse,
    CategoryInput,
    format_validation_error,
)
from fiscalticket.backend.config.dataset import (
    ContributionSide,
    FiscalDataset,
    PayrollConfig,
    load_catalog,
    load_dataset,
)

from .calculators import (
    BracketTranche,
    ConsumptionLineItem,
    ExpenseCategory,
    FiscalAggregates,
    IncomeTaxResult,
    IndirectTaxBreakdown,
    SocialContributionBreakdown,
    TaxpayerProfile,
    calculate_aggregates,
    calculate_income_tax,
    calculate_indirect_taxes,
    contribution_breakdown,
    display_figures,
    round_currency,
    round_rate,
)
from .expenses import default_categories, total_monthly_expenses

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("FISCALTICKET_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate_payments(value: int | None, payroll: PayrollConfig) -> int:
    if value is None:
        return payroll.default_payments_per_year

    if value not in payroll.allowed_payments_per_year:
        allowed = ", ".join(str(entry) for entry in payroll.allowed_payments_per_year)
        raise ValueError(
            f"Field 'payments_per_year' must match an allowed payroll frequency ({allowed})"
        )
    return value


def _build_categories(
    categories: Sequence[CategoryInput], dataset: FiscalDataset
) -> tuple[ExpenseCategory, ...]:
    built: list[ExpenseCategory] = []
    for category in categories:
        items = tuple(
            ConsumptionLineItem(
                id=item.id,
                name=item.name or item.id,
                amount=item.amount,
                vat_rate=item.vat_rate,
                treatment=item.treatment,
                special_rate=item.special_rate,
                unit_price=item.unit_price,
            )
            for item in category.line_items
        )
        distribution = {rate: 0.0 for rate in dataset.vat_rates}
        distribution.update(category.vat_distribution)
        built.append(
            ExpenseCategory(
                id=category.id,
                name=category.name or category.id,
                total=category.total,
                line_items=items,
                vat_distribution=distribution,
            )
        )
    return tuple(built)


def _serialise_tranches(tranches: Sequence[BracketTranche]) -> list[dict[str, Any]]:
    return [
        {
            "lower": round_currency(tranche.lower),
            "upper": tranche.upper,
            "rate": tranche.rate,
            "taxed_amount": round_currency(tranche.taxed_amount),
            "tax": round_currency(tranche.tax),
            "active": tranche.active,
            "fill_ratio": round_rate(tranche.fill_ratio),
        }
        for tranche in tranches
    ]


def _serialise_income_tax(
    result: IncomeTaxResult, dataset: FiscalDataset
) -> dict[str, Any]:
    jurisdiction = dataset.get_jurisdiction(result.jurisdiction_id)
    return {
        "jurisdiction_id": result.jurisdiction_id,
        "jurisdiction_name": jurisdiction.name if jurisdiction is not None else None,
        "regime": result.regime.value,
        "unified": bool(jurisdiction is not None and jurisdiction.is_unified),
        "gross": round_currency(result.gross),
        "social_security_deduction": round_currency(result.social_security_deduction),
        "general_expense": round_currency(result.general_expense),
        "net_work_income": round_currency(result.net_work_income),
        "work_reduction": round_currency(result.work_reduction),
        "reduced_net_income": round_currency(result.reduced_net_income),
        "personal_minimum": round_currency(result.personal_minimum),
        "taxable_base": round_currency(result.taxable_base),
        "national_tax": round_currency(result.national_tax),
        "regional_tax": round_currency(result.regional_tax),
        "total_tax": round_currency(result.total_tax),
        "effective_rate": round_rate(result.effective_rate),
        "tranches": {
            scale: _serialise_tranches(entries)
            for scale, entries in result.tranches.items()
        },
    }


def _serialise_contribution(
    breakdown: SocialContributionBreakdown,
    dataset: FiscalDataset,
    translator: Translator,
) -> dict[str, Any]:
    table = dataset.social_security.table(breakdown.side)
    side = breakdown.side.value
    return {
        "side": side,
        "label": translator(f"contributions.{side}"),
        "base": round_currency(breakdown.base),
        "capped": breakdown.capped,
        "rate": round_rate(breakdown.rate),
        "total": round_currency(breakdown.total),
        "components": [
            {
                "id": name,
                "label": translator(f"contributions.components.{name}"),
                "rate": round_rate(table.components[name]),
                "amount": round_currency(amount),
            }
            for name, amount in breakdown.components.items()
        ],
    }


def _serialise_indirect(
    breakdown: IndirectTaxBreakdown, translator: Translator
) -> dict[str, Any]:
    ledger = []
    for entry in breakdown.ledger:
        kind = entry.special_kind.value if entry.special_kind is not None else None
        ledger.append(
            {
                "name": entry.name,
                "vat": round_currency(entry.vat),
                "special": round_currency(entry.special),
                "direct": round_currency(entry.direct),
                "total": round_currency(entry.total),
                "special_kind": kind,
                "special_label": translator(f"special.{kind}") if kind else None,
                "category_id": entry.category_id,
                "item_id": entry.item_id,
            }
        )

    special_by_kind = breakdown.special_by_kind()
    labels = {
        f"vat_{rate}": translator(f"indirect.vat_{rate}") for rate in breakdown.vat_by_rate
    }
    labels.update({kind: translator(f"indirect.{kind}") for kind in special_by_kind})
    labels["direct_taxes"] = translator("indirect.direct_taxes")
    labels["grand_total"] = translator("indirect.grand_total")

    return {
        "vat_by_rate": {
            str(rate): round_currency(amount)
            for rate, amount in sorted(breakdown.vat_by_rate.items())
        },
        "special_by_kind": {
            kind: round_currency(amount) for kind, amount in special_by_kind.items()
        },
        "direct_taxes": round_currency(breakdown.direct_taxes),
        "total_vat": round_currency(breakdown.total_vat),
        "total_special": round_currency(breakdown.total_special),
        "grand_total": round_currency(breakdown.grand_total),
        "ledger": ledger,
        "labels": labels,
    }


def _serialise_aggregates(aggregates: FiscalAggregates) -> dict[str, Any]:
    return {
        "gross": round_currency(aggregates.gross),
        "employer_cost": round_currency(aggregates.employer_cost),
        "employer_contribution": round_currency(aggregates.employer_contribution),
        "employee_contribution": round_currency(aggregates.employee_contribution),
        "income_tax": round_currency(aggregates.income_tax),
        "net_salary": round_currency(aggregates.net_salary),
        "net_monthly_12": round_currency(aggregates.net_per_payment(12)),
        "net_monthly_14": round_currency(aggregates.net_per_payment(14)),
        "indirect_taxes": round_currency(aggregates.indirect_taxes),
        "state_share": round_currency(aggregates.state_share),
        "individual_share": round_currency(aggregates.individual_share),
        "state_share_ratio": round_rate(aggregates.state_share_ratio),
        "individual_share_ratio": round_rate(aggregates.individual_share_ratio),
    }


def calculate_fiscal_ticket(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute the fiscal ticket for the provided payload."""

    if isinstance(payload, CalculationRequest):
        request_model = payload
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        try:
            request_model = CalculationRequest.model_validate(payload)
        except ValidationError as exc:
            raise ValueError(format_validation_error(exc)) from exc

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    dataset = load_dataset()
    payments = _validate_payments(request_model.payments_per_year, dataset.payroll)
    jurisdiction_id = request_model.jurisdiction_id or dataset.meta.default_jurisdiction

    profile_input = request_model.profile
    profile = TaxpayerProfile(
        gross_annual_salary=profile_input.gross_annual_salary,
        jurisdiction_id=jurisdiction_id,
        children=profile_input.children,
        children_under_three=profile_input.children_under_three,
        other_income=profile_input.other_income,
    )

    if request_model.categories is None:
        categories = default_categories(load_catalog(), dataset.vat_rates)
    else:
        categories = _build_categories(request_model.categories, dataset)

    translator = get_translator(request_model.locale)

    with _profile_section("income_tax", timings):
        income_tax = calculate_income_tax(profile, dataset)

    with _profile_section("social_security", timings):
        contributions = {
            side.value: contribution_breakdown(
                profile.gross_annual_salary, side, dataset.social_security
            )
            for side in ContributionSide
        }

    with _profile_section("indirect_taxes", timings):
        indirect = calculate_indirect_taxes(categories, dataset.excise, dataset.vat_rates)

    with _profile_section("aggregation", timings):
        aggregates = calculate_aggregates(
            profile.gross_annual_salary,
            income_tax.effective_rate,
            indirect.grand_total,
            dataset.social_security,
        )
        monthly_expenses = total_monthly_expenses(categories)
        display = display_figures(
            aggregates, monthly_expenses, request_model.view_mode, payments
        )

    if not income_tax.jurisdiction_found:
        _LOGGER.info(
            "Jurisdiction '%s' not declared in snapshot %s",
            jurisdiction_id,
            dataset.meta.snapshot,
        )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_fiscal_ticket timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    display_payload = {
        "view_mode": display.view_mode,
        "payments_per_year": display.payments_per_year,
        "salary_factor": round_rate(display.salary_factor),
        "expense_factor": display.expense_factor,
        "gross": round_currency(display.gross),
        "employer_cost": round_currency(display.employer_cost),
        "employer_contribution": round_currency(display.employer_contribution),
        "employee_contribution": round_currency(display.employee_contribution),
        "income_tax": round_currency(display.income_tax),
        "net_salary": round_currency(display.net_salary),
        "expenses": round_currency(display.expenses),
        "indirect_taxes": round_currency(display.indirect_taxes),
        "available_salary": round_currency(display.available_salary),
    }

    response_model = CalculationResponse.model_validate(
        {
            "income_tax": _serialise_income_tax(income_tax, dataset),
            "social_contributions": {
                side: _serialise_contribution(breakdown, dataset, translator)
                for side, breakdown in contributions.items()
            },
            "indirect_taxes": _serialise_indirect(indirect, translator),
            "aggregates": _serialise_aggregates(aggregates),
            "display": display_payload,
            "meta": {
                "snapshot": dataset.meta.snapshot,
                "currency": dataset.meta.currency,
                "locale": translator.locale,
                "jurisdiction_fallback": not income_tax.jurisdiction_found,
            },
        }
    )

    return response_model.model_dump(mode="json")


__all__ = ["calculate_fiscal_ticket"]
