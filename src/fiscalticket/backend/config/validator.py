"""Utilities for validating the fiscal dataset and surfacing issues.

The schema models reject structurally invalid data. The checks here cover the
semantic consistency that a contributor updating the yearly figures can easily
break: a discontinuous work-income reduction, foral scales that do not exceed
the national top rate, catalogue items pointing at unknown VAT rates, and so on.
"""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Sequence

from .dataset import (
    ConfigurationError,
    ExpenseCatalog,
    FiscalDataset,
    WorkIncomeReductionConfig,
    load_catalog,
    load_dataset,
    load_dataset_file,
)

_CONTINUITY_TOLERANCE = 0.05

# Kept in sync with TaxTreatment in the indirect tax calculator.
KNOWN_TREATMENTS = frozenset(
    {
        "standard",
        "exempt",
        "fuel_excise",
        "electricity_excise",
        "gas_excise",
        "alcohol_excise",
        "tobacco_excise",
        "insurance_premium_tax",
        "direct_tax",
    }
)
_VAT_FREE_TREATMENTS = frozenset({"insurance_premium_tax", "direct_tax", "exempt"})


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_work_income_reduction(config: WorkIncomeReductionConfig) -> list[str]:
    scope = "income_tax.work_income_reduction"
    errors: list[str] = []

    at_upper = config.full_reduction - config.first_slope * (
        config.upper_threshold - config.lower_threshold
    )
    if abs(at_upper - config.reduction_at_upper) > _CONTINUITY_TOLERANCE:
        errors.append(
            _format_scope(
                scope,
                (
                    "first taper ends at "
                    f"{at_upper:.2f} but reduction_at_upper is {config.reduction_at_upper:.2f}"
                ),
            )
        )

    at_cap = config.reduction_at_upper - config.second_slope * (
        config.max_net_income - config.upper_threshold
    )
    if abs(at_cap) > _CONTINUITY_TOLERANCE:
        errors.append(
            _format_scope(
                scope,
                f"second taper should reach zero at max_net_income but ends at {at_cap:.2f}",
            )
        )

    return errors


def _validate_jurisdictions(dataset: FiscalDataset) -> list[str]:
    errors: list[str] = []
    national_top = dataset.income_tax.national_brackets[-1].rate

    names = Counter(entry.name for entry in dataset.jurisdictions)
    duplicates = sorted(name for name, count in names.items() if count > 1)
    if duplicates:
        errors.append(
            _format_scope("jurisdictions", f"duplicate jurisdiction names: {duplicates}")
        )

    for jurisdiction in dataset.jurisdictions:
        scope = f"jurisdictions.{jurisdiction.id}"
        top_rate = jurisdiction.brackets[-1].rate
        if jurisdiction.is_unified and top_rate <= national_top:
            errors.append(
                _format_scope(
                    scope,
                    (
                        f"foral top rate {top_rate} should exceed the national "
                        f"top rate {national_top}"
                    ),
                )
            )
        if not jurisdiction.is_unified and top_rate > 0.5:
            errors.append(
                _format_scope(
                    scope,
                    f"regional top rate {top_rate} looks like a unified scale",
                )
            )

    return errors


def _validate_payroll(dataset: FiscalDataset) -> list[str]:
    allowed = list(dataset.payroll.allowed_payments_per_year)
    errors: list[str] = []

    if any(value <= 0 for value in allowed):
        errors.append(
            _format_scope("payroll", "allowed payroll frequencies must be positive integers")
        )
    if allowed != sorted(set(allowed)):
        errors.append(
            _format_scope("payroll", "allowed payroll frequencies should be sorted and unique")
        )
    return errors


def _validate_catalog(catalog: ExpenseCatalog, dataset: FiscalDataset) -> list[str]:
    errors: list[str] = []
    allowed_rates = {0, *dataset.vat_rates}

    for category in catalog.categories:
        for item in category.items:
            scope = f"catalog.{category.id}.{item.id}"
            if item.vat_rate not in allowed_rates:
                errors.append(
                    _format_scope(scope, f"VAT rate {item.vat_rate} is not declared")
                )
            if item.treatment not in KNOWN_TREATMENTS:
                errors.append(
                    _format_scope(scope, f"unknown tax treatment '{item.treatment}'")
                )
            if item.vat_rate and item.treatment in _VAT_FREE_TREATMENTS:
                errors.append(
                    _format_scope(scope, f"'{item.treatment}' items must not carry VAT")
                )
            if item.unit_price is not None and item.treatment != "fuel_excise":
                errors.append(
                    _format_scope(scope, "unit prices only apply to fuel items")
                )

    return errors


def validate_dataset(
    dataset: FiscalDataset, catalog: ExpenseCatalog | None = None
) -> list[str]:
    """Return a list of semantic issues detected in ``dataset``."""

    errors: list[str] = []
    errors.extend(_validate_work_income_reduction(dataset.income_tax.work_income_reduction))
    errors.extend(_validate_jurisdictions(dataset))
    errors.extend(_validate_payroll(dataset))
    if catalog is not None:
        errors.extend(_validate_catalog(catalog, dataset))
    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the fiscal dataset and report issues helpful to contributors."
    )
    parser.add_argument(
        "dataset",
        nargs="?",
        type=Path,
        help="Dataset YAML to validate (defaults to the packaged snapshot)",
    )
    parser.add_argument(
        "--skip-catalog",
        action="store_true",
        help="Do not cross-check the default expense catalogue",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        if args.dataset is not None:
            dataset = load_dataset_file(args.dataset)
        else:
            dataset = load_dataset()
        catalog = None if args.skip_catalog else load_catalog()
    except (FileNotFoundError, ConfigurationError) as error:
        print(f"failed to load dataset: {error}")
        return 1

    issues = validate_dataset(dataset, catalog)
    label = f"[{dataset.meta.snapshot}]"
    if issues:
        print(f"{label} {len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    print(f"{label} OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
