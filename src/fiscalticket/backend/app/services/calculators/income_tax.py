"""Personal income tax (IRPF) on employment income.

The computation follows the order used by the tax authority for salaried
workers: social contributions and the general work expense are deducted from
gross salary, the tapered work-income reduction is applied, the personal and
family minimum is subtracted and the remaining base runs through the
progressive scales. Common-regime jurisdictions add their regional scale to the
national one; foral jurisdictions replace both with their own unified scale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping

from fiscalticket.backend.config.dataset import (
    FiscalDataset,
    PersonalMinimumConfig,
    Regime,
    WorkIncomeReductionConfig,
)

from .utils import BracketTranche, bracket_tranches, calculate_progressive_tax

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaxpayerProfile:
    """Salary and household attributes relevant to the income tax."""

    gross_annual_salary: float
    jurisdiction_id: str
    children: int = 0
    children_under_three: int = 0
    other_income: float = 0.0


@dataclass(frozen=True, slots=True)
class IncomeTaxResult:
    """Every intermediate figure of an income tax computation."""

    gross: float
    jurisdiction_id: str
    jurisdiction_found: bool
    regime: Regime
    social_security_deduction: float = 0.0
    general_expense: float = 0.0
    net_work_income: float = 0.0
    work_reduction: float = 0.0
    reduced_net_income: float = 0.0
    personal_minimum: float = 0.0
    taxable_base: float = 0.0
    national_tax: float = 0.0
    regional_tax: float = 0.0
    tranches: Mapping[str, list[BracketTranche]] = field(default_factory=dict)

    @property
    def total_tax(self) -> float:
        return self.national_tax + self.regional_tax

    @property
    def effective_rate(self) -> float:
        if self.gross <= 0:
            return 0.0
        return self.total_tax / self.gross


def work_income_reduction(
    net_income: float,
    other_income: float,
    config: WorkIncomeReductionConfig,
) -> float:
    """Return the reduction applicable to ``net_income`` from employment."""

    if other_income > config.max_other_income or net_income > config.max_net_income:
        return 0.0

    if net_income <= config.lower_threshold:
        return config.full_reduction

    if net_income <= config.upper_threshold:
        return config.full_reduction - config.first_slope * (
            net_income - config.lower_threshold
        )

    reduction = config.reduction_at_upper - config.second_slope * (
        net_income - config.upper_threshold
    )
    return max(0.0, reduction)


def personal_family_minimum(
    children: int,
    children_under_three: int,
    config: PersonalMinimumConfig,
) -> float:
    """Return the personal allowance plus the graduated per-child minimums."""

    total = config.personal
    for position in range(max(children, 0)):
        total += config.child_amount(position)
    total += config.child_under_three * max(children_under_three, 0)
    return total


def calculate_income_tax(profile: TaxpayerProfile, dataset: FiscalDataset) -> IncomeTaxResult:
    """Compute the income tax owed on ``profile``'s salary."""

    jurisdiction = dataset.get_jurisdiction(profile.jurisdiction_id)
    regime = jurisdiction.regime if jurisdiction is not None else Regime.COMMON
    gross = profile.gross_annual_salary

    if gross <= 0:
        return IncomeTaxResult(
            gross=0.0,
            jurisdiction_id=profile.jurisdiction_id,
            jurisdiction_found=jurisdiction is not None,
            regime=regime,
        )

    config = dataset.income_tax

    # Deducted on the uncapped salary, unlike the contribution breakdown.
    social_security = gross * dataset.social_security.employee.rate
    general_expense = config.general_work_expense
    net_work_income = max(0.0, gross - social_security - general_expense)

    reduction = work_income_reduction(
        net_work_income, profile.other_income, config.work_income_reduction
    )
    reduced_net = max(0.0, net_work_income - reduction)

    minimum = personal_family_minimum(
        profile.children, profile.children_under_three, config.minimums
    )
    taxable_base = max(0.0, reduced_net - minimum)

    tranches: dict[str, list[BracketTranche]] = {}
    if jurisdiction is not None and jurisdiction.is_unified:
        national_tax = calculate_progressive_tax(taxable_base, jurisdiction.brackets)
        regional_tax = 0.0
        tranches["unified"] = bracket_tranches(taxable_base, jurisdiction.brackets)
    else:
        national_tax = calculate_progressive_tax(taxable_base, config.national_brackets)
        tranches["national"] = bracket_tranches(taxable_base, config.national_brackets)
        if jurisdiction is None:
            _LOGGER.debug(
                "Unknown jurisdiction '%s'; applying the national scale only",
                profile.jurisdiction_id,
            )
            regional_tax = 0.0
        else:
            regional_tax = calculate_progressive_tax(taxable_base, jurisdiction.brackets)
            tranches["regional"] = bracket_tranches(taxable_base, jurisdiction.brackets)

    return IncomeTaxResult(
        gross=gross,
        jurisdiction_id=profile.jurisdiction_id,
        jurisdiction_found=jurisdiction is not None,
        regime=regime,
        social_security_deduction=social_security,
        general_expense=general_expense,
        net_work_income=net_work_income,
        work_reduction=reduction,
        reduced_net_income=reduced_net,
        personal_minimum=minimum,
        taxable_base=taxable_base,
        national_tax=national_tax,
        regional_tax=regional_tax,
        tranches=tranches,
    )


def effective_income_tax_rate(
    gross: float,
    profile: TaxpayerProfile,
    jurisdiction_id: str,
    dataset: FiscalDataset,
) -> float:
    """Return the income tax as a fraction of ``gross`` for ``profile``."""

    adjusted = replace(profile, gross_annual_salary=gross, jurisdiction_id=jurisdiction_id)
    return calculate_income_tax(adjusted, dataset).effective_rate


__all__ = [
    "IncomeTaxResult",
    "TaxpayerProfile",
    "calculate_income_tax",
    "effective_income_tax_rate",
    "personal_family_minimum",
    "work_income_reduction",
]
