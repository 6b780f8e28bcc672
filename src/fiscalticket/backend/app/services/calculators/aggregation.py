"""Reconcile employer cost into the state's and the individual's shares."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fiscalticket.backend.config.dataset import SocialSecurityConfig

MONTHS_PER_YEAR = 12


class ViewMode(str, Enum):
    """Period used when presenting figures."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass(frozen=True, slots=True)
class FiscalAggregates:
    """Annual figures of the fiscal ticket."""

    gross: float
    employer_cost: float
    employer_contribution: float
    employee_contribution: float
    income_tax: float
    net_salary: float
    indirect_taxes: float

    @property
    def state_share(self) -> float:
        return (
            self.employer_contribution
            + self.income_tax
            + self.employee_contribution
            + self.indirect_taxes
        )

    @property
    def individual_share(self) -> float:
        return self.net_salary - self.indirect_taxes

    @property
    def state_share_ratio(self) -> float:
        if self.employer_cost <= 0:
            return 0.0
        return self.state_share / self.employer_cost

    @property
    def individual_share_ratio(self) -> float:
        if self.employer_cost <= 0:
            return 0.0
        return self.individual_share / self.employer_cost

    def net_per_payment(self, payments_per_year: int) -> float:
        if payments_per_year <= 0:
            return 0.0
        return self.net_salary / payments_per_year


@dataclass(frozen=True, slots=True)
class DisplayFigures:
    """Aggregates scaled to the selected view period."""

    view_mode: ViewMode
    payments_per_year: int
    salary_factor: float
    expense_factor: float
    gross: float
    employer_cost: float
    employer_contribution: float
    employee_contribution: float
    income_tax: float
    net_salary: float
    expenses: float
    indirect_taxes: float
    available_salary: float


def calculate_aggregates(
    gross: float,
    effective_rate: float,
    monthly_indirect_total: float,
    config: SocialSecurityConfig,
) -> FiscalAggregates:
    """Combine salary-side and consumption-side taxes into annual aggregates."""

    gross = max(gross, 0.0)
    employer_contribution = gross * config.employer.rate
    employee_contribution = gross * config.employee.rate
    income_tax = gross * effective_rate

    return FiscalAggregates(
        gross=gross,
        employer_cost=gross + employer_contribution,
        employer_contribution=employer_contribution,
        employee_contribution=employee_contribution,
        income_tax=income_tax,
        net_salary=gross - income_tax - employee_contribution,
        indirect_taxes=monthly_indirect_total * MONTHS_PER_YEAR,
    )


def display_factors(view_mode: ViewMode | str, payments_per_year: int) -> tuple[float, float]:
    """Return ``(salary_factor, expense_factor)`` for ``view_mode``.

    Salaries are annual and get divided by the number of payments; expenses are
    monthly and get multiplied by twelve. The two factors differ whenever the
    salary is paid in fourteen instalments.
    """

    mode = ViewMode(view_mode)
    if mode is ViewMode.ANNUAL:
        return 1.0, float(MONTHS_PER_YEAR)
    if payments_per_year <= 0:
        payments_per_year = MONTHS_PER_YEAR
    return 1.0 / payments_per_year, 1.0


def display_figures(
    aggregates: FiscalAggregates,
    monthly_expenses_total: float,
    view_mode: ViewMode | str,
    payments_per_year: int = MONTHS_PER_YEAR,
) -> DisplayFigures:
    """Scale ``aggregates`` to the period selected by ``view_mode``."""

    mode = ViewMode(view_mode)
    if payments_per_year <= 0:
        payments_per_year = MONTHS_PER_YEAR
    salary_factor, expense_factor = display_factors(mode, payments_per_year)
    net_salary = aggregates.net_salary * salary_factor
    expenses = monthly_expenses_total * expense_factor
    indirect = aggregates.indirect_taxes / MONTHS_PER_YEAR * expense_factor

    return DisplayFigures(
        view_mode=mode,
        payments_per_year=payments_per_year,
        salary_factor=salary_factor,
        expense_factor=expense_factor,
        gross=aggregates.gross * salary_factor,
        employer_cost=aggregates.employer_cost * salary_factor,
        employer_contribution=aggregates.employer_contribution * salary_factor,
        employee_contribution=aggregates.employee_contribution * salary_factor,
        income_tax=aggregates.income_tax * salary_factor,
        net_salary=net_salary,
        expenses=expenses,
        indirect_taxes=indirect,
        available_salary=net_salary - expenses,
    )


__all__ = [
    "DisplayFigures",
    "FiscalAggregates",
    "MONTHS_PER_YEAR",
    "ViewMode",
    "calculate_aggregates",
    "display_factors",
    "display_figures",
]
