"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from fiscalticket.backend.app.services.calculators.aggregation import ViewMode
from fiscalticket.backend.app.services.calculators.indirect_taxes import TaxTreatment

__all__ = [
    "AggregatesSummary",
    "BracketTrancheEntry",
    "CalculationRequest",
    "CalculationResponse",
    "CategoryInput",
    "ContributionComponent",
    "ContributionSummary",
    "DisplaySummary",
    "IncomeTaxSummary",
    "IndirectTaxSummary",
    "LedgerItem",
    "LineItemInput",
    "ProfileInput",
    "ResponseMeta",
    "format_validation_error",
]

_DISTRIBUTION_TOLERANCE = 1e-6

VatRate = Literal[0, 4, 10, 21]


class ProfileInput(BaseModel):
    """Salary and household attributes supplied by the user."""

    model_config = ConfigDict(extra="forbid")

    gross_annual_salary: float = Field(..., ge=0)
    children: int = Field(default=0, ge=0, le=15)
    children_under_three: int = Field(default=0, ge=0, le=15)
    other_income: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _validate_children(self) -> ProfileInput:
        if self.children_under_three > self.children:
            raise ValueError("children_under_three cannot exceed children")
        return self


class LineItemInput(BaseModel):
    """Monthly purchase submitted inside a category."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = ""
    amount: float = Field(default=0.0, ge=0)
    vat_rate: VatRate = 21
    treatment: TaxTreatment = TaxTreatment.STANDARD
    special_rate: float | None = Field(default=None, ge=0, lt=1)
    unit_price: float | None = Field(default=None, gt=0)


class CategoryInput(BaseModel):
    """Expense category, either itemised or split by VAT percentages."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = ""
    total: float = Field(default=0.0, ge=0)
    line_items: list[LineItemInput] = Field(default_factory=list)
    vat_distribution: dict[int, float] = Field(default_factory=dict)

    @field_validator("vat_distribution")
    @classmethod
    def _validate_distribution(cls, value: dict[int, float]) -> dict[int, float]:
        for rate, percentage in value.items():
            if rate not in (4, 10, 21):
                raise ValueError(f"unsupported VAT rate {rate}")
            if percentage < 0 or percentage > 100:
                raise ValueError("VAT distribution percentages must be between 0 and 100")
        if sum(value.values()) > 100 + _DISTRIBUTION_TOLERANCE:
            raise ValueError("VAT distribution percentages cannot exceed 100 in total")
        return value

    @model_validator(mode="after")
    def _validate_unique_items(self) -> CategoryInput:
        identifiers = [item.id for item in self.line_items]
        if len(identifiers) != len(set(identifiers)):
            raise ValueError("line item identifiers must be unique within a category")
        return self


class CalculationRequest(BaseModel):
    """Top-level payload accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    locale: str | None = None
    profile: ProfileInput
    jurisdiction_id: str | None = None
    categories: list[CategoryInput] | None = None
    view_mode: ViewMode = ViewMode.MONTHLY
    payments_per_year: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _validate_unique_categories(self) -> CalculationRequest:
        if self.categories:
            identifiers = [category.id for category in self.categories]
            if len(identifiers) != len(set(identifiers)):
                raise ValueError("category identifiers must be unique")
        return self


class BracketTrancheEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lower: float
    upper: float | None
    rate: float
    taxed_amount: float
    tax: float
    active: bool
    fill_ratio: float


class IncomeTaxSummary(BaseModel):
    """Income tax computation with its intermediate steps."""

    model_config = ConfigDict(extra="forbid")

    jurisdiction_id: str
    jurisdiction_name: str | None = None
    regime: str
    unified: bool
    gross: float
    social_security_deduction: float
    general_expense: float
    net_work_income: float
    work_reduction: float
    reduced_net_income: float
    personal_minimum: float
    taxable_base: float
    national_tax: float
    regional_tax: float
    total_tax: float
    effective_rate: float
    tranches: dict[str, list[BracketTrancheEntry]]


class ContributionComponent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    rate: float
    amount: float


class ContributionSummary(BaseModel):
    """Contribution owed by one side of the payroll."""

    model_config = ConfigDict(extra="forbid")

    side: str
    label: str
    base: float
    capped: bool
    rate: float
    total: float
    components: list[ContributionComponent]


class LedgerItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    vat: float
    special: float
    direct: float
    total: float
    special_kind: str | None = None
    special_label: str | None = None
    category_id: str | None = None
    item_id: str | None = None


class IndirectTaxSummary(BaseModel):
    """Monthly consumption taxes."""

    model_config = ConfigDict(extra="forbid")

    vat_by_rate: dict[str, float]
    special_by_kind: dict[str, float]
    direct_taxes: float
    total_vat: float
    total_special: float
    grand_total: float
    ledger: list[LedgerItem]
    labels: dict[str, str]


class AggregatesSummary(BaseModel):
    """Annual reconciliation of employer cost."""

    model_config = ConfigDict(extra="forbid")

    gross: float
    employer_cost: float
    employer_contribution: float
    employee_contribution: float
    income_tax: float
    net_salary: float
    net_monthly_12: float
    net_monthly_14: float
    indirect_taxes: float
    state_share: float
    individual_share: float
    state_share_ratio: float
    individual_share_ratio: float


class DisplaySummary(BaseModel):
    """Figures scaled to the requested view period."""

    model_config = ConfigDict(extra="forbid")

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


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    snapshot: str
    currency: str
    locale: str
    jurisdiction_fallback: bool = False


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    income_tax: IncomeTaxSummary
    social_contributions: dict[str, ContributionSummary]
    indirect_taxes: IndirectTaxSummary
    aggregates: AggregatesSummary
    display: DisplaySummary
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
