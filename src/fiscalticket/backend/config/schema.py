"""Pydantic models describing the fiscal dataset schema."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

_COMPONENT_TOLERANCE = 1e-6


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """Represents a single progressive tax bracket.

    ``upper_bound`` is the inclusive ceiling of the bracket; ``None`` marks the
    open top bracket of a scale.
    """

    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0 or self.rate >= 1:
            raise ConfigurationError("Tax rates must be between 0 and 1")
        if self.upper_bound is not None and self.upper_bound <= 0:
            raise ConfigurationError("Upper bounds must be positive values")
        return self


def _validate_scale(brackets: Sequence[TaxBracket], scope: str) -> None:
    if not brackets:
        raise ConfigurationError(f"{scope} requires at least one bracket")

    previous = 0.0
    for index, bracket in enumerate(brackets):
        upper = bracket.upper_bound
        is_last = index == len(brackets) - 1
        if upper is None:
            if not is_last:
                raise ConfigurationError(
                    f"{scope}: only the last bracket may have an open upper bound"
                )
            continue
        if is_last:
            raise ConfigurationError(f"{scope}: the last bracket must be open-ended")
        if upper <= previous:
            raise ConfigurationError(f"{scope}: bracket bounds must be ascending")
        previous = upper


class Regime(str, Enum):
    """Income tax regime applied by a jurisdiction."""

    COMMON = "common"
    FORAL = "foral"


class Jurisdiction(ImmutableModel):
    """Regional tax authority with its own income tax scale.

    Common-regime scales only hold the regional half of the liability and are
    added to the national scale; foral scales carry the whole liability.
    """

    id: str
    name: str
    regime: Regime = Regime.COMMON
    brackets: tuple[TaxBracket, ...]

    @model_validator(mode="after")
    def _validate_brackets(self) -> Self:
        _validate_scale(self.brackets, f"jurisdiction '{self.id}'")
        return self

    @computed_field(return_type=bool)
    @property
    def is_unified(self) -> bool:
        return self.regime is Regime.FORAL


class WorkIncomeReductionConfig(ImmutableModel):
    """Thresholds of the tapered reduction on net work income."""

    max_net_income: float
    max_other_income: float
    lower_threshold: float
    upper_threshold: float
    full_reduction: float
    reduction_at_upper: float
    first_slope: float
    second_slope: float

    @model_validator(mode="after")
    def _validate_thresholds(self) -> Self:
        if not 0 < self.lower_threshold < self.upper_threshold < self.max_net_income:
            raise ConfigurationError(
                "Work income reduction thresholds must satisfy "
                "0 < lower < upper < max net income"
            )
        for name in ("full_reduction", "reduction_at_upper", "first_slope", "second_slope"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Work income reduction '{name}' must be non-negative")
        return self


class PersonalMinimumConfig(ImmutableModel):
    """Personal and family minimum allowances."""

    personal: float
    children: tuple[float, ...]
    child_under_three: float

    @model_validator(mode="after")
    def _validate_amounts(self) -> Self:
        if not self.children:
            raise ConfigurationError("At least one child minimum amount is required")
        amounts = (self.personal, self.child_under_three, *self.children)
        if any(amount < 0 for amount in amounts):
            raise ConfigurationError("Minimum allowances must be non-negative")
        return self

    def child_amount(self, position: int) -> float:
        """Return the allowance of the child at zero-based ``position``."""

        index = min(max(position, 0), len(self.children) - 1)
        return self.children[index]


class IncomeTaxConfig(ImmutableModel):
    """Income tax (IRPF) allowances and the national scale."""

    national_brackets: tuple[TaxBracket, ...]
    general_work_expense: float
    work_income_reduction: WorkIncomeReductionConfig
    minimums: PersonalMinimumConfig

    @model_validator(mode="after")
    def _validate_national_scale(self) -> Self:
        _validate_scale(self.national_brackets, "national scale")
        if self.general_work_expense < 0:
            raise ConfigurationError("General work expense must be non-negative")
        return self


class ContributionSide(str, Enum):
    """Party paying a social security contribution."""

    EMPLOYEE = "employee"
    EMPLOYER = "employer"


class ContributionTable(ImmutableModel):
    """Itemised contribution rates for one side of the payroll."""

    rate: float
    components: Mapping[str, float]

    @field_validator("components", mode="before")
    @classmethod
    def _coerce_components(cls, value: Any) -> Mapping[str, float]:
        if isinstance(value, Mapping):
            return {str(key): float(val) for key, val in value.items()}
        raise ConfigurationError("Contribution components must be provided as a mapping")

    @model_validator(mode="after")
    def _validate_rates(self) -> Self:
        if not 0 <= self.rate <= 1:
            raise ConfigurationError("Contribution rates must be between 0 and 1")
        if not self.components:
            raise ConfigurationError("Contribution tables require at least one component")
        if any(value < 0 for value in self.components.values()):
            raise ConfigurationError("Contribution components must be non-negative")
        return self

    @property
    def components_total(self) -> float:
        return sum(self.components.values())


class SocialSecurityConfig(ImmutableModel):
    """General regime contribution tables and the annual base cap."""

    max_monthly_base: float
    employee: ContributionTable
    employer: ContributionTable

    @model_validator(mode="after")
    def _validate_base(self) -> Self:
        if self.max_monthly_base <= 0:
            raise ConfigurationError("Maximum contribution base must be positive")
        for side, table in (("employee", self.employee), ("employer", self.employer)):
            if abs(table.components_total - table.rate) > _COMPONENT_TOLERANCE:
                raise ConfigurationError(
                    f"{side} contribution components must add up to the aggregate rate"
                )
        return self

    @property
    def max_annual_base(self) -> float:
        return self.max_monthly_base * 12

    def table(self, side: ContributionSide | str) -> ContributionTable:
        resolved = ContributionSide(side)
        if resolved is ContributionSide.EMPLOYEE:
            return self.employee
        return self.employer


class ExciseConfig(ImmutableModel):
    """Special tax constants applied to consumption line items."""

    hydrocarbons_per_liter: float
    default_fuel_price: float
    gas_rate: float
    gas_per_kwh: float
    electricity_rate: float
    insurance_premium_rate: float
    alcohol_rate: float
    tobacco_rate: float
    general_vat_rate: float = 21.0

    @model_validator(mode="after")
    def _validate_positive(self) -> Self:
        for name, value in self.model_dump().items():
            if value <= 0:
                raise ConfigurationError(f"Excise constant '{name}' must be positive")
        return self

    @property
    def general_vat_factor(self) -> float:
        return 1 + self.general_vat_rate / 100


class PayrollConfig(ImmutableModel):
    """Allowed salary payment schedules."""

    allowed_payments_per_year: tuple[int, ...] = (12, 14)
    default_payments_per_year: int = 12

    @model_validator(mode="after")
    def _validate_payments(self) -> Self:
        if self.default_payments_per_year not in self.allowed_payments_per_year:
            raise ConfigurationError(
                "Default payments per year must be one of the allowed values"
            )
        return self


class DatasetMeta(ImmutableModel):
    """Descriptive metadata of the dataset snapshot."""

    snapshot: str
    currency: str = "EUR"
    default_jurisdiction: str
    sources: tuple[str, ...] = ()


class FiscalDataset(ImmutableModel):
    """Complete point-in-time snapshot of the fiscal parameters."""

    meta: DatasetMeta
    income_tax: IncomeTaxConfig
    jurisdictions: tuple[Jurisdiction, ...]
    social_security: SocialSecurityConfig
    vat_rates: tuple[int, ...]
    excise: ExciseConfig
    payroll: PayrollConfig = Field(default_factory=PayrollConfig)

    @field_validator("vat_rates")
    @classmethod
    def _validate_vat_rates(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(rate <= 0 or rate >= 100 for rate in value):
            raise ConfigurationError("VAT rates must be expressed as percentages")
        return tuple(sorted(value))

    @model_validator(mode="after")
    def _validate_jurisdictions(self) -> Self:
        identifiers = [entry.id for entry in self.jurisdictions]
        if len(identifiers) != len(set(identifiers)):
            raise ConfigurationError("Jurisdiction identifiers must be unique")
        if self.meta.default_jurisdiction not in identifiers:
            raise ConfigurationError("Default jurisdiction is not declared")
        return self

    def get_jurisdiction(self, jurisdiction_id: str) -> Jurisdiction | None:
        """Return the jurisdiction identified by ``jurisdiction_id`` if declared."""

        for jurisdiction in self.jurisdictions:
            if jurisdiction.id == jurisdiction_id:
                return jurisdiction
        return None


class CatalogItem(ImmutableModel):
    """Default consumption line item offered by the expense catalogue."""

    id: str
    name: str
    vat_rate: int = 21
    treatment: str = "standard"
    special_rate: float | None = None
    unit_price: float | None = None
    note: str | None = None


class CatalogCategory(ImmutableModel):
    """Default expense category and its line items."""

    id: str
    name: str
    icon: str | None = None
    items: tuple[CatalogItem, ...] = ()

    @model_validator(mode="after")
    def _validate_items(self) -> Self:
        identifiers = [item.id for item in self.items]
        if len(identifiers) != len(set(identifiers)):
            raise ConfigurationError(f"Duplicate item identifiers in category '{self.id}'")
        return self


class ExpenseCatalog(ImmutableModel):
    """Collection of default expense categories."""

    categories: tuple[CatalogCategory, ...]

    @model_validator(mode="after")
    def _validate_categories(self) -> Self:
        identifiers = [category.id for category in self.categories]
        if len(identifiers) != len(set(identifiers)):
            raise ConfigurationError("Category identifiers must be unique")
        return self


__all__ = [
    "CatalogCategory",
    "CatalogItem",
    "ConfigurationError",
    "ContributionSide",
    "ContributionTable",
    "DatasetMeta",
    "ExciseConfig",
    "ExpenseCatalog",
    "FiscalDataset",
    "ImmutableModel",
    "IncomeTaxConfig",
    "Jurisdiction",
    "PayrollConfig",
    "PersonalMinimumConfig",
    "Regime",
    "SocialSecurityConfig",
    "TaxBracket",
    "WorkIncomeReductionConfig",
]
