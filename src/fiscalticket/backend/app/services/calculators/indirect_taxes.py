"""Indirect taxes embedded in monthly consumption.

Every amount handled here is a tax-inclusive consumer price. The helpers peel
VAT and the special taxes back out of those prices: line items are dispatched
on their :class:`TaxTreatment`, while categories without line items fall back
to a percentage split of their total across the VAT rates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from typing_extensions import assert_never

from fiscalticket.backend.config.dataset import ExciseConfig

_LOGGER = logging.getLogger(__name__)

DEFAULT_VAT_RATES: tuple[int, ...] = (4, 10, 21)


class TaxTreatment(str, Enum):
    """Closed set of tax regimes a consumption line item can fall under."""

    STANDARD = "standard"
    EXEMPT = "exempt"
    FUEL_EXCISE = "fuel_excise"
    ELECTRICITY_EXCISE = "electricity_excise"
    GAS_EXCISE = "gas_excise"
    ALCOHOL_EXCISE = "alcohol_excise"
    TOBACCO_EXCISE = "tobacco_excise"
    INSURANCE_PREMIUM_TAX = "insurance_premium_tax"
    DIRECT_TAX = "direct_tax"


class SpecialTaxKind(str, Enum):
    """Special tax reported on a ledger entry."""

    HYDROCARBONS = "hydrocarbons"
    GAS = "gas"
    ELECTRICITY = "electricity"
    INSURANCE_PREMIUM = "insurance_premium"
    ALCOHOL = "alcohol"
    TOBACCO = "tobacco"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class ConsumptionLineItem:
    """Single monthly purchase with its tax treatment."""

    id: str
    name: str
    amount: float = 0.0
    vat_rate: int = 21
    treatment: TaxTreatment = TaxTreatment.STANDARD
    special_rate: float | None = None
    unit_price: float | None = None


@dataclass(frozen=True, slots=True)
class ExpenseCategory:
    """Group of monthly expenses.

    With line items the total is always their sum. Without them the total is
    split across VAT rates following ``vat_distribution`` (percentages keyed by
    VAT rate).
    """

    id: str
    name: str
    total: float = 0.0
    line_items: tuple[ConsumptionLineItem, ...] = ()
    vat_distribution: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "vat_distribution", dict(self.vat_distribution))
        if self.line_items:
            object.__setattr__(
                self, "total", sum(item.amount for item in self.line_items)
            )


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Taxes attributed to a single line item or simple-mode category."""

    name: str
    vat: float = 0.0
    special: float = 0.0
    direct: float = 0.0
    special_kind: SpecialTaxKind | None = None
    category_id: str | None = None
    item_id: str | None = None

    @property
    def total(self) -> float:
        return self.vat + self.special + self.direct


@dataclass(slots=True)
class IndirectTaxBreakdown:
    """Monthly VAT and special tax totals with the per-item ledger."""

    vat_by_rate: dict[int, float]
    hydrocarbons: float = 0.0
    electricity: float = 0.0
    insurance_premium: float = 0.0
    other_special: float = 0.0
    direct_taxes: float = 0.0
    ledger: list[LedgerEntry] = field(default_factory=list)

    @property
    def total_vat(self) -> float:
        return sum(self.vat_by_rate.values())

    @property
    def total_special(self) -> float:
        return self.hydrocarbons + self.electricity + self.insurance_premium + self.other_special

    @property
    def grand_total(self) -> float:
        return self.total_vat + self.total_special + self.direct_taxes

    def special_by_kind(self) -> dict[str, float]:
        return {
            "hydrocarbons": self.hydrocarbons,
            "electricity": self.electricity,
            "insurance_premium": self.insurance_premium,
            "other_special": self.other_special,
        }


def vat_from_inclusive(amount: float, rate: float) -> float:
    """Return the VAT contained in the tax-inclusive ``amount`` at ``rate`` percent."""

    if rate <= 0:
        return 0.0
    return amount - amount / (1 + rate / 100)


def _special_rate(value: float | None, default: float) -> float:
    """Return ``value`` when it is a usable rate in ``[0, 1)``, else ``default``."""

    if value is None or not 0 <= value < 1:
        return default
    return value


def _item_taxes(
    item: ConsumptionLineItem, excise: ExciseConfig
) -> tuple[float, float, float, SpecialTaxKind | None]:
    """Return ``(vat, special, direct, kind)`` for a single line item."""

    amount = item.amount
    general_factor = excise.general_vat_factor
    general_vat = amount - amount / general_factor
    treatment = item.treatment

    match treatment:
        case TaxTreatment.STANDARD:
            return vat_from_inclusive(amount, item.vat_rate), 0.0, 0.0, None
        case TaxTreatment.EXEMPT:
            return 0.0, 0.0, 0.0, None
        case TaxTreatment.FUEL_EXCISE:
            price = item.unit_price
            if price is None or price <= 0:
                _LOGGER.debug(
                    "Using default fuel price %.2f for item '%s'",
                    excise.default_fuel_price,
                    item.id,
                )
                price = excise.default_fuel_price
            liters = amount / price
            return general_vat, liters * excise.hydrocarbons_per_liter, 0.0, SpecialTaxKind.HYDROCARBONS
        case TaxTreatment.ELECTRICITY_EXCISE:
            rate = _special_rate(item.special_rate, excise.electricity_rate)
            base = amount / ((1 + rate) * general_factor)
            return general_vat, base * rate, 0.0, SpecialTaxKind.ELECTRICITY
        case TaxTreatment.GAS_EXCISE:
            return general_vat, amount * excise.gas_rate, 0.0, SpecialTaxKind.GAS
        case TaxTreatment.ALCOHOL_EXCISE:
            return general_vat, amount * excise.alcohol_rate, 0.0, SpecialTaxKind.ALCOHOL
        case TaxTreatment.TOBACCO_EXCISE:
            before_vat = amount / general_factor
            return amount - before_vat, before_vat * excise.tobacco_rate, 0.0, SpecialTaxKind.TOBACCO
        case TaxTreatment.INSURANCE_PREMIUM_TAX:
            rate = _special_rate(item.special_rate, excise.insurance_premium_rate)
            return 0.0, amount - amount / (1 + rate), 0.0, SpecialTaxKind.INSURANCE_PREMIUM
        case TaxTreatment.DIRECT_TAX:
            return 0.0, 0.0, amount, SpecialTaxKind.DIRECT
        case _:
            assert_never(treatment)


def _accumulate_special(
    breakdown: IndirectTaxBreakdown, kind: SpecialTaxKind | None, amount: float
) -> None:
    if kind is None:
        return
    match kind:
        case SpecialTaxKind.HYDROCARBONS | SpecialTaxKind.GAS:
            breakdown.hydrocarbons += amount
        case SpecialTaxKind.ELECTRICITY:
            breakdown.electricity += amount
        case SpecialTaxKind.INSURANCE_PREMIUM:
            breakdown.insurance_premium += amount
        case SpecialTaxKind.ALCOHOL | SpecialTaxKind.TOBACCO:
            breakdown.other_special += amount
        case SpecialTaxKind.DIRECT:
            pass
        case _:
            assert_never(kind)


def _simple_mode_vat(category: ExpenseCategory) -> dict[int, float]:
    vat: dict[int, float] = {}
    for rate, percentage in category.vat_distribution.items():
        if rate <= 0 or percentage <= 0:
            continue
        share = category.total * (percentage / 100)
        vat[rate] = share * rate / (100 + rate)
    return vat


def calculate_indirect_taxes(
    categories: Iterable[ExpenseCategory],
    excise: ExciseConfig,
    vat_rates: Sequence[int] = DEFAULT_VAT_RATES,
) -> IndirectTaxBreakdown:
    """Break monthly consumption down into VAT, special and direct taxes."""

    breakdown = IndirectTaxBreakdown(vat_by_rate={rate: 0.0 for rate in vat_rates})

    for category in categories:
        if category.line_items:
            for item in category.line_items:
                if item.amount <= 0:
                    continue

                vat, special, direct, kind = _item_taxes(item, excise)
                if item.vat_rate > 0:
                    breakdown.vat_by_rate[item.vat_rate] = (
                        breakdown.vat_by_rate.get(item.vat_rate, 0.0) + vat
                    )
                _accumulate_special(breakdown, kind, special)
                breakdown.direct_taxes += direct
                breakdown.ledger.append(
                    LedgerEntry(
                        name=item.name,
                        vat=vat,
                        special=special,
                        direct=direct,
                        special_kind=kind,
                        category_id=category.id,
                        item_id=item.id,
                    )
                )
            continue

        category_vat = _simple_mode_vat(category)
        for rate, amount in category_vat.items():
            breakdown.vat_by_rate[rate] = breakdown.vat_by_rate.get(rate, 0.0) + amount
        total_vat = sum(category_vat.values())
        if total_vat > 0:
            breakdown.ledger.append(
                LedgerEntry(name=category.name, vat=total_vat, category_id=category.id)
            )

    return breakdown


__all__ = [
    "ConsumptionLineItem",
    "DEFAULT_VAT_RATES",
    "ExpenseCategory",
    "IndirectTaxBreakdown",
    "LedgerEntry",
    "SpecialTaxKind",
    "TaxTreatment",
    "calculate_indirect_taxes",
    "vat_from_inclusive",
]
