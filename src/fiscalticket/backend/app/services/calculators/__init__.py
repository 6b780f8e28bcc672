"""Domain-specific calculation helpers."""

from .aggregation import (
    DisplayFigures,
    FiscalAggregates,
    ViewMode,
    calculate_aggregates,
    display_factors,
    display_figures,
)
from .income_tax import (
    IncomeTaxResult,
    TaxpayerProfile,
    calculate_income_tax,
    effective_income_tax_rate,
    personal_family_minimum,
    work_income_reduction,
)
from .indirect_taxes import (
    ConsumptionLineItem,
    ExpenseCategory,
    IndirectTaxBreakdown,
    LedgerEntry,
    SpecialTaxKind,
    TaxTreatment,
    calculate_indirect_taxes,
)
from .social_security import (
    SocialContributionBreakdown,
    calculate_contribution,
    contribution_breakdown,
)
from .utils import (
    BracketTranche,
    bracket_tranches,
    calculate_progressive_tax,
    format_percentage,
    round_currency,
    round_rate,
)

__all__ = [
    "BracketTranche",
    "ConsumptionLineItem",
    "DisplayFigures",
    "ExpenseCategory",
    "FiscalAggregates",
    "IncomeTaxResult",
    "IndirectTaxBreakdown",
    "LedgerEntry",
    "SocialContributionBreakdown",
    "SpecialTaxKind",
    "TaxTreatment",
    "TaxpayerProfile",
    "ViewMode",
    "bracket_tranches",
    "calculate_aggregates",
    "calculate_contribution",
    "calculate_income_tax",
    "calculate_indirect_taxes",
    "calculate_progressive_tax",
    "contribution_breakdown",
    "display_factors",
    "display_figures",
    "effective_income_tax_rate",
    "format_percentage",
    "personal_family_minimum",
    "round_currency",
    "round_rate",
    "work_income_reduction",
]
