"""Typed request/response models shared across the calculation services.

Requests are validated with Pydantic at the HTTP boundary and converted into
the frozen dataclasses the calculators work with; responses are validated
again before serialisation so routes and tests share a single schema.
"""

from .api import (
    AggregatesSummary,
    BracketTrancheEntry,
    CalculationRequest,
    CalculationResponse,
    CategoryInput,
    ContributionComponent,
    ContributionSummary,
    DisplaySummary,
    IncomeTaxSummary,
    IndirectTaxSummary,
    LedgerItem,
    LineItemInput,
    ProfileInput,
    ResponseMeta,
    format_validation_error,
)

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
