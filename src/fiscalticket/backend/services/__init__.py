"""Service-layer helpers for the fiscal ticket backend."""

from fiscalticket.backend.app.services.calculation_service import calculate_fiscal_ticket

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_fiscal_ticket",
    "parse_calculation_payload",
]
