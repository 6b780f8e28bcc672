"""REST endpoints for fiscal ticket calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from fiscalticket.backend.app.services.calculation_service import calculate_fiscal_ticket
from fiscalticket.backend.services.request_parser import parse_calculation_payload
from fiscalticket.backend.services.response_builder import build_calculation_response

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Compute a fiscal ticket from the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_fiscal_ticket(payload)

    return build_calculation_response(result)
