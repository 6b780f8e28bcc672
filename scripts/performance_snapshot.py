#!/usr/bin/env python3
"""Collect baseline timings for fiscal ticket calculations."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fiscalticket.backend.app.services.calculation_service import (  # noqa: E402
    calculate_fiscal_ticket,
)

SIMPLE_PAYLOAD = {
    "locale": "es",
    "profile": {"gross_annual_salary": 28000},
    "jurisdiction_id": "madrid",
}

ITEMISED_PAYLOAD = {
    "locale": "es",
    "profile": {"gross_annual_salary": 42000, "children": 2, "children_under_three": 1},
    "jurisdiction_id": "cataluna",
    "view_mode": "monthly",
    "payments_per_year": 14,
    "categories": [
        {
            "id": "transport",
            "line_items": [
                {"id": "fuel", "amount": 160, "treatment": "fuel_excise", "unit_price": 1.55},
                {"id": "insurance_car", "amount": 45, "vat_rate": 0,
                 "treatment": "insurance_premium_tax"},
            ],
        },
        {
            "id": "home",
            "line_items": [
                {"id": "electricity", "amount": 70, "treatment": "electricity_excise"},
                {"id": "gas", "amount": 40, "treatment": "gas_excise"},
                {"id": "water", "amount": 25, "vat_rate": 10},
            ],
        },
        {"id": "food", "total": 450, "vat_distribution": {"4": 40, "10": 45, "21": 15}},
    ],
}


def measure(payload: dict[str, object], iterations: int) -> dict[str, float]:
    """Return timing statistics for repeated calculations of ``payload``."""

    calculate_fiscal_ticket(payload)  # Warm dataset cache
    start = perf_counter()
    for _ in range(iterations):
        calculate_fiscal_ticket(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("FISCALTICKET_PROFILE_ITERATIONS", "200"))
    report = {
        "default_catalogue": measure(SIMPLE_PAYLOAD, iterations),
        "itemised": measure(ITEMISED_PAYLOAD, iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
