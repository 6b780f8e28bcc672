"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from fiscalticket.backend.services.request_parser import parse_calculation_payload

PROFILE = {"gross_annual_salary": 30_000}


def test_parse_payload_uses_accept_language(app: Flask) -> None:
    """Accept-Language header should supply the locale when absent."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json={"profile": PROFILE},
        headers={"Accept-Language": "en-GB,en;q=0.9,es;q=0.8"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"


def test_parse_payload_preserves_explicit_locale(app: Flask) -> None:
    """Explicit locale fields win over query parameters and headers."""

    with app.test_request_context(
        "/api/v1/calculations?locale=en",
        method="POST",
        json={"locale": "es_ES", "profile": PROFILE},
        headers={"Accept-Language": "en"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "es"


def test_parse_payload_reads_locale_query_parameter(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?locale=EN",
        method="POST",
        json={"profile": PROFILE},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"


def test_parse_payload_without_locale_hints(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations", method="POST", json={"profile": PROFILE}
    ):
        payload = parse_calculation_payload(request)

    assert "locale" not in payload


def test_parse_payload_reads_view_options_from_query(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?view_mode=ANNUAL&payments_per_year=14",
        method="POST",
        json={"profile": PROFILE},
    ):
        payload = parse_calculation_payload(request)

    assert payload["view_mode"] == "annual"
    assert payload["payments_per_year"] == 14


def test_body_view_options_take_precedence(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?view_mode=annual&payments_per_year=14",
        method="POST",
        json={"profile": PROFILE, "view_mode": "monthly", "payments_per_year": 12},
    ):
        payload = parse_calculation_payload(request)

    assert payload["view_mode"] == "monthly"
    assert payload["payments_per_year"] == 12


def test_parse_payload_rejects_non_numeric_payments(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations?payments_per_year=fourteen",
        method="POST",
        json={"profile": PROFILE},
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="not-json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)
