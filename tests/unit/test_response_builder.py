"""Unit tests for response formatting helpers."""

from __future__ import annotations

from flask import Flask

from fiscalticket.backend.services.response_builder import build_calculation_response


def test_build_calculation_response_returns_json(app: Flask) -> None:
    """Formatting helper should generate a JSON response tuple."""

    with app.app_context():
        response, status = build_calculation_response({"foo": "bar"})

    assert status == 200
    assert response.get_json() == {"foo": "bar"}
    assert "Content-Language" not in response.headers


def test_build_calculation_response_sets_content_language(app: Flask) -> None:
    with app.app_context():
        response, _ = build_calculation_response({"meta": {"locale": "en"}})

    assert response.headers["Content-Language"] == "en"


def test_build_calculation_response_keeps_accents(app: Flask) -> None:
    with app.app_context():
        response, _ = build_calculation_response({"name": "Cotización"})

    assert "Cotización" in response.get_data(as_text=True)
