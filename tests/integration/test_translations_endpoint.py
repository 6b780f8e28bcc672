"""Integration tests for the translations API."""

from __future__ import annotations

import json
from pathlib import Path

from flask.testing import FlaskClient

TRANSLATIONS_ROOT = Path(__file__).resolve().parents[2] / "src" / "fiscalticket" / "translations"


def _load_value(locale: str, *key_parts: str) -> str:
    payload = json.loads(TRANSLATIONS_ROOT.joinpath(f"{locale}.json").read_text(encoding="utf-8"))
    cursor = payload["messages"]
    for part in key_parts:
        if not isinstance(cursor, dict) or part not in cursor:
            raise AssertionError(f"Missing key for locale {locale}: {'.'.join(key_parts)}")
        cursor = cursor[part]
    return str(cursor)


def test_translations_endpoint_returns_default_catalogue(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/")
    assert response.status_code == 200
    payload = response.get_json()

    assert payload["locale"] == "es"
    assert "en" in payload["available_locales"]
    assert payload["messages"]["indirect"]["grand_total"] == _load_value(
        "es", "indirect", "grand_total"
    )
    assert payload["fallback"]["locale"] == "es"


def test_translations_endpoint_accepts_locale_query(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/?locale=en")

    assert response.get_json()["locale"] == "en"


def test_translations_endpoint_respects_locale_path(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/en")
    assert response.status_code == 200
    payload = response.get_json()

    assert payload["locale"] == "en"
    assert payload["messages"]["special"]["hydrocarbons"] == _load_value(
        "en", "special", "hydrocarbons"
    )
    assert payload["fallback"]["locale"] == "es"


def test_translations_endpoint_falls_back_for_unknown_locale(client: FlaskClient) -> None:
    payload = client.get("/api/v1/translations/fr").get_json()

    assert payload["locale"] == "es"


def test_translations_endpoint_reads_accept_language(client: FlaskClient) -> None:
    response = client.get(
        "/api/v1/translations/", headers={"Accept-Language": "en-GB,en;q=0.9,es;q=0.5"}
    )

    assert response.get_json()["locale"] == "en"
    assert response.headers["Content-Language"] == "en"
    assert "Accept-Language" in response.headers["Vary"]


def test_locale_path_takes_precedence_over_header(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/es", headers={"Accept-Language": "en"})

    assert response.get_json()["locale"] == "es"
    assert response.headers["Content-Language"] == "es"


def test_content_language_reports_fallback_locale(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/fr")

    assert response.headers["Content-Language"] == "es"
