"""Regression coverage for the jurisdiction listing payload."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from fiscalticket.backend.config.dataset import available_jurisdictions


def test_jurisdictions_payload_lists_every_jurisdiction(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/jurisdictions")

    assert response.status_code == 200

    payload = response.get_json()
    identifiers = [entry["id"] for entry in payload["jurisdictions"]]
    names = [entry["name"] for entry in payload["jurisdictions"]]

    assert sorted(identifiers) == sorted(entry.id for entry in available_jurisdictions())
    assert names == sorted(names)
    assert payload["default_jurisdiction"] == "madrid"
    assert payload["national_brackets"][0] == {"upper": 12_450, "rate": pytest.approx(0.095)}
    assert payload["national_brackets"][-1]["upper"] is None


def test_jurisdictions_payload_describes_regimes(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/jurisdictions?locale=en")
    jurisdictions = {entry["id"]: entry for entry in response.get_json()["jurisdictions"]}

    navarra = jurisdictions["navarra"]
    assert navarra["regime"] == "foral"
    assert navarra["unified"] is True
    assert navarra["regime_label"] == "Foral regime"
    assert navarra["brackets"][-1]["upper"] is None

    madrid = jurisdictions["madrid"]
    assert madrid["regime"] == "common"
    assert madrid["unified"] is False
    assert madrid["top_rate"] == pytest.approx(madrid["brackets"][-1]["rate"])
