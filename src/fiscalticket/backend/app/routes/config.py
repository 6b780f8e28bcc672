"""Expose dataset metadata consumed by the decoupled front-end.

These endpoints bridge the YAML-backed fiscal dataset and the UI so that forms
can list jurisdictions, default expense items and current rates without
duplicating them client-side.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from flask import Blueprint, jsonify, request

from fiscalticket.backend.app.localization import Translator, get_translator
from fiscalticket.backend.config.dataset import (
    ContributionTable,
    TaxBracket,
    load_catalog,
    load_dataset,
)
from fiscalticket.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def _request_translator() -> Translator:
    locale_hint = request.args.get("locale") or request.headers.get("Accept-Language")
    if locale_hint:
        locale_hint = locale_hint.split(",")[0].split(";")[0]
    return get_translator(locale_hint)


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the active dataset."""

    dataset = load_dataset()
    return {
        "version": get_project_version(),
        "snapshot": dataset.meta.snapshot,
        "currency": dataset.meta.currency,
        "default_jurisdiction": dataset.meta.default_jurisdiction,
        "jurisdiction_count": len(dataset.jurisdictions),
    }


def _serialise_brackets(brackets: Sequence[TaxBracket]) -> list[dict[str, Any]]:
    return [{"upper": bracket.upper_bound, "rate": bracket.rate} for bracket in brackets]


def _serialise_contribution_table(
    table: ContributionTable, translator: Translator
) -> dict[str, Any]:
    return {
        "rate": table.rate,
        "components": [
            {
                "id": name,
                "label": translator(f"contributions.components.{name}"),
                "rate": rate,
            }
            for name, rate in table.components.items()
        ],
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    return jsonify(get_configuration_metadata()), 200


@blueprint.get("/jurisdictions")
def list_jurisdictions() -> tuple[Any, int]:
    """Return every jurisdiction with its regime and income tax scale."""

    dataset = load_dataset()
    translator = _request_translator()

    jurisdictions = [
        {
            "id": jurisdiction.id,
            "name": jurisdiction.name,
            "regime": jurisdiction.regime.value,
            "regime_label": translator(f"regime.{jurisdiction.regime.value}"),
            "unified": jurisdiction.is_unified,
            "top_rate": jurisdiction.brackets[-1].rate,
            "brackets": _serialise_brackets(jurisdiction.brackets),
        }
        for jurisdiction in sorted(dataset.jurisdictions, key=lambda entry: entry.name)
    ]

    payload = {
        "locale": translator.locale,
        "default_jurisdiction": dataset.meta.default_jurisdiction,
        "national_brackets": _serialise_brackets(dataset.income_tax.national_brackets),
        "jurisdictions": jurisdictions,
    }
    return jsonify(payload), 200


@blueprint.get("/rates")
def get_rates() -> tuple[Any, int]:
    """Expose contribution, VAT and excise constants of the snapshot."""

    dataset = load_dataset()
    translator = _request_translator()
    social_security = dataset.social_security
    income_tax = dataset.income_tax

    payload = {
        "snapshot": dataset.meta.snapshot,
        "locale": translator.locale,
        "social_security": {
            "max_monthly_base": social_security.max_monthly_base,
            "max_annual_base": social_security.max_annual_base,
            "employee": _serialise_contribution_table(social_security.employee, translator),
            "employer": _serialise_contribution_table(social_security.employer, translator),
        },
        "income_tax": {
            "general_work_expense": income_tax.general_work_expense,
            "work_income_reduction": income_tax.work_income_reduction.model_dump(),
            "minimums": income_tax.minimums.model_dump(),
        },
        "vat_rates": list(dataset.vat_rates),
        "excise": dataset.excise.model_dump(),
        "payroll": dataset.payroll.model_dump(),
    }
    return jsonify(payload), 200


@blueprint.get("/catalog")
def get_expense_catalog() -> tuple[Any, int]:
    """Expose the default expense catalogue with locale-aware treatment labels."""

    catalog = load_catalog()
    translator = _request_translator()

    categories = []
    for category in catalog.categories:
        items = []
        for item in category.items:
            entry: dict[str, Any] = {
                "id": item.id,
                "name": item.name,
                "vat_rate": item.vat_rate,
                "treatment": item.treatment,
                "treatment_label": translator(f"treatment.{item.treatment}"),
            }
            if item.special_rate is not None:
                entry["special_rate"] = item.special_rate
            if item.unit_price is not None:
                entry["unit_price"] = item.unit_price
            if item.note:
                entry["note"] = item.note
            items.append(entry)

        categories.append(
            {
                "id": category.id,
                "name": category.name,
                "icon": category.icon,
                "items": items,
            }
        )

    payload = {"locale": translator.locale, "categories": categories}
    return jsonify(payload), 200
