"""Serve the translation catalogues used to label fiscal ticket lines."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from fiscalticket.backend.app.localization import load_translations

blueprint = Blueprint("translations", __name__, url_prefix="/api/v1/translations")


def _locale_hint(locale: str | None) -> str | None:
    if locale:
        return locale
    hint = request.args.get("locale") or request.headers.get("Accept-Language")
    if hint:
        hint = hint.split(",")[0].split(";")[0]
    return hint


@blueprint.get("/", defaults={"locale": None})
@blueprint.get("/<locale>")
def get_translations(locale: str | None):
    """Return the catalogue for the path, query or ``Accept-Language`` locale.

    Unknown locales resolve to the base catalogue; ``Content-Language`` names
    the locale actually served.
    """

    payload = load_translations(_locale_hint(locale))
    response = jsonify(payload)
    response.headers["Content-Language"] = payload["locale"]
    response.vary.add("Accept-Language")
    return response, 200
