"""Utilities for serialising calculation responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Tuple

from flask import jsonify

ResponseTuple = Tuple[Any, int]


def build_calculation_response(payload: Mapping[str, Any]) -> ResponseTuple:
    """Return a Flask JSON response for the fiscal ticket ``payload``.

    The locale resolved by the calculation is echoed as ``Content-Language``.
    """

    response = jsonify(payload)
    meta = payload.get("meta")
    if isinstance(meta, Mapping) and meta.get("locale"):
        response.headers["Content-Language"] = str(meta["locale"])
    return response, 200
