"""Problem payloads returned by the error handlers of the fiscal ticket API."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from flask import Response, jsonify

PROBLEM_MIMETYPE = "application/problem+json"


@dataclass(frozen=True)
class ProblemResponse:
    """Error body carrying a machine-readable code and the HTTP status title."""

    error: str
    status: int
    message: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Error"

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.error,
            "title": self.title,
            "status": self.status,
        }
        if self.message:
            payload["message"] = self.message
        payload.update(self.context)
        return payload

    def to_response(self) -> tuple[Response, int]:
        response = jsonify(self.as_dict())
        response.mimetype = PROBLEM_MIMETYPE
        return response, self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **context: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; keyword arguments are merged into the body."""

    return ProblemResponse(error=error, status=status, message=message, context=context)


__all__ = ["PROBLEM_MIMETYPE", "ProblemResponse", "problem_response"]
