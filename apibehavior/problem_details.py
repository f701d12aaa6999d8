"""RFC7807 problem details values and the problem+json response helper."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import g, has_request_context, jsonify
from werkzeug.wrappers.response import Response

PROBLEM_MIMETYPE = "application/problem+json"

VALIDATION_TITLE = "One or more validation errors occurred."


@dataclass
class ProblemDetails:
    type: str | None = None
    status: int | None = None
    detail: str | None = None
    title: str | None = None
    instance: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for key in ("type", "title", "status", "detail", "instance"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        # Extension members never shadow the standard members
        for k, v in self.extensions.items():
            if v is not None and k not in payload:
                payload[k] = v
        return payload


@dataclass
class ValidationProblemDetails(ProblemDetails):
    status: int | None = 400
    title: str | None = VALIDATION_TITLE
    errors: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = {k: list(v) for k, v in self.errors.items()}
        return payload


def problem_response(details: ProblemDetails, status: int | None = None) -> Response:
    payload = details.to_dict()
    rid = getattr(g, "request_id", None) if has_request_context() else None
    if rid and "request_id" not in payload:
        payload["request_id"] = rid
    resp = jsonify(payload)
    resp.status_code = status or details.status or 500
    resp.mimetype = PROBLEM_MIMETYPE
    if rid and "X-Request-Id" not in resp.headers:
        resp.headers["X-Request-Id"] = rid
    return resp


__all__ = [
    "PROBLEM_MIMETYPE",
    "VALIDATION_TITLE",
    "ProblemDetails",
    "ValidationProblemDetails",
    "problem_response",
]
