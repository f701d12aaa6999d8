"""Read-only diagnostics over the api-behavior policy.

Exposes:
 - GET /diagnostics/compatibility-switches : switches with value, default and override state
 - GET /diagnostics/problem-details : statuses covered by the catalog
 - GET /diagnostics/binding : inferred binding sources + consumes constraint per endpoint
 - GET /diagnostics/log : recent WARN+ records from the support ring buffer
 - GET /diagnostics/log/lookup?request_id=...|incident_id=... : trace one failure
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from werkzeug.wrappers.response import Response

from .binding import describe_endpoints
from .errors import InvalidRequestState
from .logging_setup import LOG_BUFFER
from .middleware import get_options

bp = Blueprint("diagnostics_api", __name__, url_prefix="/diagnostics")

_RECENT = 50


@bp.get("/compatibility-switches")
def compatibility_switches() -> tuple[Response, int]:
    options = get_options()
    payload: dict[str, Any] = {
        "compatibility_version": options.compatibility_version.value,
        "items": options.compatibility_switches.describe(),
    }
    return jsonify(payload), 200


@bp.get("/problem-details")
def problem_details_statuses() -> tuple[Response, int]:
    options = get_options()
    return jsonify({"statuses": sorted(options.problem_details_catalog.statuses())}), 200


@bp.get("/binding")
def binding_sources() -> tuple[Response, int]:
    options = get_options()
    payload = {
        "inference_suppressed": options.suppress_binding_source_inference,
        "consumes_suppressed": options.suppress_form_file_consumes_constraint,
        "items": describe_endpoints(current_app, options),
    }
    return jsonify(payload), 200


@bp.get("/log")
def recent_log() -> tuple[Response, int]:
    # Copy snapshot; the handler keeps appending while we serialize
    return jsonify({"items": list(LOG_BUFFER)[-_RECENT:]}), 200


@bp.get("/log/lookup")
def log_lookup() -> tuple[Response, int]:
    rid = request.args.get("request_id", "").strip()
    iid = request.args.get("incident_id", "").strip()
    if not rid and not iid:
        raise InvalidRequestState({"request_id": ["request_id or incident_id is required"]})
    hits = [
        r for r in LOG_BUFFER
        if (rid and r.get("request_id") == rid) or (iid and r.get("incident_id") == iid)
    ]
    return jsonify({"request_id": rid or None, "incident_id": iid or None, "hits": hits}), 200
