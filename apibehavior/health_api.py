from __future__ import annotations

from typing import Any

from flask import Blueprint

from .middleware import get_options

bp = Blueprint("health_api", __name__)


@bp.get("/healthz")
def healthz() -> tuple[dict[str, Any], int]:
    # Minimal health endpoint for container orchestrators; reports the policy version in force
    return {"status": "ok", "compatibility_version": get_options().compatibility_version.value}, 200
