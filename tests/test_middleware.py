from __future__ import annotations

import pytest
from flask import abort, jsonify, request
from werkzeug.datastructures import WWWAuthenticate
from werkzeug.exceptions import MethodNotAllowed, Unauthorized

from _problem_utils import assert_problem
from apibehavior.app_factory import create_app
from apibehavior.errors import InvalidConfigurationError, InvalidRequestState
from apibehavior.middleware import get_options, invalid_state_filter, model_state
from apibehavior.problem_details import ProblemDetails, VALIDATION_TITLE


def _make_app(**override):
    app = create_app({"TESTING": True, **override})

    @app.get("/orders/<int:oid>")
    def get_order(oid: int):
        if oid == 0:
            abort(404)
        if oid == 1:
            abort(401)
        if oid == 2:
            abort(409)
        if oid == 3:
            abort(503)
        return jsonify({"id": oid})

    @app.post("/orders")
    @invalid_state_filter
    def create_order():
        state = model_state()
        if not state.is_valid:
            return jsonify({"handled_manually": state.to_dict()}), 422
        return jsonify({"ok": True}), 201

    @app.before_request
    def _validate():
        if request.endpoint == "create_order":
            body = request.get_json(silent=True) or {}
            if not body.get("sku"):
                model_state().add_error("sku", "The sku field is required.")

    @app.post("/raise-invalid")
    def raise_invalid():
        raise InvalidRequestState({"qty": ["must be positive"]})

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    return app


def test_request_id_echoed():
    c = _make_app().test_client()
    r = c.get("/orders/5", headers={"X-Request-Id": "abc-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-Id"] == "abc-123"
    r2 = c.get("/orders/5")
    assert r2.headers.get("X-Request-Id")


def test_not_found_rendered_from_catalog():
    c = _make_app().test_client()
    r = c.get("/orders/0", headers={"X-Request-Id": "rid-404"})
    body = assert_problem(r, 404)
    assert body["type"] == "https://tools.ietf.org/html/rfc7231#section-6.5.4"
    assert body["detail"] == "The server has not found anything matching the Request-URI"
    assert body["request_id"] == "rid-404"


def test_unauthorized_rendered_from_catalog():
    c = _make_app().test_client()
    body = assert_problem(c.get("/orders/1"), 401)
    assert body["type"] == "https://tools.ietf.org/html/rfc7235#section-3.1"


def test_unrouted_path_uses_catalog():
    c = _make_app().test_client()
    assert_problem(c.get("/does-not-exist"), 404)


def test_status_without_catalog_entry_falls_back_to_werkzeug():
    c = _make_app().test_client()
    r = c.get("/orders/2")
    assert r.status_code == 409
    assert not r.headers.get("Content-Type", "").startswith("application/problem+json")


def test_switch_off_leaves_client_errors_untouched():
    app = _make_app(allow_problem_details_for_client_errors=False)
    r = app.test_client().get("/orders/0")
    assert r.status_code == 404
    assert not r.headers.get("Content-Type", "").startswith("application/problem+json")


def test_legacy_version_leaves_client_errors_untouched():
    app = _make_app(compatibility_version="2.0")
    r = app.test_client().get("/orders/0")
    assert r.status_code == 404
    assert not r.headers.get("Content-Type", "").startswith("application/problem+json")


def test_custom_catalog_entry_is_used():
    app = _make_app()
    get_options(app).problem_details_catalog.set(
        409, lambda ctx: ProblemDetails(type="https://example.com/errors/conflict", status=409, detail="conflict")
    )
    body = assert_problem(app.test_client().get("/orders/2"), 409)
    assert body["type"] == "https://example.com/errors/conflict"


def test_server_errors_render_generic_problem():
    c = _make_app().test_client()
    body = assert_problem(c.get("/boom"), 500)
    assert body["detail"] == "internal_error"


def test_invalid_state_short_circuits_with_default_factory():
    c = _make_app().test_client()
    r = c.post("/orders", json={})
    body = assert_problem(r, 400)
    assert body["title"] == VALIDATION_TITLE
    assert body["errors"] == {"sku": ["The sku field is required."]}
    assert body["instance"] == "/orders"


def test_valid_state_reaches_view():
    c = _make_app().test_client()
    r = c.post("/orders", json={"sku": "A-1"})
    assert r.status_code == 201


def test_custom_invalid_state_factory_is_invoked_with_context():
    seen = []

    def factory(ctx):
        seen.append(ctx)
        return jsonify({"bad": sorted(ctx.model_state)}), 422

    app = create_app({"TESTING": True}, configure=lambda o: setattr(o, "invalid_state_response_factory", factory))
    app.add_url_rule("/x", "x", invalid_state_filter(lambda: "ok"), methods=["POST"])

    @app.before_request
    def _v():
        model_state().add_error("name", "required")

    r = app.test_client().post("/x", headers={"X-Request-Id": "ctx-1"})
    assert r.status_code == 422
    assert r.get_json() == {"bad": ["name"]}
    assert seen[0].request_id == "ctx-1"
    assert seen[0].endpoint == "x"


def test_suppressed_filter_lets_view_handle_state():
    app = _make_app(suppress_invalid_state_filter=True)
    r = app.test_client().post("/orders", json={})
    assert r.status_code == 422
    assert r.get_json() == {"handled_manually": {"sku": ["The sku field is required."]}}


def test_raised_invalid_state_goes_through_factory():
    c = _make_app().test_client()
    body = assert_problem(c.post("/raise-invalid"), 400)
    assert body["errors"] == {"qty": ["must be positive"]}


def test_raised_invalid_state_when_suppressed_is_unhandled():
    app = _make_app(suppress_invalid_state_filter=True)
    body = assert_problem(app.test_client().post("/raise-invalid"), 500)
    assert body["incident_id"]


def test_configuration_error_aborts_startup():
    with pytest.raises(InvalidConfigurationError):
        create_app({"TESTING": True}, configure=lambda o: setattr(o, "invalid_state_response_factory", None))


def test_apps_do_not_share_policy():
    a = _make_app()
    b = _make_app()
    get_options(a).problem_details_catalog.remove(404)
    assert get_options(b).problem_details_catalog.lookup(404) is not None


def test_server_error_keeps_status_without_catalog_entry():
    c = _make_app().test_client()
    body = assert_problem(c.get("/orders/3"), 503)
    assert body["title"] == "Service Unavailable"
    assert body["incident_id"]


def test_server_error_uses_catalog_entry():
    app = _make_app()
    get_options(app).problem_details_catalog.set(
        503,
        lambda ctx: ProblemDetails(type="https://example.com/errors/maintenance", status=503, detail="maintenance"),
    )
    body = assert_problem(app.test_client().get("/orders/3"), 503)
    assert body["type"] == "https://example.com/errors/maintenance"
    assert body["detail"] == "maintenance"


def test_server_error_catalog_entry_ignores_client_error_switch():
    app = _make_app(allow_problem_details_for_client_errors=False)
    get_options(app).problem_details_catalog.set(
        503, lambda ctx: ProblemDetails(type="about:blank", status=503, detail="maintenance")
    )
    body = assert_problem(app.test_client().get("/orders/3"), 503)
    assert body["detail"] == "maintenance"


def test_unauthorized_keeps_www_authenticate_challenge():
    app = _make_app()

    @app.get("/secure")
    def secure():
        raise Unauthorized(www_authenticate=WWWAuthenticate("Bearer", {"realm": "api"}))

    r = app.test_client().get("/secure")
    body = assert_problem(r, 401)
    assert body["type"] == "https://tools.ietf.org/html/rfc7235#section-3.1"
    assert r.headers.get("WWW-Authenticate", "").startswith("Bearer")


def test_method_not_allowed_keeps_allow_header():
    app = _make_app()
    get_options(app).problem_details_catalog.set(
        405, lambda ctx: ProblemDetails(type="about:blank", status=405, detail="method_not_allowed")
    )

    @app.get("/only-get")
    def only_get():
        raise MethodNotAllowed(valid_methods=["GET", "HEAD"])

    r = app.test_client().get("/only-get")
    assert_problem(r, 405)
    assert r.headers["Allow"] == "GET, HEAD"
    assert r.headers["Content-Type"].startswith("application/problem+json")
