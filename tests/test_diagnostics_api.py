from __future__ import annotations

from werkzeug.datastructures import FileStorage

from _problem_utils import assert_problem
from apibehavior.app_factory import create_app
from apibehavior.logging_setup import LOG_BUFFER
from apibehavior.middleware import get_options


def test_health(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok", "compatibility_version": "latest"}


def test_lists_compatibility_switches(client):
    r = client.get("/diagnostics/compatibility-switches")
    assert r.status_code == 200
    body = r.get_json()
    assert body["compatibility_version"] == "latest"
    assert body["items"] == [
        {
            "name": "allow_problem_details_for_client_errors",
            "value": True,
            "default": True,
            "is_value_set": False,
        }
    ]


def test_reflects_overrides(app):
    get_options(app).allow_problem_details_for_client_errors = False
    body = app.test_client().get("/diagnostics/compatibility-switches").get_json()
    item = body["items"][0]
    assert item["value"] is False
    assert item["is_value_set"] is True


def test_lists_catalog_statuses(client):
    body = client.get("/diagnostics/problem-details").get_json()
    assert body == {"statuses": [400, 401, 404]}


def test_diagnostics_can_be_disabled():
    app = create_app({"TESTING": True, "diagnostics_enabled": False})
    r = app.test_client().get("/diagnostics/compatibility-switches")
    assert r.status_code == 404


def test_binding_listing_reports_inferred_sources(app):
    @app.post("/reports/<int:report_id>/upload")
    def upload_report(report_id: int, file: FileStorage):
        return "ok"

    body = app.test_client().get("/diagnostics/binding").get_json()
    assert body["inference_suppressed"] is False
    (item,) = [i for i in body["items"] if i["endpoint"] == "upload_report"]
    assert item["parameters"] == [{"name": "report_id", "source": "path"}, {"name": "file", "source": "form"}]
    assert item["consumes"] == "multipart/form-data"


def test_binding_listing_honours_suppression_flags(app):
    @app.post("/reports/<int:report_id>/upload")
    def upload_report(report_id: int, file: FileStorage):
        return "ok"

    options = get_options(app)
    options.suppress_binding_source_inference = True
    options.suppress_form_file_consumes_constraint = True
    body = app.test_client().get("/diagnostics/binding").get_json()
    (item,) = [i for i in body["items"] if i["endpoint"] == "upload_report"]
    assert {p["source"] for p in item["parameters"]} == {None}
    assert item["consumes"] is None


def test_log_lookup_traces_incident_from_problem_body(app):
    @app.get("/explode")
    def explode():
        raise RuntimeError("kaboom")

    c = app.test_client()
    LOG_BUFFER.clear()
    problem = assert_problem(c.get("/explode", headers={"X-Request-Id": "trace-1"}), 500)

    recent = c.get("/diagnostics/log").get_json()["items"]
    assert any(e["incident_id"] == problem["incident_id"] for e in recent)

    body = c.get("/diagnostics/log/lookup", query_string={"incident_id": problem["incident_id"]}).get_json()
    assert [h["request_id"] for h in body["hits"]] == ["trace-1"]
    body = c.get("/diagnostics/log/lookup", query_string={"request_id": "trace-1"}).get_json()
    assert body["hits"][0]["incident_id"] == problem["incident_id"]


def test_log_lookup_without_keys_is_invalid_state(client):
    body = assert_problem(client.get("/diagnostics/log/lookup"), 400)
    assert "request_id" in body["errors"]
