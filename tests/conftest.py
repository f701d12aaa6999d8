import os
import sys

import pytest

# Path setup before any project imports
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

_ENV_KEYS = (
    "APIBEHAVIOR_COMPAT_VERSION",
    "APIBEHAVIOR_SUPPRESS_INVALID_STATE_FILTER",
    "APIBEHAVIOR_SUPPRESS_BINDING_INFERENCE",
    "APIBEHAVIOR_SUPPRESS_FORM_FILE_CONSUMES",
    "APIBEHAVIOR_PROBLEM_DETAILS_CLIENT_ERRORS",
    "APIBEHAVIOR_DIAGNOSTICS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # A developer .env or shell export must not leak into policy defaults
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def app():
    from apibehavior.app_factory import create_app

    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()
