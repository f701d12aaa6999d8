"""Flask seam that consumes ApiBehaviorOptions on every request.

 - request id assignment / echo
 - invalid state filter (decorator) and InvalidRequestState handler
 - error statuses rendered from the problem details catalog (4xx gated by the
   client-errors switch, 5xx always), keeping the exception's own headers
 - catch-all 500 problem with incident id
"""
from __future__ import annotations

import functools
import logging
import uuid
from collections.abc import Callable
from typing import Any

from flask import Flask, current_app, g, request
from werkzeug.exceptions import HTTPException
from werkzeug.http import HTTP_STATUS_CODES
from werkzeug.wrappers.response import Response

from .context import ModelState, current_action_context
from .errors import InvalidRequestState
from .options import ApiBehaviorOptions
from .problem_details import ProblemDetails, problem_response

log = logging.getLogger(__name__)

EXTENSION_KEY = "api_behavior"


def init_api_behavior(app: Flask, options: ApiBehaviorOptions) -> ApiBehaviorOptions:
    """Attach the configured policy to the app; call once, before serving requests."""
    app.extensions[EXTENSION_KEY] = options

    @app.before_request
    def _assign_request_id() -> None:
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _echo_request_id(resp: Response) -> Response:
        rid = getattr(g, "request_id", None)
        if rid:
            resp.headers["X-Request-Id"] = rid
        return resp

    register_error_handlers(app)
    app.logger.info(
        "api behavior installed: compatibility_version=%s switches=%s catalog=%s",
        options.compatibility_version.value,
        [s.name for s in options.all_switches()],
        list(options.problem_details_catalog.statuses()),
    )
    return options


def get_options(app: Flask | None = None) -> ApiBehaviorOptions:
    target = app or current_app
    return target.extensions[EXTENSION_KEY]


def model_state() -> ModelState:
    """ModelState for the current request; validators add errors to it."""
    state = getattr(g, "model_state", None)
    if state is None:
        state = ModelState()
        g.model_state = state
    return state


def invalid_state_filter(view: Callable[..., Any]) -> Callable[..., Any]:
    """Short-circuit the view through the policy when the model state is invalid.

    When ``suppress_invalid_state_filter`` is on the view always runs and is
    expected to inspect ``model_state()`` itself.
    """

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        options = get_options()
        state = model_state()
        if not options.suppress_invalid_state_filter and not state.is_valid:
            return options.invalid_state_response_factory(current_action_context(state))
        return view(*args, **kwargs)

    return wrapper


def internal_server_error(incident_id: str | None = None, status: int = 500) -> Response:
    details = ProblemDetails(
        type="about:blank",
        title=HTTP_STATUS_CODES.get(status, "Internal Server Error"),
        status=status,
        detail="internal_error" if status == 500 else "server_error",
        extensions={"incident_id": incident_id or str(uuid.uuid4())},
    )
    return problem_response(details)


def client_error_response(options: ApiBehaviorOptions, status: int) -> Response | None:
    """Problem response for a 4xx status, or None when the policy does not cover it."""
    if not options.allow_problem_details_for_client_errors:
        return None
    if status < 400 or status >= 500:
        return None
    return _catalog_response(options, status)


def server_error_response(options: ApiBehaviorOptions, status: int) -> Response:
    """Problem response for a 5xx status; catalog entry when registered, generic body otherwise."""
    resp = _catalog_response(options, status)
    if resp is not None:
        return resp
    incident_id = str(uuid.uuid4())
    log.warning(
        "Server error status=%s incident_id=%s path=%s",
        status,
        incident_id,
        request.path,
        extra={"incident_id": incident_id},
    )
    return internal_server_error(incident_id, status=status)


def _catalog_response(options: ApiBehaviorOptions, status: int) -> Response | None:
    details = options.problem_details_catalog.create(status, current_action_context())
    if details is None:
        return None
    return problem_response(details, status=status)


# The problem body replaces Werkzeug's HTML body; everything else (Allow, WWW-Authenticate, ...) is kept
_BODY_HEADERS = frozenset({"content-type", "content-length"})


def _copy_exception_headers(ex: HTTPException, resp: Response) -> Response:
    for key, value in ex.get_headers(request.environ):
        if key.lower() not in _BODY_HEADERS:
            resp.headers.add(key, value)
    return resp


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InvalidRequestState)
    def _h_invalid_state(err: InvalidRequestState) -> Any:
        options = get_options(app)
        if options.suppress_invalid_state_filter:
            # The host opted to handle invalid state itself; reaching here means it did not
            incident_id = str(uuid.uuid4())
            log.error(
                "Unhandled invalid request state incident_id=%s path=%s",
                incident_id,
                request.path,
                extra={"incident_id": incident_id},
            )
            return internal_server_error(incident_id)
        return options.invalid_state_response_factory(current_action_context(err.model_state))

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Any:
        options = get_options(app)
        status = ex.code or 500
        if status >= 500:
            resp = server_error_response(options, status)
        else:
            resp = client_error_response(options, status)
            if resp is None:
                return ex
        return _copy_exception_headers(ex, resp)

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        log.error(
            "Unhandled exception incident_id=%s path=%s",
            incident_id,
            request.path,
            exc_info=ex,
            extra={"incident_id": incident_id},
        )
        return internal_server_error(incident_id)


__all__ = [
    "EXTENSION_KEY",
    "client_error_response",
    "get_options",
    "init_api_behavior",
    "internal_server_error",
    "invalid_state_filter",
    "model_state",
    "register_error_handlers",
    "server_error_response",
]
