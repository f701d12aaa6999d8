"""Error-response policy for API endpoints.

``ApiBehaviorOptions`` is built once at startup, configured by the host, and
then read by the request middleware on every request. It owns:

 - the invalid request state -> response factory (never None)
 - the status code -> problem details catalog
 - the suppression flags consumed by the validation and binding layers
 - the compatibility switches (enumerable via ``iter(options)``)
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from .catalog import ProblemDetailsCatalog
from .compat_switches import CompatibilitySwitch, CompatibilityVersion, SwitchRegistry
from .context import ActionContext
from .errors import InvalidConfigurationError
from .problem_details import ValidationProblemDetails, problem_response

log = logging.getLogger(__name__)

ResponseFactory = Callable[[ActionContext], Any]

ALLOW_PROBLEM_DETAILS_FOR_CLIENT_ERRORS = "allow_problem_details_for_client_errors"

_BAD_REQUEST_TYPE = "https://tools.ietf.org/html/rfc7231#section-6.5.1"


def default_invalid_state_response(context: ActionContext) -> Any:
    """400 problem+json carrying the request's model state errors."""
    details = ValidationProblemDetails(
        type=_BAD_REQUEST_TYPE,
        errors=context.model_state.to_dict(),
    )
    if context.request is not None:
        details.instance = getattr(context.request, "path", None)
    return problem_response(details)


def _problem_details_default(version: CompatibilityVersion) -> bool:
    return version.at_least(CompatibilityVersion.VERSION_2_1)


class ApiBehaviorOptions:
    def __init__(self, compatibility_version: CompatibilityVersion = CompatibilityVersion.LATEST):
        self._switches = SwitchRegistry(compatibility_version)
        self._allow_problem_details = self._switches.register(
            ALLOW_PROBLEM_DETAILS_FOR_CLIENT_ERRORS, _problem_details_default
        )
        self._invalid_state_response_factory: ResponseFactory = default_invalid_state_response
        self.problem_details_catalog = ProblemDetailsCatalog()
        self.suppress_invalid_state_filter = False
        self.suppress_binding_source_inference = False
        self.suppress_form_file_consumes_constraint = False

    @property
    def invalid_state_response_factory(self) -> ResponseFactory:
        return self._invalid_state_response_factory

    @invalid_state_response_factory.setter
    def invalid_state_response_factory(self, value: ResponseFactory) -> None:
        if value is None:
            raise InvalidConfigurationError("invalid_state_response_factory")
        if not callable(value):
            raise InvalidConfigurationError(
                "invalid_state_response_factory", "invalid_state_response_factory must be callable"
            )
        self._invalid_state_response_factory = value
        log.info("invalid state response factory replaced: %s", getattr(value, "__qualname__", repr(value)))

    @property
    def allow_problem_details_for_client_errors(self) -> bool:
        return self._allow_problem_details.value

    @allow_problem_details_for_client_errors.setter
    def allow_problem_details_for_client_errors(self, value: bool) -> None:
        self._switches.set(ALLOW_PROBLEM_DETAILS_FOR_CLIENT_ERRORS, value)

    @property
    def compatibility_version(self) -> CompatibilityVersion:
        return self._switches.version

    @property
    def compatibility_switches(self) -> SwitchRegistry:
        return self._switches

    def all_switches(self) -> tuple[CompatibilitySwitch, ...]:
        return self._switches.all()

    def __iter__(self) -> Iterator[CompatibilitySwitch]:
        return iter(self._switches)


__all__ = [
    "ALLOW_PROBLEM_DETAILS_FOR_CLIENT_ERRORS",
    "ApiBehaviorOptions",
    "ResponseFactory",
    "default_invalid_state_response",
]
