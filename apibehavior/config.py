from __future__ import annotations

import os
from dataclasses import dataclass

from .compat_switches import CompatibilityVersion
from .errors import InvalidConfigurationError
from .options import ApiBehaviorOptions


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    compatibility_version: str = "latest"
    suppress_invalid_state_filter: bool = False
    suppress_binding_source_inference: bool = False
    suppress_form_file_consumes_constraint: bool = False
    allow_problem_details_for_client_errors: bool | None = None  # None keeps the version default
    diagnostics_enabled: bool = True

    @classmethod
    def from_env(cls) -> Config:
        client_errors = os.getenv("APIBEHAVIOR_PROBLEM_DETAILS_CLIENT_ERRORS")
        return cls(
            compatibility_version=os.getenv("APIBEHAVIOR_COMPAT_VERSION", "latest"),
            suppress_invalid_state_filter=_env_flag("APIBEHAVIOR_SUPPRESS_INVALID_STATE_FILTER"),
            suppress_binding_source_inference=_env_flag("APIBEHAVIOR_SUPPRESS_BINDING_INFERENCE"),
            suppress_form_file_consumes_constraint=_env_flag("APIBEHAVIOR_SUPPRESS_FORM_FILE_CONSUMES"),
            allow_problem_details_for_client_errors=(
                None if client_errors is None else _env_flag("APIBEHAVIOR_PROBLEM_DETAILS_CLIENT_ERRORS")
            ),
            diagnostics_enabled=_env_flag("APIBEHAVIOR_DIAGNOSTICS", "1"),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def version(self) -> CompatibilityVersion:
        raw = self.compatibility_version
        if isinstance(raw, CompatibilityVersion):
            return raw
        try:
            return CompatibilityVersion.parse(raw)
        except ValueError as exc:
            raise InvalidConfigurationError("compatibility_version", str(exc)) from exc

    def build_options(self) -> ApiBehaviorOptions:
        options = ApiBehaviorOptions(self.version())
        options.suppress_invalid_state_filter = bool(self.suppress_invalid_state_filter)
        options.suppress_binding_source_inference = bool(self.suppress_binding_source_inference)
        options.suppress_form_file_consumes_constraint = bool(self.suppress_form_file_consumes_constraint)
        if self.allow_problem_details_for_client_errors is not None:
            options.allow_problem_details_for_client_errors = bool(self.allow_problem_details_for_client_errors)
        return options

    def to_flask_dict(self):
        return {
            "APIBEHAVIOR_COMPAT_VERSION": self.version().value,
            "APIBEHAVIOR_DIAGNOSTICS": self.diagnostics_enabled,
        }
