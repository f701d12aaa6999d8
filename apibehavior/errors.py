"""Error types raised by the api-behavior policy.

Only one error kind exists in the configuration core: an invalid configuration
value assigned during startup. ``InvalidRequestState`` is the signal host
validation code raises to hand a failed request over to the policy.
"""
from __future__ import annotations

from typing import Any

from .context import ModelState


class InvalidConfigurationError(ValueError):
    """Raised synchronously at the configuration site for a bad value."""

    def __init__(self, name: str, detail: str | None = None):
        self.name = name
        self.detail = detail or f"{name} must not be None"
        super().__init__(self.detail)


class InvalidRequestState(Exception):
    """Raised by host validation when inbound data fails before the view body runs."""

    def __init__(self, model_state: ModelState | dict[str, Any] | None = None, detail: str | None = None):
        if isinstance(model_state, ModelState):
            self.model_state = model_state
        else:
            self.model_state = ModelState(model_state or {})
        self.detail = detail or "invalid_request_state"
        super().__init__(self.detail)


__all__ = ["InvalidConfigurationError", "InvalidRequestState"]
