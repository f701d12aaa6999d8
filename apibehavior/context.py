from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from flask import g, has_request_context, request


class ModelState(Mapping[str, tuple[str, ...]]):
    """Field name -> validation messages collected for one request.

    Built by the host's validation layer; the policy only reads it.
    """

    def __init__(self, errors: Mapping[str, Iterable[str] | str] | None = None):
        self._errors: dict[str, list[str]] = {}
        for key, messages in (errors or {}).items():
            if isinstance(messages, str):
                messages = [messages]
            for msg in messages:
                self.add_error(key, msg)

    def add_error(self, key: str, message: str) -> None:
        self._errors.setdefault(key, []).append(message)

    @property
    def is_valid(self) -> bool:
        return not any(self._errors.values())

    def __getitem__(self, key: str) -> tuple[str, ...]:
        return tuple(self._errors[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def to_dict(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._errors.items() if v}


@dataclass(frozen=True)
class ActionContext:
    """Per-request context handed to response and problem-details factories."""

    request: Any = None
    model_state: ModelState = field(default_factory=ModelState)
    endpoint: str | None = None
    request_id: str | None = None


def current_action_context(model_state: ModelState | None = None) -> ActionContext:
    """Return the ActionContext for the active Flask request (empty outside one)."""
    state = model_state if model_state is not None else ModelState()
    if not has_request_context():
        return ActionContext(model_state=state)
    return ActionContext(
        request=request._get_current_object(),  # noqa: SLF001
        model_state=state,
        endpoint=request.endpoint,
        request_id=getattr(g, "request_id", None),
    )


__all__ = ["ActionContext", "ModelState", "current_action_context"]
