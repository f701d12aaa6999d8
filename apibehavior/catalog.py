"""Status code -> problem details factory catalog.

Every factory receives the live ActionContext and returns a new
ProblemDetails on each call. Lookups of unknown statuses return None; choosing
a fallback is left to the caller.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from .context import ActionContext
from .problem_details import ProblemDetails

log = logging.getLogger(__name__)

ProblemDetailsFactory = Callable[[ActionContext], ProblemDetails]


def _bad_request(_ctx: ActionContext) -> ProblemDetails:
    return ProblemDetails(
        type="https://tools.ietf.org/html/rfc7231#section-6.5.1",
        status=400,
        detail="Unable to process the request due to a client error.",
    )


def _unauthorized(_ctx: ActionContext) -> ProblemDetails:
    return ProblemDetails(
        type="https://tools.ietf.org/html/rfc7235#section-3.1",
        status=401,
        detail="Authentication is required and has failed or has not yet been provided.",
    )


def _not_found(_ctx: ActionContext) -> ProblemDetails:
    return ProblemDetails(
        type="https://tools.ietf.org/html/rfc7231#section-6.5.4",
        status=404,
        detail="The server has not found anything matching the Request-URI",
    )


DEFAULT_FACTORIES: dict[int, ProblemDetailsFactory] = {
    400: _bad_request,
    401: _unauthorized,
    404: _not_found,
}


class ProblemDetailsCatalog:
    def __init__(self, entries: dict[int, ProblemDetailsFactory] | None = None):
        # Own copy per instance; two catalogs never share entries
        self._entries: dict[int, ProblemDetailsFactory] = dict(
            DEFAULT_FACTORIES if entries is None else entries
        )

    def lookup(self, status: int) -> ProblemDetailsFactory | None:
        return self._entries.get(int(status))

    def set(self, status: int, factory: ProblemDetailsFactory) -> None:
        self._entries[int(status)] = factory
        log.debug("problem details factory registered for status %s", status)

    def remove(self, status: int) -> None:
        if self._entries.pop(int(status), None) is not None:
            log.debug("problem details factory removed for status %s", status)

    def create(self, status: int, context: ActionContext) -> ProblemDetails | None:
        factory = self.lookup(status)
        if factory is None:
            return None
        return factory(context)

    def statuses(self) -> tuple[int, ...]:
        return tuple(self._entries)

    def __contains__(self, status: object) -> bool:
        try:
            return int(status) in self._entries  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return False

    def __iter__(self) -> Iterator[int]:
        return iter(self.statuses())

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["DEFAULT_FACTORIES", "ProblemDetailsCatalog", "ProblemDetailsFactory"]
