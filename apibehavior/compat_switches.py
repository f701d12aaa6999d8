"""Compatibility switches: named boolean toggles with version-derived defaults.

A switch's default is computed once, when it is registered, from the
compatibility version the registry was created with. Operators override a
switch explicitly; reads return the override when one is recorded.

The set of switches is fixed once startup completes. Only values change.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from enum import Enum
from typing import TypedDict, Union

log = logging.getLogger(__name__)


class CompatibilityVersion(Enum):
    VERSION_2_0 = "2.0"
    VERSION_2_1 = "2.1"
    LATEST = "latest"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def at_least(self, other: CompatibilityVersion) -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, raw: str) -> CompatibilityVersion:
        key = (raw or "").strip().lower()
        for v in cls:
            if key in (v.value, v.name.lower()):
                return v
        raise ValueError(f"unknown compatibility version: {raw!r}")


_RANKS = {
    CompatibilityVersion.VERSION_2_0: 0,
    CompatibilityVersion.VERSION_2_1: 1,
    CompatibilityVersion.LATEST: 1_000,
}

DefaultSpec = Union[bool, Callable[[CompatibilityVersion], bool]]


class SwitchState(TypedDict):
    name: str
    value: bool
    default: bool
    is_value_set: bool


class CompatibilitySwitch:
    __slots__ = ("_name", "_default", "_override")

    def __init__(self, name: str, default: bool = False):
        self._name = name
        self._default = bool(default)
        self._override: bool | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def default(self) -> bool:
        return self._default

    @property
    def is_value_set(self) -> bool:
        return self._override is not None

    @property
    def value(self) -> bool:
        return self._default if self._override is None else self._override

    @value.setter
    def value(self, value: bool) -> None:
        self._override = bool(value)

    def __repr__(self) -> str:
        return f"CompatibilitySwitch({self._name!r}, value={self.value})"


class SwitchRegistry:
    """Ordered registry of compatibility switches for one policy instance."""

    def __init__(self, version: CompatibilityVersion = CompatibilityVersion.LATEST):
        self._version = version
        self._switches: dict[str, CompatibilitySwitch] = {}

    @property
    def version(self) -> CompatibilityVersion:
        return self._version

    def register(self, name: str, default: DefaultSpec = False) -> CompatibilitySwitch:
        """Create a switch, computing its default against the registry version.

        Re-registering a name returns the existing switch unchanged.
        """
        existing = self._switches.get(name)
        if existing is not None:
            return existing
        value = default(self._version) if callable(default) else default
        switch = CompatibilitySwitch(name, bool(value))
        self._switches[name] = switch
        return switch

    def get(self, name: str) -> bool:
        return self._switches[name].value

    def set(self, name: str, value: bool) -> None:
        self._switches[name].value = value
        log.debug("compatibility switch %s set to %s", name, bool(value))

    def all(self) -> tuple[CompatibilitySwitch, ...]:
        return tuple(self._switches.values())

    def describe(self) -> list[SwitchState]:
        return [
            {"name": s.name, "value": s.value, "default": s.default, "is_value_set": s.is_value_set}
            for s in self._switches.values()
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._switches

    def __iter__(self) -> Iterator[CompatibilitySwitch]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._switches)


__all__ = [
    "CompatibilitySwitch",
    "CompatibilityVersion",
    "SwitchRegistry",
    "SwitchState",
]
