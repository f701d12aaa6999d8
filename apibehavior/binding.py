"""Binding source inference rules (advisory metadata for the binding layer).

Route values bind from the path, uploaded files from the form, complex
types from the body, everything else from the query string. Nothing here
enforces a source; the binding layer decides whether to honor it.
"""
from __future__ import annotations

import datetime as _dt
import decimal
import enum
import inspect
import types
import typing
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from flask import Flask
from werkzeug.datastructures import FileStorage

from .options import ApiBehaviorOptions

MULTIPART_FORM_DATA = "multipart/form-data"

_UNION_ORIGINS = (typing.Union, types.UnionType)

_SIMPLE_TYPES: tuple[type, ...] = (
    str,
    int,
    float,
    bool,
    bytes,
    decimal.Decimal,
    uuid.UUID,
    _dt.date,
    _dt.datetime,
    _dt.time,
    _dt.timedelta,
    enum.Enum,
)


class BindingSource(enum.Enum):
    PATH = "path"
    FORM = "form"
    BODY = "body"
    QUERY = "query"


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    annotation: Any = str
    from_route: bool = False


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in _UNION_ORIGINS:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_class(tp: Any) -> bool:
    # Parametrized generics (list[int]) are not plain classes
    return typing.get_origin(tp) is None and isinstance(tp, type)


def is_file_type(tp: Any) -> bool:
    tp = _unwrap_optional(tp)
    if _is_class(tp) and issubclass(tp, FileStorage):
        return True
    origin = typing.get_origin(tp)
    if isinstance(origin, type) and issubclass(origin, Iterable):
        args = typing.get_args(tp)
        return bool(args) and is_file_type(args[0])
    return False


def is_simple_type(tp: Any) -> bool:
    tp = _unwrap_optional(tp)
    return _is_class(tp) and issubclass(tp, _SIMPLE_TYPES)


def infer_binding_source(options: ApiBehaviorOptions, parameter: ParameterDescriptor) -> BindingSource | None:
    if options.suppress_binding_source_inference:
        return None
    if parameter.from_route:
        return BindingSource.PATH
    if is_file_type(parameter.annotation):
        return BindingSource.FORM
    if not is_simple_type(parameter.annotation):
        return BindingSource.BODY
    return BindingSource.QUERY


def consumes_constraint(options: ApiBehaviorOptions, parameters: Iterable[ParameterDescriptor]) -> str | None:
    """Content type an endpoint should require, or None when unconstrained."""
    if options.suppress_form_file_consumes_constraint:
        return None
    for p in parameters:
        if infer_binding_source(options, p) is BindingSource.FORM:
            return MULTIPART_FORM_DATA
    return None


def infer_parameters(view: Any, route_arguments: Iterable[str] = ()) -> list[ParameterDescriptor]:
    """ParameterDescriptors for a view function, marking the names bound by its URL rule."""
    view = inspect.unwrap(view)
    try:
        hints = typing.get_type_hints(view)
    except (NameError, TypeError):
        hints = {}
    routed = set(route_arguments)
    out: list[ParameterDescriptor] = []
    for name, p in inspect.signature(view).parameters.items():
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(name, str if p.annotation is inspect.Parameter.empty else p.annotation)
        out.append(ParameterDescriptor(name, annotation, from_route=name in routed))
    return out


def describe_endpoints(app: Flask, options: ApiBehaviorOptions) -> list[dict[str, Any]]:
    """Inferred binding sources and consumes constraint for every routed view."""
    items: list[dict[str, Any]] = []
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: (r.rule, r.endpoint)):
        view = app.view_functions.get(rule.endpoint)
        if view is None or rule.endpoint == "static":
            continue
        params = infer_parameters(view, rule.arguments)
        sources = [infer_binding_source(options, p) for p in params]
        items.append(
            {
                "endpoint": rule.endpoint,
                "rule": rule.rule,
                "parameters": [
                    {"name": p.name, "source": s.value if s is not None else None} for p, s in zip(params, sources)
                ],
                "consumes": consumes_constraint(options, params),
            }
        )
    return items


__all__ = [
    "MULTIPART_FORM_DATA",
    "BindingSource",
    "ParameterDescriptor",
    "consumes_constraint",
    "describe_endpoints",
    "infer_parameters",
    "infer_binding_source",
    "is_file_type",
    "is_simple_type",
]
