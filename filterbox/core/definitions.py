# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Filter definitions.

A FilterDefinition is the static metadata for one filter overload. It is
built once, when a provider is registered, by reading the callable's
signature. Nothing here is consulted by reflection at call time: the
resolver and binder work purely from the ParameterSpec tuples.

Signature convention for a filter callable:

    def money(input): ...                        # no arguments
    def adjust(input, offset: int = 10): ...     # one optional argument
    @context_filter
    def bank_statement(context, input): ...      # context injected first

The parameter that receives the piped value is never part of `parameters`;
neither is the context parameter.
"""

import inspect
import re
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .exceptions import FilterRegistrationError

# Attribute set by @filter_function on decorated callables
FILTER_META_ATTR = "__filterbox__"

_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s\-]+")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


class ParameterType(Enum):
    """Semantic type of a filter parameter"""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ANY = "any"


_ANNOTATION_TYPES = {
    str: ParameterType.STRING,
    int: ParameterType.INTEGER,
    float: ParameterType.FLOAT,
    bool: ParameterType.BOOLEAN,
    "str": ParameterType.STRING,
    "int": ParameterType.INTEGER,
    "float": ParameterType.FLOAT,
    "bool": ParameterType.BOOLEAN,
}


def to_filter_name(name: str) -> str:
    """
    Normalize a declared callable name to its canonical filter name.

    Case transitions become underscores and the result is lowercased:
    `MoneyWithUnderscore` -> `money_with_underscore`,
    `stripHTML` -> `strip_html`.
    """
    name = _CASE_BOUNDARY.sub("_", name.strip())
    name = _SEPARATORS.sub("_", name)
    return _REPEATED_UNDERSCORES.sub("_", name).lower()


def filter_function(
    func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    takes_context: bool = False,
):
    """
    Attach filter metadata to a callable.

    Usage:
        @filter_function(name="concat")
        def concat_three(one, two, three): ...

        @filter_function(takes_context=True)
        def bank_statement(context, input): ...

    Several callables declaring the same `name` inside one provider form an
    overload set; they must differ in parameter count.
    """

    def decorator(f):
        # Stacked above @staticmethod/@classmethod: mark the wrapped function
        target = f.__func__ if isinstance(f, (staticmethod, classmethod)) else f
        setattr(target, FILTER_META_ATTR, {"name": name, "takes_context": takes_context})
        return f

    if func is not None:
        return decorator(func)
    return decorator


def context_filter(func: Optional[Callable] = None, *, name: Optional[str] = None):
    """Shorthand for filter_function(takes_context=True)"""
    return filter_function(func, name=name, takes_context=True)


@dataclass(frozen=True)
class ParameterSpec:
    """One declared argument of a filter (input and context excluded)"""

    position: int
    name: str
    type: ParameterType = ParameterType.ANY
    has_default: bool = False
    default: Any = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"position": self.position, "name": self.name, "type": self.type.value}
        if self.has_default:
            result["default"] = self.default
        return result


@dataclass(frozen=True)
class FilterDefinition:
    """Immutable metadata for one filter overload"""

    name: str
    func: Callable[..., Any]
    parameters: Tuple[ParameterSpec, ...] = ()
    takes_context: bool = False

    @property
    def total_params(self) -> int:
        return len(self.parameters)

    @property
    def required_params(self) -> int:
        return sum(1 for spec in self.parameters if not spec.has_default)

    def accepts(self, supplied: int) -> bool:
        """Check whether `supplied` arguments fall within this overload's range"""
        return self.required_params <= supplied <= self.total_params

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [spec.to_dict() for spec in self.parameters],
            "takes_context": self.takes_context,
        }

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        name: Optional[str] = None,
        takes_context: Optional[bool] = None,
    ) -> "FilterDefinition":
        """
        Build a definition from a callable's signature.

        Explicit `name`/`takes_context` win over metadata attached with
        @filter_function, which wins over the callable's own name.

        Raises:
            FilterRegistrationError: If the signature cannot be used as a filter
        """
        meta = getattr(func, FILTER_META_ATTR, None) or {}
        declared_name = name or meta.get("name") or getattr(func, "__name__", None)
        if not declared_name:
            raise FilterRegistrationError(f"Cannot derive a filter name for {func!r}")
        if takes_context is None:
            takes_context = bool(meta.get("takes_context", False))

        filter_name = to_filter_name(declared_name)

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as e:
            raise FilterRegistrationError(
                f"Filter '{filter_name}' has no inspectable signature",
                source=repr(func),
                cause=e,
            )

        positional = []
        for param in signature.parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                raise FilterRegistrationError(
                    f"Filter '{filter_name}' uses variadic parameter '{param.name}'",
                    source=repr(func),
                )
            if param.kind == param.KEYWORD_ONLY:
                if param.default is param.empty:
                    raise FilterRegistrationError(
                        f"Filter '{filter_name}' has required keyword-only parameter '{param.name}'",
                        source=repr(func),
                    )
                continue
            positional.append(param)

        leading = 2 if takes_context else 1
        if len(positional) < leading:
            expected = "a context and an input parameter" if takes_context else "an input parameter"
            raise FilterRegistrationError(
                f"Filter '{filter_name}' must declare {expected}",
                source=repr(func),
            )

        hints = _type_hints(func)
        specs = []
        for position, param in enumerate(positional[leading:]):
            has_default = param.default is not param.empty
            specs.append(
                ParameterSpec(
                    position=position,
                    name=param.name,
                    type=_semantic_type(hints.get(param.name, param.annotation)),
                    has_default=has_default,
                    default=param.default if has_default else None,
                )
            )

        return cls(
            name=filter_name,
            func=func,
            parameters=tuple(specs),
            takes_context=takes_context,
        )


def _type_hints(func: Callable) -> Dict[str, Any]:
    """Resolve annotations, falling back to the raw ones for unresolvable forward refs"""
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError):
        return dict(getattr(func, "__annotations__", {}))


def _semantic_type(annotation: Any) -> ParameterType:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            annotation = members[0]
    if isinstance(annotation, (type, str)):
        return _ANNOTATION_TYPES.get(annotation, ParameterType.ANY)
    return ParameterType.ANY
