# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Filter providers.

A FilterProvider is the unit of registration: a named, ordered set of
FilterDefinitions introspected once from a source of callables and immutable
afterwards.

Accepted sources:
    - a class: its public static methods and class methods
    - a module: its public functions (restricted to __all__ when defined)
    - a mapping of filter name to callable
    - a list/tuple of callables
    - a single function
    - any other object: its public bound methods
    - an existing FilterProvider (returned unchanged)
"""

import inspect
import logging
import types
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .definitions import FilterDefinition
from .exceptions import FilterRegistrationError

logger = logging.getLogger("filterbox.provider")


class FilterProvider:
    """
    Immutable, ordered set of filter definitions registered together.

    Definitions sharing a name form an overload set and must differ in
    their total parameter count.
    """

    def __init__(
        self,
        name: str,
        definitions: Iterable[FilterDefinition],
        order: Optional[int] = None,
    ):
        self.name = name
        self.order = order
        self._definitions: Tuple[FilterDefinition, ...] = tuple(definitions)

        grouped: Dict[str, List[FilterDefinition]] = {}
        for definition in self._definitions:
            overloads = grouped.setdefault(definition.name, [])
            for existing in overloads:
                if existing.total_params == definition.total_params:
                    raise FilterRegistrationError(
                        f"Provider '{name}' defines filter '{definition.name}' twice "
                        f"with {definition.total_params} parameter(s)",
                        source=name,
                    )
            overloads.append(definition)

        self._by_name: Dict[str, Tuple[FilterDefinition, ...]] = {
            filter_name: tuple(sorted(overloads, key=lambda d: d.total_params))
            for filter_name, overloads in grouped.items()
        }

    @property
    def definitions(self) -> Tuple[FilterDefinition, ...]:
        return self._definitions

    def names(self) -> List[str]:
        """Filter names in declaration order"""
        return list(self._by_name.keys())

    def get(self, name: str) -> Optional[Tuple[FilterDefinition, ...]]:
        """Overload set for `name`, ordered by parameter count"""
        return self._by_name.get(name)

    def with_order(self, order: int) -> "FilterProvider":
        """Copy of this provider stamped with a registration index"""
        provider = FilterProvider.__new__(FilterProvider)
        provider.name = self.name
        provider.order = order
        provider._definitions = self._definitions
        provider._by_name = self._by_name
        return provider

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"FilterProvider(name={self.name!r}, order={self.order!r}, filters={self.names()!r})"

    # =========================================================================
    # Introspection
    # =========================================================================

    @classmethod
    def from_source(cls, source: Any, name: Optional[str] = None) -> "FilterProvider":
        """
        Introspect `source` into a provider.

        Raises:
            FilterRegistrationError: If the source yields no usable filters
        """
        if isinstance(source, FilterProvider):
            return source

        provider_name = name or _source_name(source)

        if isinstance(source, Mapping):
            definitions = [
                FilterDefinition.from_callable(_require_callable(func, key), name=key)
                for key, func in source.items()
            ]
        elif isinstance(source, (list, tuple)):
            definitions = [
                FilterDefinition.from_callable(_require_callable(func, provider_name))
                for func in source
            ]
        elif isinstance(source, types.ModuleType):
            definitions = [FilterDefinition.from_callable(func) for func in _module_callables(source)]
        elif inspect.isclass(source):
            definitions = [FilterDefinition.from_callable(func) for func in _class_callables(source)]
        elif inspect.isfunction(source) or inspect.isbuiltin(source):
            definitions = [FilterDefinition.from_callable(source)]
        else:
            definitions = [FilterDefinition.from_callable(func) for func in _instance_callables(source)]

        if not definitions:
            raise FilterRegistrationError(
                f"Provider source '{provider_name}' defines no filters",
                source=provider_name,
            )

        provider = cls(provider_name, definitions)
        logger.debug(f"Introspected provider {provider_name}: {provider.names()}")
        return provider


def _source_name(source: Any) -> str:
    if isinstance(source, types.ModuleType) or inspect.isclass(source) or inspect.isfunction(source):
        return source.__name__
    return type(source).__name__


def _require_callable(func: Any, source_name: str) -> Callable:
    if not callable(func):
        raise FilterRegistrationError(
            f"Provider source '{source_name}' contains non-callable {func!r}",
            source=source_name,
        )
    return func


def _module_callables(module: types.ModuleType) -> List[Callable]:
    exported = getattr(module, "__all__", None)
    if exported is not None:
        return [getattr(module, attr) for attr in exported if callable(getattr(module, attr, None))]

    return [
        obj
        for attr, obj in vars(module).items()
        if not attr.startswith("_")
        and inspect.isfunction(obj)
        and obj.__module__ == module.__name__
    ]


def _class_callables(klass: type) -> List[Callable]:
    callables = []
    for attr, member in vars(klass).items():
        if attr.startswith("_"):
            continue
        if isinstance(member, staticmethod):
            callables.append(member.__func__)
        elif isinstance(member, classmethod):
            # Bound to the class so `cls` drops out of the signature
            callables.append(getattr(klass, attr))
    return callables


def _instance_callables(instance: Any) -> List[Callable]:
    callables = []
    seen = set()
    for klass in type(instance).__mro__:
        if klass is object:
            continue
        for attr, member in vars(klass).items():
            if attr.startswith("_") or attr in seen:
                continue
            seen.add(attr)
            if isinstance(member, (staticmethod, classmethod)) or inspect.isfunction(member):
                callables.append(getattr(instance, attr))
    return callables
