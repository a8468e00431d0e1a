# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import ERROR_MODES, get_config
from .exceptions import ConfigError, FilterBoxError
from .provider import FilterProvider
from .registry import FilterScope, GlobalFilterRegistry, get_registry

_PATH_PART = re.compile(r"[^.\[\]]+|\[\d+\]")


class RenderContext:
    """
    Variable store and filter scope for one render.

    The context pins the global registry snapshot current at creation time;
    filters attached with add_filters() live and die with the context. This
    is also the object handed to filters declared with takes_context.
    """

    def __init__(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        registry: Optional[GlobalFilterRegistry] = None,
        overrides: Iterable[Any] = (),
        error_mode: Optional[str] = None,
    ):
        self.variables: Dict[str, Any] = dict(variables or {})

        registry = registry or get_registry()
        self.filters = FilterScope(registry.snapshot(), overrides)

        if error_mode is None:
            error_mode = get_config().rendering.error_mode
        self.error_mode = error_mode.lower()
        if self.error_mode not in ERROR_MODES:
            raise ConfigError(
                f"Invalid error mode '{error_mode}'. Must be one of: {list(ERROR_MODES)}",
                details={"error_mode": error_mode},
            )
        self.errors: List[FilterBoxError] = []

    @property
    def strict(self) -> bool:
        return self.error_mode == "strict"

    def add_filters(self, source: Any) -> FilterProvider:
        """Attach filters visible only to this context"""
        return self.filters.attach_local(source)

    def __getitem__(self, path: str) -> Any:
        return self.resolve(path)

    def __setitem__(self, name: str, value: Any):
        self.variables[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self.variables

    def get(self, path: str, default: Any = None) -> Any:
        value = self.resolve(path)
        return default if value is None else value

    def update(self, values: Mapping[str, Any]):
        self.variables.update(values)

    def resolve(self, path: str) -> Any:
        """
        Resolve a dotted variable path.

        Supports: name, user.name, items.0, items[0]
        Missing segments resolve to None.
        """
        parts = _PATH_PART.findall(path)
        if not parts:
            return None

        value: Any = self.variables
        for part in parts:
            if part.startswith("["):
                part = part[1:-1]

            if isinstance(value, Mapping):
                value = value.get(part)
            elif isinstance(value, (list, tuple)) and part.lstrip("-").isdigit():
                index = int(part)
                value = value[index] if -len(value) <= index < len(value) else None
            elif value is not None and not part.startswith("_"):
                value = getattr(value, part, None)
            else:
                value = None

            if value is None:
                return None
        return value


def attach_context_filters(context: RenderContext, source: Any) -> FilterProvider:
    """Introspect `source` and attach it to `context`'s local scope"""
    return context.add_filters(source)
