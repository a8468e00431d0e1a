# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
FilterBox Filter Registry

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                     FilterScope (one render)             │
    │                                                          │
    │  ┌────────────────┐  ┌─────────────────┐  ┌───────────┐ │
    │  │  Local         │→ │ Render overrides│→ │  Global   │ │
    │  │  (add_filters) │  │ (RenderParams)  │  │ snapshot  │ │
    │  └────────────────┘  └─────────────────┘  └───────────┘ │
    └─────────────────────────────────────────────────────────┘

Lookup walks the layers left to right and, inside each layer, providers from
the most recently registered to the oldest. The first provider defining the
name supplies the whole overload set; overloads are never merged across
providers or layers.

The global registry is copy-on-write: every registration publishes a new
immutable RegistrySnapshot. A FilterScope pins the snapshot that was current
when it was created, so registrations made while a render is in flight are
invisible to it.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from .definitions import FilterDefinition
from .provider import FilterProvider

logger = logging.getLogger("filterbox.registry")


def _lookup(providers: Iterable[FilterProvider], name: str) -> Optional[Tuple[FilterDefinition, ...]]:
    for provider in reversed(tuple(providers)):
        overloads = provider.get(name)
        if overloads:
            return overloads
    return None


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable, versioned view of the global providers"""

    version: int = 0
    providers: Tuple[FilterProvider, ...] = ()

    def lookup(self, name: str) -> Optional[Tuple[FilterDefinition, ...]]:
        return _lookup(self.providers, name)

    def with_provider(self, provider: FilterProvider) -> "RegistrySnapshot":
        stamped = provider.with_order(len(self.providers))
        return RegistrySnapshot(version=self.version + 1, providers=self.providers + (stamped,))

    def names(self) -> List[str]:
        return sorted({name for provider in self.providers for name in provider.names()})


class GlobalFilterRegistry:
    """
    Process-wide registry of filter providers.

    Mutations are serialized by a lock and publish a new snapshot; readers
    never lock, they just take the current snapshot reference.
    """

    def __init__(self, register_standard_filters: bool = True):
        self._lock = threading.Lock()
        self._register_standard = register_standard_filters
        self._snapshot = self._initial_snapshot()

    def _initial_snapshot(self) -> RegistrySnapshot:
        snapshot = RegistrySnapshot()
        if self._register_standard:
            from .filters.standard import StandardFilters

            snapshot = snapshot.with_provider(FilterProvider.from_source(StandardFilters))
        return snapshot

    def register(self, source: Any, name: Optional[str] = None) -> FilterProvider:
        """
        Introspect `source` and register it globally.

        Later registrations shadow earlier ones for every name they define.
        """
        provider = FilterProvider.from_source(source, name=name)
        with self._lock:
            self._snapshot = self._snapshot.with_provider(provider)
            version = self._snapshot.version
        logger.info(f"Registered global filters from {provider.name} (v{version}): {provider.names()}")
        return provider

    def snapshot(self) -> RegistrySnapshot:
        """Current immutable snapshot"""
        return self._snapshot

    def lookup(self, name: str) -> Optional[Tuple[FilterDefinition, ...]]:
        return self._snapshot.lookup(name)

    def names(self) -> List[str]:
        return self._snapshot.names()

    def reset(self, register_standard_filters: Optional[bool] = None):
        """Drop every registration made since start-up"""
        with self._lock:
            if register_standard_filters is not None:
                self._register_standard = register_standard_filters
            self._snapshot = self._initial_snapshot()
        logger.debug("Global filter registry reset")


class FilterScope:
    """
    Filter visibility for one render.

    Owned exclusively by a RenderContext; not synchronized.
    """

    def __init__(
        self,
        snapshot: RegistrySnapshot,
        overrides: Iterable[FilterProvider] = (),
    ):
        self.snapshot = snapshot
        self._overrides: List[FilterProvider] = []
        self._local: List[FilterProvider] = []
        self.apply_render_overrides(overrides)

    def attach_local(self, source: Any, name: Optional[str] = None) -> FilterProvider:
        """Register a provider visible only to this render"""
        provider = FilterProvider.from_source(source, name=name).with_order(len(self._local))
        self._local.append(provider)
        logger.debug(f"Attached local filters from {provider.name}: {provider.names()}")
        return provider

    def apply_render_overrides(self, sources: Iterable[Any]) -> List[FilterProvider]:
        """Layer render-only providers on top of the global snapshot"""
        added = []
        for source in sources:
            provider = FilterProvider.from_source(source).with_order(len(self._overrides))
            self._overrides.append(provider)
            added.append(provider)
        if added:
            logger.debug(f"Applied render overrides: {[p.name for p in added]}")
        return added

    @property
    def local_providers(self) -> Tuple[FilterProvider, ...]:
        return tuple(self._local)

    @property
    def override_providers(self) -> Tuple[FilterProvider, ...]:
        return tuple(self._overrides)

    def lookup(self, name: str) -> Optional[Tuple[FilterDefinition, ...]]:
        """Overload set from the highest-precedence provider defining `name`"""
        for layer in (self._local, self._overrides):
            overloads = _lookup(layer, name)
            if overloads:
                return overloads
        return self.snapshot.lookup(name)

    def names(self) -> List[str]:
        visible = set(self.snapshot.names())
        for provider in self._local + self._overrides:
            visible.update(provider.names())
        return sorted(visible)


# Global registry instance
_registry: Optional[GlobalFilterRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> GlobalFilterRegistry:
    """Get global registry instance (singleton)"""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                from .config import get_config

                _registry = GlobalFilterRegistry(
                    register_standard_filters=get_config().rendering.register_standard_filters
                )
    return _registry


def register_global_filters(source: Any, name: Optional[str] = None) -> FilterProvider:
    """Introspect `source` and register it for every subsequent render"""
    return get_registry().register(source, name=name)


__all__ = [
    "RegistrySnapshot",
    "GlobalFilterRegistry",
    "FilterScope",
    "get_registry",
    "register_global_filters",
]
