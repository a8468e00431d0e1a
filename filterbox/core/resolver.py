# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Overload resolution by argument count."""

import logging
from typing import Optional, Tuple

from .definitions import FilterDefinition
from .exceptions import ArgumentCountError, FilterNotFoundError
from .registry import FilterScope

logger = logging.getLogger("filterbox.resolver")


def select_overload(
    name: str,
    overloads: Tuple[FilterDefinition, ...],
    supplied: int,
) -> FilterDefinition:
    """
    Pick the overload accepting `supplied` arguments.

    A candidate accepts when required_params <= supplied <= total_params.
    Among accepting candidates the one with the fewest total parameters wins.

    Raises:
        ArgumentCountError: If no candidate accepts
    """
    best: Optional[FilterDefinition] = None
    for candidate in overloads:
        if not candidate.accepts(supplied):
            continue
        if best is None or candidate.total_params < best.total_params:
            best = candidate

    if best is None:
        accepted = sorted((d.required_params, d.total_params) for d in overloads)
        raise ArgumentCountError(name, supplied, accepted)
    return best


class FilterResolver:
    """Resolves filter names against one render's FilterScope"""

    def __init__(self, scope: FilterScope):
        self.scope = scope

    def resolve(self, name: str, supplied: int) -> FilterDefinition:
        """
        Resolve `name` called with `supplied` arguments (input and context excluded).

        Raises:
            FilterNotFoundError: If no visible provider defines `name`
            ArgumentCountError: If no overload accepts `supplied`
        """
        overloads = self.scope.lookup(name)
        if not overloads:
            raise FilterNotFoundError(name)

        definition = select_overload(name, overloads, supplied)
        logger.debug(f"Resolved {name}/{supplied} -> {definition.total_params}-parameter overload")
        return definition
