# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

import logging
from typing import Any

from .binder import BoundArguments
from .exceptions import FilterExecutionError

logger = logging.getLogger("filterbox.invoker")


class FilterInvoker:
    """Runs bound filter calls. No retries, no timeouts."""

    def invoke(self, bound: BoundArguments) -> Any:
        """
        Call the filter body with the bound arguments.

        Raises:
            FilterExecutionError: Wrapping whatever the filter body raised
        """
        definition = bound.definition
        try:
            return definition.func(*bound.args)
        except Exception as e:
            logger.debug(f"Filter {definition.name} raised {e.__class__.__name__}: {e}")
            raise FilterExecutionError(definition.name, cause=e) from e
