# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Built-in filter providers"""

from .standard import StandardFilters

__all__ = ["StandardFilters"]
