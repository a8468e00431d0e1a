# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""FilterBox - filter registry and invocation engine for pipe-style templates"""

from .core import *  # noqa: F401,F403
from .core import __all__

__version__ = "1.0.0"
