# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

import pytest

from filterbox.core.cache import reset_cache
from filterbox.core.config import FilterBoxConfig, set_config
from filterbox.core.registry import get_registry

FILTERBOX_ENV = [
    "FILTERBOX_ERROR_MODE",
    "FILTERBOX_STANDARD_FILTERS",
    "FILTERBOX_PARSE_CACHE_SIZE",
    "FILTERBOX_LOG_LEVEL",
    "FILTERBOX_LOG_DIR",
]


@pytest.fixture(autouse=True)
def isolated_filterbox(monkeypatch):
    """Fresh config, parse cache and global registry for every test"""
    for name in FILTERBOX_ENV:
        monkeypatch.delenv(name, raising=False)

    set_config(FilterBoxConfig())
    reset_cache()
    get_registry().reset(register_standard_filters=True)
    yield
    get_registry().reset(register_standard_filters=True)
    reset_cache()
    set_config(None)
