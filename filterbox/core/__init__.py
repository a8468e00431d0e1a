# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
FilterBox Core - Init file

Filter registry and invocation engine for pipe-style template filters.
"""

from .binder import ArgumentBinder, BoundArguments
from .cache import ParseCache, get_cache
from .context import RenderContext, attach_context_filters
from .definitions import (
    FilterDefinition,
    ParameterSpec,
    ParameterType,
    context_filter,
    filter_function,
    to_filter_name,
)
from .exceptions import (
    ArgumentCountError,
    ArgumentTypeError,
    ConfigError,
    FilterBoxError,
    FilterError,
    FilterExecutionError,
    FilterNotFoundError,
    FilterRegistrationError,
    TemplateSyntaxError,
)
from .expressions import FilterCall, Literal, PipeChain, VariableReference, parse_markup
from .invoker import FilterInvoker
from .pipeline import FilterPipeline
from .provider import FilterProvider
from .registry import (
    FilterScope,
    GlobalFilterRegistry,
    RegistrySnapshot,
    get_registry,
    register_global_filters,
)
from .resolver import FilterResolver, select_overload
from .template import RenderParameters, Template, Variable, to_output

__all__ = [
    # Definitions
    "FilterDefinition",
    "ParameterSpec",
    "ParameterType",
    "filter_function",
    "context_filter",
    "to_filter_name",
    "FilterProvider",
    # Registry
    "RegistrySnapshot",
    "GlobalFilterRegistry",
    "FilterScope",
    "get_registry",
    "register_global_filters",
    "attach_context_filters",
    # Engine
    "FilterResolver",
    "select_overload",
    "ArgumentBinder",
    "BoundArguments",
    "FilterInvoker",
    "FilterPipeline",
    # Parsing / rendering
    "Literal",
    "VariableReference",
    "FilterCall",
    "PipeChain",
    "parse_markup",
    "ParseCache",
    "get_cache",
    "RenderContext",
    "RenderParameters",
    "Template",
    "Variable",
    "to_output",
    # Errors
    "FilterBoxError",
    "FilterError",
    "FilterNotFoundError",
    "ArgumentCountError",
    "ArgumentTypeError",
    "FilterExecutionError",
    "FilterRegistrationError",
    "TemplateSyntaxError",
    "ConfigError",
]
