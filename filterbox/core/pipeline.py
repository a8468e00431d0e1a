# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Pipe-chain evaluation.

Each filter stage runs Resolve -> Bind -> Invoke, strictly in that order,
and its result becomes the input of the next stage. A failure aborts the
chain; there is no fallback to another overload.

Error modes (per render context):
    strict  Resolve/bind errors propagate and abort the render.
    lax     Resolve/bind errors are recorded in context.errors, logged as
            warnings, and the output node evaluates to None (rendered as
            empty text). The render continues with the next node.

FilterExecutionError is re-raised in both modes.
"""

import logging
from typing import Any, Optional

from .binder import ArgumentBinder
from .context import RenderContext
from .exceptions import (
    ArgumentCountError,
    ArgumentTypeError,
    FilterExecutionError,
    FilterNotFoundError,
)
from .expressions import PipeChain
from .invoker import FilterInvoker
from .resolver import FilterResolver

logger = logging.getLogger("filterbox.pipeline")

# Errors raised before any filter body runs
RECOVERABLE_ERRORS = (FilterNotFoundError, ArgumentCountError, ArgumentTypeError)


class FilterPipeline:
    """Evaluates parsed pipe chains against a render context"""

    def __init__(
        self,
        binder: Optional[ArgumentBinder] = None,
        invoker: Optional[FilterInvoker] = None,
    ):
        self.binder = binder or ArgumentBinder()
        self.invoker = invoker or FilterInvoker()

    def evaluate(self, chain: PipeChain, context: RenderContext) -> Any:
        """Run every stage of `chain`; errors propagate unchanged"""
        value = chain.head.evaluate(context)
        resolver = FilterResolver(context.filters)

        for call in chain.filters:
            definition = resolver.resolve(call.name, len(call.args))
            bound = self.binder.bind(definition, value, call.args, context)
            value = self.invoker.invoke(bound)

        return value

    def render_node(self, chain: PipeChain, context: RenderContext) -> Any:
        """Evaluate `chain` applying the context's error mode"""
        try:
            return self.evaluate(chain, context)
        except FilterExecutionError as e:
            logger.error(f"Render aborted in '{chain.markup}': {e}")
            raise
        except RECOVERABLE_ERRORS as e:
            if context.strict:
                raise
            context.errors.append(e)
            logger.warning(
                f"Lax mode: '{chain.markup}' rendered empty after "
                f"{e.__class__.__name__} in filter '{e.filter_name}': {e.message}"
            )
            return None


# Shared default pipeline; it holds no per-render state
default_pipeline = FilterPipeline()
