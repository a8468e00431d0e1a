# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Render driver.

Template splits source text into literal text and `{{ ... }}` output nodes;
each output node is a Variable wrapping one parsed pipe chain. Control-flow
tags, escaping and file loading are not handled here: text outside output
markup is copied verbatim.

Usage:
    Template.register_filter(MoneyFilter)          # global, persistent
    Template.parse("{{ 1000 | money }}").render()

    Template.parse("{{ 1000 | money }}").render(
        parameters=RenderParameters(filters=[CanadianMoneyFilter])
    )                                               # render-only override
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from .cache import ParseCache, get_cache
from .context import RenderContext
from .exceptions import FilterBoxError, TemplateSyntaxError
from .expressions import PipeChain
from .pipeline import FilterPipeline, default_pipeline
from .provider import FilterProvider
from .registry import GlobalFilterRegistry, get_registry

logger = logging.getLogger("filterbox.template")

# Quoted strings may contain "}}"; outside quotes the first "}}" closes the tag
_OUTPUT_TAG = re.compile(r"""\{\{((?:'[^']*'|"[^"]*"|[^'"}]|\}(?!\}))*)\}\}""", re.DOTALL)


def to_output(value: Any) -> str:
    """Convert a terminal chain value to output text"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "".join(to_output(item) for item in value)
    return str(value)


def _literal_text(text: str) -> str:
    """Text between output tags; an opening tag here was never closed"""
    if "{{" in text:
        raise TemplateSyntaxError("Output tag was never closed", markup=text[text.index("{{"):].strip())
    return text


@dataclass
class RenderParameters:
    """Per-render options; nothing here is persisted"""

    filters: List[Any] = field(default_factory=list)
    error_mode: Optional[str] = None
    registry: Optional[GlobalFilterRegistry] = None


class Variable:
    """A single output node: one pipe chain"""

    def __init__(self, markup: str, cache: Optional[ParseCache] = None):
        self.markup = markup.strip()
        self.chain: PipeChain = (cache or get_cache()).load_or_parse(self.markup)

    @property
    def filter_names(self) -> List[str]:
        return [call.name for call in self.chain.filters]

    def render(self, context: RenderContext, pipeline: Optional[FilterPipeline] = None) -> Any:
        """Evaluate the chain; returns the raw terminal value"""
        return (pipeline or default_pipeline).render_node(self.chain, context)

    def __repr__(self) -> str:
        return f"Variable({self.markup!r})"


class Template:
    """Parsed template: literal text interleaved with output nodes"""

    def __init__(self, nodes: List[Union[str, Variable]], source: str = ""):
        self.nodes = nodes
        self.source = source
        self.errors: List[FilterBoxError] = []

    @classmethod
    def parse(cls, source: str, cache: Optional[ParseCache] = None) -> "Template":
        """
        Parse template source.

        Raises:
            TemplateSyntaxError: On unclosed or invalid output markup
        """
        nodes: List[Union[str, Variable]] = []
        position = 0
        for match in _OUTPUT_TAG.finditer(source):
            if match.start() > position:
                nodes.append(_literal_text(source[position:match.start()]))
            nodes.append(Variable(match.group(1), cache=cache))
            position = match.end()

        tail = source[position:]
        if tail:
            nodes.append(_literal_text(tail))

        return cls(nodes, source)

    @staticmethod
    def register_filter(source: Any) -> FilterProvider:
        """Register filters globally for every subsequent render"""
        return get_registry().register(source)

    def render(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        parameters: Optional[RenderParameters] = None,
    ) -> str:
        """Render with a fresh context built from `variables` and `parameters`"""
        parameters = parameters or RenderParameters()
        context = RenderContext(
            variables,
            registry=parameters.registry,
            overrides=parameters.filters,
            error_mode=parameters.error_mode,
        )
        return self.render_context(context)

    def render_context(self, context: RenderContext) -> str:
        """Render against an existing context (local filters included)"""
        parts = []
        start = len(context.errors)
        try:
            for node in self.nodes:
                if isinstance(node, Variable):
                    parts.append(to_output(node.render(context)))
                else:
                    parts.append(node)
        finally:
            self.errors = context.errors[start:]

        if self.errors:
            logger.info(f"Rendered with {len(self.errors)} suppressed error(s)")
        return "".join(parts)
