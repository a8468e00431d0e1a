# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Pipe-chain parser for output markup.

Grammar:
    chain    := value ( "|" filter )*
    filter   := name [ ":" value ( "," value )* ]
    value    := string | number | true | false | nil | variable

Supports:
- String literals: 'value' or "value"
- Number literals: 123, -5, 45.67
- Boolean literals: true, false
- Nil literals: nil, null
- Variable references: name, user.name, items.0, items[0]
"""

import re
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from .exceptions import TemplateSyntaxError

_TOKEN = re.compile(
    r"""
    \s*(?:
        (?P<string>'[^']*'|"[^"]*")
      | (?P<number>[-+]?\d+(?:\.\d+)?)(?![\w.])
      | (?P<pipe>\|)
      | (?P<colon>:)
      | (?P<comma>,)
      | (?P<ident>[A-Za-z_][\w-]*\??(?:\.[\w-]+\??|\[\d+\])*)
    )
    """,
    re.VERBOSE,
)

_FILTER_NAME = re.compile(r"^[A-Za-z_][\w]*$")

_KEYWORDS = {
    "true": True,
    "false": False,
    "nil": None,
    "null": None,
}


@dataclass(frozen=True)
class Literal:
    """A constant written in the markup"""

    value: Any

    def evaluate(self, context: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class VariableReference:
    """A dotted path resolved through the render context"""

    name: str

    def evaluate(self, context: Any) -> Any:
        return context.resolve(self.name)


Expression = Union[Literal, VariableReference]


@dataclass(frozen=True)
class FilterCall:
    """One `| name: args` stage of a chain"""

    name: str
    args: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class PipeChain:
    """Parsed output node: head value followed by filter applications"""

    head: Expression
    filters: Tuple[FilterCall, ...] = ()
    markup: str = ""


def tokenize(markup: str) -> List[Tuple[str, str]]:
    """Split markup into (kind, text) tokens"""
    tokens = []
    position = 0
    end = len(markup.rstrip())
    while position < end:
        match = _TOKEN.match(markup, position)
        if not match or match.end() == position:
            raise TemplateSyntaxError(
                f"Unexpected character {markup[position:].strip()[:1]!r} at offset {position}",
                markup=markup,
            )
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        position = match.end()
    return tokens


def parse_value(kind: str, text: str) -> Expression:
    """Convert a value token into a Literal or VariableReference"""
    if kind == "string":
        return Literal(text[1:-1])
    if kind == "number":
        return Literal(float(text) if "." in text else int(text))
    if kind == "ident":
        lowered = text.lower()
        if lowered in _KEYWORDS:
            return Literal(_KEYWORDS[lowered])
        return VariableReference(text)
    raise TemplateSyntaxError(f"Expected a value, got {text!r}")


def parse_markup(markup: str) -> PipeChain:
    """
    Parse output markup such as "var | adjust: -5 | money".

    Raises:
        TemplateSyntaxError: If the markup is not a valid pipe chain
    """
    tokens = tokenize(markup)
    if not tokens:
        raise TemplateSyntaxError("Empty output markup", markup=markup)

    index = 0

    def take(*kinds: str) -> Tuple[str, str]:
        nonlocal index
        if index >= len(tokens):
            raise TemplateSyntaxError(
                f"Unexpected end of markup, expected {' or '.join(kinds)}",
                markup=markup,
            )
        kind, text = tokens[index]
        if kind not in kinds:
            raise TemplateSyntaxError(
                f"Unexpected {text!r}, expected {' or '.join(kinds)}",
                markup=markup,
            )
        index += 1
        return kind, text

    try:
        head = parse_value(*take("string", "number", "ident"))
        filters = []
        while index < len(tokens):
            take("pipe")
            _, name = take("ident")
            if not _FILTER_NAME.match(name):
                raise TemplateSyntaxError(f"Invalid filter name {name!r}", markup=markup)

            args: List[Expression] = []
            if index < len(tokens) and tokens[index][0] == "colon":
                take("colon")
                args.append(parse_value(*take("string", "number", "ident")))
                while index < len(tokens) and tokens[index][0] == "comma":
                    take("comma")
                    args.append(parse_value(*take("string", "number", "ident")))

            filters.append(FilterCall(name=name, args=tuple(args)))
    except TemplateSyntaxError as e:
        if e.markup is None:
            e.markup = markup
        raise

    return PipeChain(head=head, filters=tuple(filters), markup=markup)
