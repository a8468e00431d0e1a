# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
FilterBox Standard Filters

Registered globally at start (see `rendering.register_standard_filters`).

Filters:
    - size: Length of a string or list
    - downcase/upcase/capitalize: Case conversion
    - strip/lstrip/rstrip/strip_newlines/strip_html: Trimming
    - append/prepend/replace/replace_first/remove/remove_first: Editing
    - truncate: Shorten with a suffix
    - split/join: String <-> list
    - sort/first/last/reverse/uniq/slice: List operations
    - default: Fallback for empty values
    - plus/minus/times/divided_by/modulo: Arithmetic

Usage in templates:
    {{ name | upcase }}
    {{ "a~b" | split: "~" | join: ", " }}
    {{ price | times: 1.2 | plus: shipping }}
"""

import re
from typing import Any, Optional, Union

Number = Union[int, float]

_SCRIPT_OR_STYLE = re.compile(r"<script.*?</script>|<style.*?</style>|<!--.*?-->", re.DOTALL | re.IGNORECASE)
_HTML_TAG = re.compile(r"<.*?>", re.DOTALL)
_NEWLINES = re.compile(r"\r?\n")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _number(value: Any) -> Number:
    """Coerce a filter operand to int or float"""
    if isinstance(value, bool):
        raise TypeError("Booleans are not numbers")
    if isinstance(value, (int, float)):
        return value
    text = _text(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _flatten(items: Any) -> list:
    result = []
    for item in items:
        if isinstance(item, (list, tuple)):
            result.extend(_flatten(item))
        else:
            result.append(item)
    return result


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class StandardFilters:
    """Built-in filters available to every render"""

    # === Size ===

    @staticmethod
    def size(input):
        """Length of a string or list; 0 for anything without a length."""
        try:
            return len(input)
        except TypeError:
            return 0

    # === Case ===

    @staticmethod
    def downcase(input):
        return _text(input).lower()

    @staticmethod
    def upcase(input):
        return _text(input).upper()

    @staticmethod
    def capitalize(input):
        """Uppercase the first character, leave the rest untouched."""
        text = _text(input)
        return text[:1].upper() + text[1:]

    # === Trim ===

    @staticmethod
    def strip(input):
        return _text(input).strip()

    @staticmethod
    def lstrip(input):
        return _text(input).lstrip()

    @staticmethod
    def rstrip(input):
        return _text(input).rstrip()

    @staticmethod
    def strip_newlines(input):
        return _NEWLINES.sub("", _text(input))

    @staticmethod
    def strip_html(input):
        """Remove tags, comments, and script/style blocks."""
        return _HTML_TAG.sub("", _SCRIPT_OR_STYLE.sub("", _text(input)))

    # === Editing ===

    @staticmethod
    def append(input, string: str):
        return _text(input) + _text(string)

    @staticmethod
    def prepend(input, string: str):
        return _text(string) + _text(input)

    @staticmethod
    def replace(input, string: str, replacement: str = ""):
        return _text(input).replace(_text(string), _text(replacement))

    @staticmethod
    def replace_first(input, string: str, replacement: str = ""):
        return _text(input).replace(_text(string), _text(replacement), 1)

    @staticmethod
    def remove(input, string: str):
        return _text(input).replace(_text(string), "")

    @staticmethod
    def remove_first(input, string: str):
        return _text(input).replace(_text(string), "", 1)

    @staticmethod
    def truncate(input, length: int = 50, truncate_string: str = "..."):
        """Cut to `length` characters including the suffix."""
        text = _text(input)
        if len(text) <= length:
            return text
        keep = max(0, length - len(_text(truncate_string)))
        return text[:keep] + _text(truncate_string)

    # === Split/Join ===

    @staticmethod
    def split(input, pattern: str):
        text = _text(input)
        if not text:
            return []
        if not pattern:
            return list(text)
        return text.split(pattern)

    @staticmethod
    def join(input, glue: str = " "):
        if not isinstance(input, (list, tuple)):
            return input
        return _text(glue).join(_text(item) for item in input)

    # === Lists ===

    @staticmethod
    def sort(input, property: Optional[str] = None):
        """
        Sort a list; nested lists are flattened and scalars become a
        one-item list. With `property`, mapping items are ordered by that key.
        """
        items = _flatten(_as_list(input))
        if property is None:
            return sorted(items)
        return sorted(items, key=lambda item: item.get(property) if isinstance(item, dict) else item)

    @staticmethod
    def first(input):
        if isinstance(input, (list, tuple, str)) and input:
            return input[0]
        return None

    @staticmethod
    def last(input):
        if isinstance(input, (list, tuple, str)) and input:
            return input[-1]
        return None

    @staticmethod
    def reverse(input):
        return list(reversed(_as_list(input)))

    @staticmethod
    def uniq(input):
        result = []
        for item in _as_list(input):
            if item not in result:
                result.append(item)
        return result

    @staticmethod
    def slice(input, start: int, length: int = 1):
        """
        Substring or sub-list of `length` items from `start`.

        Negative `start` counts from the end. Starting exactly at the end
        gives an empty result; starting past it gives None.
        """
        if input is None:
            return None
        sequence = input if isinstance(input, (str, list, tuple)) else _text(input)

        if start < 0:
            start += len(sequence)
        if start < 0 or start > len(sequence):
            return None
        return sequence[start:start + max(0, length)]

    # === Fallback ===

    @staticmethod
    def default(input, default_value: Any = ""):
        if input is None or input is False or input == "" or input == [] or input == {}:
            return default_value
        return input

    # === Arithmetic ===

    @staticmethod
    def plus(input, operand):
        return _number(input) + _number(operand)

    @staticmethod
    def minus(input, operand):
        return _number(input) - _number(operand)

    @staticmethod
    def times(input, operand):
        return _number(input) * _number(operand)

    @staticmethod
    def divided_by(input, operand):
        """Integer division when both sides are integers."""
        left, right = _number(input), _number(operand)
        if isinstance(left, int) and isinstance(right, int):
            return left // right
        return left / right

    @staticmethod
    def modulo(input, operand):
        return _number(input) % _number(operand)
