# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Argument binding.

Maps the raw argument expressions of a FilterCall onto a resolved
FilterDefinition: resolves variable references, coerces each value to the
parameter's semantic type, fills in defaults, and prepends the piped input
(and the render context for context filters).

Coercion table:
    any      -> unchanged
    string   -> str unchanged; int/float to text; bool to "true"/"false"
    integer  -> int unchanged; integral float; "-5"/"+5"/"5" text
    float    -> int/float; decimal text ("1.5", "-2", "1e3")
    boolean  -> bool unchanged; "true"/"false" text (any case)
    None (nil) passes through for every type.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Tuple

from .definitions import FilterDefinition, ParameterSpec, ParameterType
from .exceptions import ArgumentCountError, ArgumentTypeError

_INTEGER_TEXT = re.compile(r"^[+-]?\d+$")
_FLOAT_TEXT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(type(value).__name__)


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_TEXT.match(value.strip()):
        return int(value.strip())
    raise ValueError(value)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _FLOAT_TEXT.match(value.strip()):
        return float(value.strip())
    raise ValueError(value)


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(value)


COERCERS: Dict[ParameterType, Callable[[Any], Any]] = {
    ParameterType.ANY: lambda value: value,
    ParameterType.STRING: _to_string,
    ParameterType.INTEGER: _to_integer,
    ParameterType.FLOAT: _to_float,
    ParameterType.BOOLEAN: _to_boolean,
}


def coerce_argument(filter_name: str, spec: ParameterSpec, value: Any) -> Any:
    """
    Coerce `value` to `spec`'s semantic type.

    Raises:
        ArgumentTypeError: If the value has no conversion to the target type
    """
    if value is None:
        return None
    try:
        return COERCERS[spec.type](value)
    except (TypeError, ValueError) as e:
        raise ArgumentTypeError(filter_name, spec.name, value, spec.type.value, cause=e)


@dataclass(frozen=True)
class BoundArguments:
    """Positional call arguments ready for the invoker"""

    definition: FilterDefinition
    args: Tuple[Any, ...]


class ArgumentBinder:
    """Binds parsed arguments to a resolved filter definition"""

    def bind(
        self,
        definition: FilterDefinition,
        input_value: Any,
        raw_args: Sequence[Any],
        context: Any,
    ) -> BoundArguments:
        """
        Build the positional argument tuple for `definition`.

        `raw_args` items are Literal/VariableReference expressions (anything
        with evaluate(context)) or already-evaluated values.

        Raises:
            ArgumentCountError: If the supplied count is outside the accepted range
            ArgumentTypeError: If an argument cannot be coerced
        """
        supplied = len(raw_args)
        if not definition.accepts(supplied):
            raise ArgumentCountError(
                definition.name,
                supplied,
                [(definition.required_params, definition.total_params)],
            )

        values = []
        for spec in definition.parameters:
            if spec.position < supplied:
                raw = raw_args[spec.position]
                value = raw.evaluate(context) if hasattr(raw, "evaluate") else raw
                values.append(coerce_argument(definition.name, spec, value))
            else:
                values.append(spec.default)

        leading = (context, input_value) if definition.takes_context else (input_value,)
        return BoundArguments(definition=definition, args=leading + tuple(values))
