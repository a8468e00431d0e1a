# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
FilterBox Exception Hierarchy

Exception Hierarchy:
    FilterBoxError (base)
    ├── ConfigError
    ├── TemplateSyntaxError
    ├── FilterRegistrationError
    └── FilterError
        ├── FilterNotFoundError
        ├── ArgumentCountError
        ├── ArgumentTypeError
        └── FilterExecutionError

Resolve and bind errors (FilterNotFoundError, ArgumentCountError,
ArgumentTypeError) are raised before the filter body runs and are subject to
the render error mode. FilterExecutionError is always fatal to a render.
"""

from typing import Any, Dict, List, Optional, Tuple

# ============================================================================
# Base Exceptions
# ============================================================================


class FilterBoxError(Exception):
    """Base exception for all FilterBox errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        result = {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

        if self.cause:
            result["cause"] = {
                "type": self.cause.__class__.__name__,
                "message": str(self.cause),
            }

        return result

    def __str__(self):
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.cause:
            base += f" | Caused by: {self.cause!r}"
        return base


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigError(FilterBoxError):
    """Configuration-related errors"""


# ============================================================================
# Parsing / Registration Errors
# ============================================================================


class TemplateSyntaxError(FilterBoxError):
    """Markup could not be parsed into a pipe chain"""

    def __init__(self, message: str, markup: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.markup = markup

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["markup"] = self.markup
        return result


class FilterRegistrationError(FilterBoxError):
    """A provider source could not be turned into filter definitions"""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["source"] = self.source
        return result


# ============================================================================
# Filter Errors
# ============================================================================


class FilterError(FilterBoxError):
    """Filter resolution, binding or execution errors"""

    def __init__(self, message: str, filter_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.filter_name = filter_name

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["filter"] = self.filter_name
        return result


class FilterNotFoundError(FilterError):
    """Filter name is not defined in any visible scope"""

    def __init__(self, filter_name: str, **kwargs):
        super().__init__(f"Unknown filter '{filter_name}'", filter_name=filter_name, **kwargs)


class ArgumentCountError(FilterError):
    """No overload accepts the supplied number of arguments"""

    def __init__(
        self,
        filter_name: str,
        supplied: int,
        accepted: Optional[List[Tuple[int, int]]] = None,
        **kwargs,
    ):
        self.supplied = supplied
        self.accepted = accepted or []
        ranges = ", ".join(
            str(low) if low == high else f"{low}-{high}" for low, high in self.accepted
        )
        message = f"Filter '{filter_name}' does not accept {supplied} argument(s)"
        if ranges:
            message += f" (accepts {ranges})"
        super().__init__(message, filter_name=filter_name, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({"supplied": self.supplied, "accepted": self.accepted})
        return result


class ArgumentTypeError(FilterError):
    """A supplied argument cannot be coerced to its parameter type"""

    def __init__(
        self,
        filter_name: str,
        parameter: str,
        value: Any,
        expected: str,
        **kwargs,
    ):
        self.parameter = parameter
        self.value = value
        self.expected = expected
        super().__init__(
            f"Filter '{filter_name}' argument '{parameter}' expects {expected}, got {value!r}",
            filter_name=filter_name,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update(
            {
                "parameter": self.parameter,
                "value": repr(self.value),
                "expected": self.expected,
            }
        )
        return result


class FilterExecutionError(FilterError):
    """The filter body raised; the original exception is kept as cause"""

    def __init__(self, filter_name: str, cause: BaseException, **kwargs):
        super().__init__(
            f"Filter '{filter_name}' failed",
            filter_name=filter_name,
            cause=cause,
            **kwargs,
        )
