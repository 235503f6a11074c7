"""Exception types raised by the action context engine.

WHY: Callers need to tell an aborted extraction (the business operation
cannot proceed) apart from a single context value that failed to decode
(only that retrieval is affected).

HOW: One base class, two concrete errors. Both keep the underlying
exception in ``cause`` and are raised with ``raise ... from cause``.

RULES:
- FatalExtractionError aborts the whole extraction call
- ConversionError is scoped to one key and never touches the context
- Caller configuration mistakes use builtin TypeError / ValueError
"""

from __future__ import annotations

import inspect
from typing import Any


def qualified_name(obj: Any) -> str:
    """Readable name of a class, callable or typing form for messages."""
    if isinstance(obj, type) or inspect.isroutine(obj):
        module = getattr(obj, "__module__", None)
        if module in (None, "builtins"):
            return obj.__qualname__
        return f"{module}.{obj.__qualname__}"
    return repr(obj)


class ActionContextError(Exception):
    """Base class for errors raised by this package."""


class FatalExtractionError(ActionContextError):
    """Raised when the structure of a target cannot be read.

    WHY: A field set that cannot be enumerated or read means the context
    would be silently incomplete. The calling operation must stop.

    HOW: Raised by extract_context() and extract_call_context() around
    every reflective step. Nested extractions re-raise the innermost
    error unchanged.

    RULES:
    - target_name is the qualified name of the type or callable
    - cause is the original exception
    """

    def __init__(self, target_name: str, cause: BaseException) -> None:
        self.target_name = target_name
        self.cause = cause
        super().__init__(
            f"Failed to fetch the action context from '{target_name}': {cause}"
        )


class ConversionError(ActionContextError):
    """Raised when a stored context value cannot be parsed into a target type.

    WHY: A consumer asked for a typed value and the stored form does not
    fit. The key and both type names are needed to find the bad entry.

    HOW: Raised by decode() when the JSON codec rejects the payload.

    RULES:
    - key, source_type, target_type are always set
    - cause is the codec's validation error
    """

    def __init__(
        self,
        key: str,
        source_type: str,
        target_type: str,
        cause: BaseException,
    ) -> None:
        self.key = key
        self.source_type = source_type
        self.target_type = target_type
        self.cause = cause
        super().__init__(
            f"Failed to convert the action context with key '{key}' "
            f"from '{source_type}' to '{target_type}'."
        )
