"""Extraction of a flat context fragment from objects and call arguments.

WHY: The values a business action needs in its later phases are spread
over its arguments and the fields of nested objects. Extraction turns
them into one flat map keyed by the names the directives declare.

HOW: extract_context() reads the directive-bearing fields of an object
(from the registry) and hands each value to apply_directive(), which
picks an element when an index is declared, then either stores the
value under its resolved key or recurses into it and flattens the
result. extract_call_context() does the same for the parameters of a
callable bound to concrete arguments.

RULES:
- Fields and parameters without a directive are ignored
- None values produce no entry
- Flattening merges nested keys as they are, without prefixes
- Same resolved key twice: last write wins
- Any reflective failure aborts with FatalExtractionError
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional

from action_context.core.directive import ContextParam
from action_context.core.indexer import get_by_index
from action_context.core.registry import get_context_fields, get_param_directives
from action_context.errors import FatalExtractionError, qualified_name

logger = logging.getLogger(__name__)

_NO_VALUE = object()


def extract_context(target: Any) -> dict[str, Any]:
    """Extract the action context fragment declared on an object's fields.

    Args:
        target: The object to read. Must not be None.

    Returns:
        A new dict from resolved key to extracted value. Empty when the
        object's type declares no directives.

    Raises:
        ValueError: If target is None.
        FatalExtractionError: If the type's fields cannot be enumerated
            or read.
    """
    if target is None:
        raise ValueError("Cannot fetch the action context from None")

    target_type = type(target)
    try:
        fields = get_context_fields(target_type)
        if not fields:
            logger.warning(
                "The param of type `%s` has no field declaring a %s, "
                "please don't use `%s(is_param_in_property=True)` on it",
                qualified_name(target_type),
                ContextParam.__name__,
                ContextParam.__name__,
            )
            return {}

        context: dict[str, Any] = {}
        for field in fields:
            value = getattr(target, field.attr_name, _NO_VALUE)
            if value is _NO_VALUE:
                logger.debug(
                    "The field '%s' of `%s` has no value, so pass this field",
                    field.name, qualified_name(target_type),
                )
                continue
            apply_directive("field", field.name, value, field.directive, context)
        return context
    except FatalExtractionError:
        raise
    except Exception as exc:
        raise FatalExtractionError(qualified_name(target_type), exc) from exc


def apply_directive(
    kind: str,
    name: str,
    value: Any,
    directive: ContextParam,
    context: dict[str, Any],
) -> None:
    """Put one field's or parameter's value into a context fragment.

    Args:
        kind: "field" or "param", used in diagnostics.
        name: Natural name of the field or parameter.
        value: Its current value.
        directive: The ContextParam declared on it.
        context: The fragment being built; mutated in place.
    """
    if value is None:
        return

    if directive.index >= 0:
        value = get_by_index(kind, name, value, directive.index)
        if value is None:
            return

    if directive.is_param_in_property:
        nested = extract_context(value)
        if nested:
            context.update(nested)
    else:
        context[directive.resolve_key(name)] = value


def extract_call_context(
    func: Callable[..., Any],
    args: tuple = (),
    kwargs: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Extract the action context fragment declared on a callable's parameters.

    WHY: The first phase of a business action receives its inputs as
    arguments. Parameters annotated with ContextParam carry what the
    later phases need.

    HOW: Binds args/kwargs to the signature (defaults applied), then runs
    apply_directive("param", ...) for each parameter with a directive.

    RULES:
    - Bound methods are resolved to their function for directive lookup
    - Callable instances are resolved to their class's __call__
    - A signature mismatch raises TypeError from inspect
    - Unresolvable hints raise FatalExtractionError naming the callable

    Args:
        func: The business method or function.
        args: Positional arguments of the call.
        kwargs: Keyword arguments of the call.

    Returns:
        A new dict from resolved key to extracted value.
    """
    bound = inspect.signature(func).bind(*args, **(kwargs or {}))
    bound.apply_defaults()

    plain = inspect.unwrap(getattr(func, "__func__", func))
    if not (inspect.isroutine(plain) or inspect.isclass(plain)):
        # callable instance: directives live on its class's __call__
        plain = inspect.unwrap(type(plain).__call__)
    try:
        directives = get_param_directives(plain)
    except Exception as exc:
        raise FatalExtractionError(qualified_name(plain), exc) from exc

    context: dict[str, Any] = {}
    for name, directive in directives:
        if name not in bound.arguments:
            continue
        apply_directive("param", name, bound.arguments[name], directive, context)
    return context
