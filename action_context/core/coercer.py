"""Normalization of context values and typed retrieval.

WHY: Values pulled from business objects can be anything: numbers,
strings, dataclasses, pydantic models, nested containers. The action
context must stay JSON-compatible so a coordinator can persist it, and
consumers in a later phase must still get the typed value back.

HOW: encode() keeps primitives (str, bool, numbers) as they are and
serializes everything else to JSON text with pydantic_core. decode()
returns stored values that already fit the target, stringifies for
``str`` targets, and otherwise parses JSON into the target through a
cached pydantic TypeAdapter.

RULES:
- Stored values are always a primitive or JsonText, never a raw object
- JsonText is a str subclass, so stored contexts serialize as plain JSON
- decode() never returns a value for targets that cannot carry one
- Parse failures raise ConversionError carrying key and both type names
"""

from __future__ import annotations

import functools
import numbers
import typing
from typing import Any

import pydantic_core
from pydantic import PydanticSchemaGenerationError, TypeAdapter

from action_context.errors import ConversionError, qualified_name

PRIMITIVE_TYPES = (str, bool, numbers.Number)
"""Runtime types stored verbatim in the action context."""

_UNUSABLE_TARGETS = (None, type(None), typing.NoReturn, typing.Never)


class JsonText(str):
    """Context value holding the JSON text of a non-primitive value.

    WHY: Plain strings and serialized objects are both text. Tagging the
    serialized form keeps the two storage kinds distinguishable in memory
    without changing how the context serializes.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"JsonText({str.__repr__(self)})"


def _serialize_unknown(value: Any) -> Any:
    # Plain objects: public instance attributes, else their str() form.
    attrs = getattr(value, "__dict__", None)
    if attrs is not None:
        return {k: v for k, v in attrs.items() if not k.startswith("_")}
    return str(value)


def to_json_text(value: Any) -> str:
    """Serialize any value to JSON text (aliases used for pydantic models)."""
    return pydantic_core.to_json(
        value, by_alias=True, fallback=_serialize_unknown
    ).decode("utf-8")


def is_primitive(value: Any) -> bool:
    """True when value is stored verbatim by encode()."""
    return isinstance(value, PRIMITIVE_TYPES)


def encode(value: Any) -> Any:
    """Normalize a value into one of the context storage forms.

    Args:
        value: Any non-None value.

    Returns:
        The value itself when it is a str, bool or number, else its JSON
        text as JsonText.

    Raises:
        ValueError: If value is None (callers skip None before encoding).
    """
    if value is None:
        raise ValueError("None cannot be stored in the action context")
    if is_primitive(value):
        return value
    return JsonText(to_json_text(value))


@functools.lru_cache(maxsize=256)
def _type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _check_target(target: Any) -> None:
    if any(target is unusable for unusable in _UNUSABLE_TARGETS):
        raise TypeError(
            f"The target type cannot be {target!r}, because the stored value "
            f"may be present. Use a type that can hold a value."
        )
    if isinstance(target, (str, typing.ForwardRef, typing.TypeVar)):
        raise TypeError(
            f"The target type must be a resolved type, got {target!r}."
        )


def _is_instance(value: Any, target: Any) -> bool:
    if not isinstance(target, type) or not isinstance(value, target):
        return False
    # bool subclasses int, but a flag is not a number
    return not isinstance(value, bool) or issubclass(target, bool) or target is object


def _parse_json(text: str, target: Any) -> Any:
    try:
        adapter = _type_adapter(target)
    except PydanticSchemaGenerationError:
        if not isinstance(target, type):
            raise
        # Plain classes: encode() wrote their public attributes as an object
        data = _type_adapter(dict[str, Any]).validate_json(text)
        return target(**data)
    return adapter.validate_json(text)


def decode(key: str, value: Any, target: Any) -> Any:
    """Convert a stored context value into the target type.

    WHY: Stored values are either primitives or JSON text. A consumer
    asks for a concrete type and must get that type back, or a clear
    error naming the key.

    HOW:
      1. Reject targets that cannot carry a value (TypeError).
      2. None stays None.
      3. Any, or a class the value already is an instance of: identity.
         Booleans only pass through for bool (or object) targets.
      4. ``str``: the value's string form.
      5. Otherwise parse JSON into the target. Text is parsed directly,
         other values are serialized first and then parsed. Classes
         pydantic has no schema for are built from the parsed object's
         keys as keyword arguments.

    Args:
        key: Context key, used in error messages.
        value: Stored value (primitive, JSON text, or anything else).
        target: A class or typing form.

    Returns:
        The converted value, or None when value is None.

    Raises:
        TypeError: For targets that cannot carry a value.
        ConversionError: When the value does not convert into target,
            including targets no schema can be built for.
    """
    _check_target(target)

    if value is None:
        return None

    if target is typing.Any or _is_instance(value, target):
        return value

    if target is str:
        return str(value)

    try:
        text = value if isinstance(value, str) else to_json_text(value)
        return _parse_json(text, target)
    except (ValueError, TypeError, PydanticSchemaGenerationError) as exc:
        raise ConversionError(
            key, qualified_name(type(value)), qualified_name(target), exc
        ) from exc
