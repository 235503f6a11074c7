"""Merging values into a long-lived action context.

WHY: The action context outlives a single extraction: it is built up
across one business operation and persisted by its owner. Writes must
normalize values to the storage forms, and the owner needs to know
whether anything actually changed so it only re-persists when needed.

HOW: merge_one() skips None, normalizes with encode(), stores, and
compares against the previous value. merge_many() applies merge_one()
to every entry and ORs the results.

RULES:
- None values are never stored and report "unchanged"
- A key that was absent before always reports "changed"
- Values of different storage kinds are different (1, 1.0, True)
- No locking: the caller owns the context and its concurrency
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from action_context.core.coercer import encode

_MISSING = object()


def _storage_kind(value: Any) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, str):
        return str
    return type(value)


def _same_value(previous: Any, value: Any) -> bool:
    if previous is _MISSING:
        return False
    return _storage_kind(previous) is _storage_kind(value) and previous == value


def merge_one(context: MutableMapping[str, Any], key: str, value: Any) -> bool:
    """Normalize value and store it under key.

    Args:
        context: The long-lived action context.
        key: Context key.
        value: Value to store; None is ignored.

    Returns:
        True if the stored value for key changed.
    """
    if value is None:
        return False

    value = encode(value)
    previous = context.get(key, _MISSING)
    context[key] = value
    return not _same_value(previous, value)


def merge_many(context: MutableMapping[str, Any], entries: Mapping[str, Any]) -> bool:
    """Apply merge_one() to every entry; True if any of them changed the context."""
    changed = False
    for key, value in entries.items():
        if merge_one(context, key, value):
            changed = True
    return changed
