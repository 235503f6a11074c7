"""Indexed access for directives that pick one element of a sequence.

WHY: A business method often receives a list (e.g. the items of an
order) while the action context only needs one element of it. A
directive with ``index >= 0`` asks for that element.

HOW: get_by_index() returns the element when the value is a sequence
and the index is in range. Misconfiguration degrades gracefully: the
extraction of other fields must go on.

RULES:
- Sequences are collections.abc.Sequence except str, bytes, bytearray
- Not a sequence: warn and return the value unchanged
- Empty sequence: None (no context entry)
- Index past the end: None, with a debug diagnostic
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

logger = logging.getLogger(__name__)

_TEXT_TYPES = (str, bytes, bytearray)


def is_indexable(value: Any) -> bool:
    """True for sequences that index by element (not text or bytes)."""
    return isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES)


def get_by_index(kind: str, name: str, value: Any, index: int) -> Any:
    """Take the element at index from a sequence value.

    Args:
        kind: "field" or "param", used in diagnostics.
        name: Field or parameter name, used in diagnostics.
        value: The candidate value.
        index: Non-negative element position.

    Returns:
        The element, None when the sequence is empty or too short, or
        value itself when it is not a sequence.
    """
    if not is_indexable(value):
        logger.warning(
            "the %s named '%s' is not a sequence, so the 'index' of "
            "ContextParam cannot be used on it",
            kind, name,
        )
        return value

    if not value:
        return None

    if len(value) <= index:
        logger.debug(
            "The index '%d' is out of bounds for the sequence %s named '%s', "
            "whose size is '%d', so pass this %s",
            index, kind, name, len(value), kind,
        )
        return None

    return value[index]
