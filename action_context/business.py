"""Business action context: the long-lived context of one business action.

WHY: A two-phase business action (try, then confirm or cancel) runs its
phases at different times, possibly in different processes. The
parameters captured in the first phase must be available, typed, in the
later ones. Something has to own that context, record whether it
changed, and persist it alongside the transaction branch.

HOW: BusinessActionContext is a dataclass holding transaction identity
and the action context dict. Writes go through the merger (so values are
normalized and changes tracked), reads go through decode(). from_call()
builds the context from a call's directive-bearing parameters.
to_application_data() / from_application_data() persist it as JSON.

RULES:
- action_context only ever holds primitives or JSON text
- is_updated becomes True when any write changes the context
- Not thread-safe: one writer per business action
- Restored contexts hold plain strings; decode() parses them on read
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pydantic_core

from action_context.core.coercer import decode
from action_context.core.extractor import extract_call_context
from action_context.core.merger import merge_many, merge_one

APPLICATION_DATA_KEY = "actionContext"
"""Key of the action context inside persisted application data."""


@dataclass
class BusinessActionContext:
    """The action context of one business action within a global transaction.

    RULES:
    - xid: global transaction id, None outside a transaction
    - branch_id: id of this action's branch, None until registered
    - action_name: name of the business action
    - is_delay_report: report context updates lazily (None = owner default)
    - is_updated: True once the context changed after creation
    - action_context: key → primitive or JSON text
    """

    xid: Optional[str] = None
    branch_id: Optional[int] = None
    action_name: Optional[str] = None
    is_delay_report: Optional[bool] = None
    is_updated: bool = False
    action_context: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_call(
        cls,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        **metadata: Any,
    ) -> BusinessActionContext:
        """Build a context from the directive-bearing parameters of a call.

        Args:
            func: The business method.
            args: Positional arguments of the call.
            kwargs: Keyword arguments of the call.
            **metadata: xid, branch_id, action_name, is_delay_report.

        Returns:
            A new BusinessActionContext with is_updated False.
        """
        context = cls(**metadata)
        merge_many(context.action_context, extract_call_context(func, args, kwargs))
        return context

    def get_action_context(self, key: str, target: Any = None) -> Any:
        """Read a context value, converted to target when one is given.

        Raises:
            ConversionError: If the stored value does not parse into target.
        """
        value = self.action_context.get(key)
        if target is None:
            return value
        return decode(key, value, target)

    def add_action_context(self, key: str, value: Any) -> bool:
        """Store one value; returns True if the context changed."""
        changed = merge_one(self.action_context, key, value)
        if changed:
            self.is_updated = True
        return changed

    def add_action_contexts(self, entries: Mapping[str, Any]) -> bool:
        """Store many values; returns True if any of them changed the context."""
        changed = merge_many(self.action_context, entries)
        if changed:
            self.is_updated = True
        return changed

    def to_application_data(self) -> str:
        """Serialize the action context for persistence with the branch."""
        return pydantic_core.to_json(
            {APPLICATION_DATA_KEY: self.action_context}
        ).decode("utf-8")

    @classmethod
    def from_application_data(cls, data: Optional[str], **metadata: Any) -> BusinessActionContext:
        """Restore a context persisted with to_application_data().

        Args:
            data: JSON text, or None/empty for an empty context.
            **metadata: xid, branch_id, action_name, is_delay_report.

        Raises:
            ValueError: If data is not a JSON object, or its
                ``actionContext`` entry is not one.
        """
        context = cls(**metadata)
        if not data:
            return context
        loaded = pydantic_core.from_json(data)
        if not isinstance(loaded, dict):
            raise ValueError(
                f"Application data must be a JSON object, got {type(loaded).__name__}"
            )
        action_context = loaded.get(APPLICATION_DATA_KEY) or {}
        if not isinstance(action_context, dict):
            raise ValueError(
                f"'{APPLICATION_DATA_KEY}' must be a JSON object, "
                f"got {type(action_context).__name__}"
            )
        context.action_context.update(action_context)
        return context
