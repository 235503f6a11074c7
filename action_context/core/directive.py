"""Extraction directive declared on fields and parameters.

WHY: Only some attributes of a business object belong in the action
context, sometimes under another name, sometimes only one element of a
list, sometimes flattened from a nested object. Each attribute needs a
small declarative rule saying which.

HOW: ContextParam is a frozen dataclass placed in ``Annotated`` metadata:

    order_id: Annotated[int, ContextParam("orderId")]
    items: Annotated[list[str], ContextParam(param_name="first", index=0)]
    payer: Annotated[Account, ContextParam(is_param_in_property=True)]

RULES:
- value is the positional naming alias; param_name wins when non-blank
- index < 0 means no indexing, index >= 0 picks one sequence element
- is_param_in_property alone decides between store and recurse
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContextParam:
    """How one field or parameter is pulled into the action context.

    Attributes:
        value: Naming alias, used when param_name is blank.
        param_name: Explicit context key.
        index: Element position to take from a sequence value, -1 for none.
        is_param_in_property: Extract the value's own fields and merge
            them into the same context instead of storing the value.
    """

    value: str = ""
    param_name: str = ""
    index: int = -1
    is_param_in_property: bool = False

    def key_name(self) -> str:
        """Explicit key declared on the directive, or "" when none."""
        if self.param_name and self.param_name.strip():
            return self.param_name
        if self.value and self.value.strip():
            return self.value
        return ""

    def resolve_key(self, natural_name: str) -> str:
        """Context key for a field or parameter called natural_name."""
        return self.key_name() or natural_name
