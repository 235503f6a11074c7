"""Action Context: directive-driven object/context mapping.

WHY: A two-phase business action needs to carry selected parameters
from its first phase into later phases. The parameters live on
arbitrary objects and arguments, but the context that survives between
phases must be a flat map of JSON-compatible values.

HOW: Three stages, each independently testable: extract (read
ContextParam directives from fields and parameters into a flat map),
merge (normalize values into a long-lived context and track changes),
decode (rebuild typed values from the stored form).

RULES:
- Stored context values are str, bool, numbers, or JSON text
- Extraction never writes back to the source object
- Decoding failures are scoped to the single key being read
"""

from action_context.business import BusinessActionContext
from action_context.core.coercer import JsonText, decode, encode
from action_context.core.directive import ContextParam
from action_context.core.extractor import (
    apply_directive,
    extract_call_context,
    extract_context,
)
from action_context.core.indexer import get_by_index
from action_context.core.merger import merge_many, merge_one
from action_context.core.registry import (
    ContextField,
    clear_field_cache,
    get_context_fields,
    register_context_fields,
)
from action_context.errors import (
    ActionContextError,
    ConversionError,
    FatalExtractionError,
)

__version__ = "0.1.0"

__all__ = [
    "ActionContextError",
    "BusinessActionContext",
    "ContextField",
    "ContextParam",
    "ConversionError",
    "FatalExtractionError",
    "JsonText",
    "apply_directive",
    "clear_field_cache",
    "decode",
    "encode",
    "extract_call_context",
    "extract_context",
    "get_by_index",
    "get_context_fields",
    "merge_many",
    "merge_one",
    "register_context_fields",
]
