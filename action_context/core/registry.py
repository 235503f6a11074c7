"""Directive-bearing field registry for classes and callables.

WHY: Extraction needs, for any type, the full list of attributes that
carry a ContextParam directive, inherited ones included. Scanning
annotations on every call is wasteful since a class's shape does not
change at runtime, and some classes (third-party, generated) cannot be
annotated at all.

HOW: get_context_fields() walks the MRO base-first, reads each class's
own annotations, evaluates postponed (string) annotations against the
defining module, and keeps ``Annotated`` hints whose metadata holds a
ContextParam. Directives registered with register_context_fields() are
layered on top per class. The result is cached per type in a plain dict
with compute-once semantics.

RULES:
- ClassVar, InitVar and dunder names are never fields
- A subclass redeclaring an attribute replaces the inherited entry in
  place, with or without a directive
- Private ``__name`` attributes are read through their mangled name
- Registered directives override annotated ones of the same class
- Cache population needs no lock: concurrent callers may compute the
  same tuple twice, the first stored one wins
- Annotations that fail to evaluate propagate to the caller
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import logging
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Optional, Tuple

from action_context import config
from action_context.core.directive import ContextParam

logger = logging.getLogger(__name__)

# Annotation strings naming these are class-level, not instance fields.
_NON_FIELD_FORMS = frozenset({
    "ClassVar", "typing.ClassVar", "t.ClassVar",
    "InitVar", "dataclasses.InitVar",
})


@dataclass(frozen=True)
class ContextField:
    """One directive-bearing attribute of a class.

    Attributes:
        name: Attribute name as declared (the natural context key).
        attr_name: Name to read with getattr(), mangled for ``__private``.
        owner: Class in the MRO that declared the attribute.
        directive: The ContextParam governing extraction.
    """

    name: str
    attr_name: str
    owner: type
    directive: ContextParam


_FIELD_CACHE: dict[type, Tuple[ContextField, ...]] = {}
_REGISTERED: dict[type, dict[str, ContextParam]] = {}


def find_directive(hint: Any) -> Optional[ContextParam]:
    """Return the first ContextParam in an ``Annotated`` hint, else None."""
    if typing.get_origin(hint) is not Annotated:
        return None
    for meta in hint.__metadata__:
        if isinstance(meta, ContextParam):
            return meta
    return None


def _is_instance_field(name: str, hint: Any) -> bool:
    if name.startswith("__") and name.endswith("__"):
        return False
    if isinstance(hint, str):
        return hint.split("[", 1)[0].strip() not in _NON_FIELD_FORMS
    if hint is ClassVar or typing.get_origin(hint) is ClassVar:
        return False
    if hint is dataclasses.InitVar or isinstance(hint, dataclasses.InitVar):
        return False
    return True


def _instance_hints(klass: type) -> dict[str, Any]:
    raw = {
        name: hint
        for name, hint in inspect.get_annotations(klass).items()
        if _is_instance_field(name, hint)
    }
    if not any(isinstance(hint, str) for hint in raw.values()):
        return raw
    # postponed annotations resolve against the module globals and class namespace
    evaluated = inspect.get_annotations(klass, eval_str=True)
    return {name: evaluated[name] for name in raw}


def _names(klass: type, name: str) -> Tuple[str, str]:
    """(natural name, attribute name) for a name declared in klass."""
    prefix = f"_{klass.__name__.lstrip('_')}__"
    if name.startswith(prefix):
        # the compiler already mangled an annotated ``__name``
        return name[len(prefix) - 2:], name
    if name.startswith("__") and not name.endswith("__"):
        return name, prefix + name[2:]
    return name, name


def _collect_fields(cls: type) -> Tuple[ContextField, ...]:
    fields: dict[str, ContextField] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, hint in _instance_hints(klass).items():
            natural_name, attr_name = _names(klass, name)
            directive = find_directive(hint)
            if directive is None:
                fields.pop(attr_name, None)
                continue
            fields[attr_name] = ContextField(natural_name, attr_name, klass, directive)
        for name, directive in _REGISTERED.get(klass, {}).items():
            natural_name, attr_name = _names(klass, name)
            fields[attr_name] = ContextField(natural_name, attr_name, klass, directive)
    return tuple(fields.values())


def get_context_fields(cls: type) -> Tuple[ContextField, ...]:
    """Return every directive-bearing field of cls, inherited ones included.

    Args:
        cls: The class to inspect.

    Returns:
        Tuple of ContextField in declaration order, base classes first.
        Empty when cls declares no directives.

    Raises:
        NameError, SyntaxError, ...: When a postponed annotation cannot
            be evaluated. extract_context() wraps these.
    """
    if config.FIELD_CACHE_ENABLED:
        cached = _FIELD_CACHE.get(cls)
        if cached is not None:
            return cached

    fields = _collect_fields(cls)
    if not config.FIELD_CACHE_ENABLED:
        return fields

    logger.debug("Cached %d context field(s) for %s", len(fields), cls.__qualname__)
    return _FIELD_CACHE.setdefault(cls, fields)


def register_context_fields(cls: type, directives: Mapping[str, ContextParam]) -> None:
    """Declare directives for attributes of a class that cannot be annotated.

    WHY: Third-party and generated classes cannot carry ``Annotated``
    metadata, but their instances still need extracting.

    HOW: Stores the mapping in a side-table consulted by
    get_context_fields() for cls and its subclasses. Calling again for
    the same class adds to (and overrides) earlier registrations.

    RULES:
    - Keys are attribute names as declared (not mangled)
    - Values must be ContextParam instances
    - Clears the field cache; meant for import/startup time
    """
    for name, directive in directives.items():
        if not isinstance(directive, ContextParam):
            raise TypeError(
                f"Directive for '{name}' must be a ContextParam, "
                f"got {type(directive).__name__}"
            )
    merged = dict(_REGISTERED.get(cls, {}))
    merged.update(directives)
    _REGISTERED[cls] = merged
    clear_field_cache()


def clear_field_cache() -> None:
    """Forget all cached field sets and parameter directives."""
    _FIELD_CACHE.clear()
    get_param_directives.cache_clear()


@functools.lru_cache(maxsize=None)
def get_param_directives(func: Callable[..., Any]) -> Tuple[Tuple[str, ContextParam], ...]:
    """Return (parameter name, directive) pairs for a callable, in signature order.

    Raises:
        NameError, TypeError, ...: When the callable's hints cannot be
            resolved. extract_call_context() wraps these.
    """
    hints = typing.get_type_hints(func, include_extras=True)
    pairs = []
    for name in inspect.signature(func).parameters:
        directive = find_directive(hints.get(name))
        if directive is not None:
            pairs.append((name, directive))
    return tuple(pairs)
