"""Command-line interface for inspecting action contexts.

WHY: Directive mistakes (wrong key, index on a non-list, flattening a
type with no directives) only show up at runtime as missing context
entries. Developers need a quick way to see what a class declares, what
an object extracts to, and whether a persisted value decodes.

HOW: argparse with three subcommands:
  fields  MODULE:CLASS          — the directive-bearing fields of a class
  extract MODULE:ATTR           — normalized context extracted from an object
  decode  FILE KEY [--type T]   — one value of a persisted context, decoded
Objects and types are imported from ``module:attribute`` paths.

RULES:
- Results go to stdout, errors to stderr as "Error: ..." with exit code 1
- Logging is configured here (and only here) from ACTION_CONTEXT_LOG_LEVEL
- extract calls the imported attribute when it is callable (factory)
- decode accepts a plain JSON object or {"actionContext": {...}}
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import pydantic_core

from action_context.business import APPLICATION_DATA_KEY, BusinessActionContext
from action_context.config import LOG_LEVEL
from action_context.core.coercer import decode, is_primitive, to_json_text
from action_context.core.extractor import extract_context
from action_context.core.merger import merge_many
from action_context.core.registry import get_context_fields
from action_context.errors import ActionContextError

class MissingKeyError(ActionContextError):
    """A persisted context has no value under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No context value for key '{key}'")


BUILTIN_TARGETS = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
}


def import_object(path: str) -> Any:
    """Import ``module:attr.sub`` and return the attribute.

    Raises:
        ValueError: If path has no ``:`` separator.
        ImportError, AttributeError: If the module or attribute is missing.
    """
    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected MODULE:ATTRIBUTE, got '{path}'")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj


def resolve_target(name: str) -> Any:
    """Map a --type argument to a type: a builtin name or MODULE:NAME."""
    if name in BUILTIN_TARGETS:
        return BUILTIN_TARGETS[name]
    return import_object(name)


def _format_output(value: Any) -> str:
    if is_primitive(value):
        return str(value)
    return to_json_text(value)


def _cmd_fields(args: argparse.Namespace) -> None:
    cls = import_object(args.target)
    if not isinstance(cls, type):
        raise TypeError(f"'{args.target}' is not a class")

    fields = get_context_fields(cls)
    if not fields:
        print(f"{cls.__qualname__} declares no context fields", file=sys.stderr)
        return

    rows = [("FIELD", "KEY", "INDEX", "FLATTEN", "DECLARED IN")]
    for f in fields:
        key = "-" if f.directive.is_param_in_property else f.directive.resolve_key(f.name)
        index = str(f.directive.index) if f.directive.index >= 0 else "-"
        flatten = "yes" if f.directive.is_param_in_property else "no"
        rows.append((f.name, key, index, flatten, f.owner.__qualname__))

    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        print("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())


def _cmd_extract(args: argparse.Namespace) -> None:
    obj = import_object(args.target)
    if callable(obj):
        obj = obj()

    context: dict = {}
    merge_many(context, extract_context(obj))
    print(pydantic_core.to_json(context, indent=2).decode("utf-8"))


def _cmd_decode(args: argparse.Namespace) -> None:
    data = Path(args.file).read_text(encoding="utf-8")
    loaded = pydantic_core.from_json(data)
    if isinstance(loaded, dict) and APPLICATION_DATA_KEY not in loaded:
        data = pydantic_core.to_json({APPLICATION_DATA_KEY: loaded}).decode("utf-8")
    context = BusinessActionContext.from_application_data(data)

    if args.key not in context.action_context:
        raise MissingKeyError(args.key)

    value = context.get_action_context(args.key, resolve_target(args.type))
    print(_format_output(value))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable without running any subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="action-context",
        description="Inspect ContextParam declarations, extracted contexts "
                    "and persisted context values.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fields = subparsers.add_parser(
        "fields",
        help="List the directive-bearing fields of a class.",
    )
    fields.add_argument("target", help="Class to inspect, as MODULE:CLASS.")
    fields.set_defaults(handler=_cmd_fields)

    extract = subparsers.add_parser(
        "extract",
        help="Extract and normalize the context of an object.",
    )
    extract.add_argument(
        "target",
        help="Object (or zero-argument factory) to extract, as MODULE:ATTR.",
    )
    extract.set_defaults(handler=_cmd_extract)

    decode_cmd = subparsers.add_parser(
        "decode",
        help="Decode one value of a persisted context.",
    )
    decode_cmd.add_argument("file", help="Path to a context JSON file.")
    decode_cmd.add_argument("key", help="Context key to decode.")
    decode_cmd.add_argument(
        "--type",
        default="str",
        help="Target type: {} or MODULE:NAME (default: %(default)s).".format(
            ", ".join(BUILTIN_TARGETS)
        ),
    )
    decode_cmd.set_defaults(handler=_cmd_decode)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.handler(args)
    except (ActionContextError, ImportError, AttributeError, OSError, TypeError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
