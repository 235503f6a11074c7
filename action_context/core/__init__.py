"""Core extraction, normalization and retrieval modules.

WHY: The core package holds the stateless engine: directives, the
field registry, extraction, merging, and type coercion. Everything that
owns state (the business action context, the CLI) lives outside it.

HOW: directive.py declares ContextParam, registry.py finds the fields
carrying it, indexer.py and extractor.py build context fragments,
merger.py writes them into a long-lived context, coercer.py converts
between native values and the stored forms.

RULES:
- No I/O and no locking in the core
- Caches are compute-once and safe to populate concurrently
"""
