"""Configuration constants and .env loading.

WHY: The few runtime switches of the engine (field cache, CLI log level)
should be changeable without code edits, the same way in development
(.env file) and in deployment (real environment variables).

HOW: python-dotenv loads the .env file on import. Settings are
module-level constants read with os.getenv. load_bool() parses the
usual true/false spellings.

RULES:
- All settings are prefixed with ACTION_CONTEXT_
- Real environment variables win over .env entries
- The library never configures logging; only the CLI reads LOG_LEVEL
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory (where the process is started)
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable.

    RULES:
    - Unset or empty returns default
    - Accepts 1/0, true/false, yes/no, on/off (case-insensitive)
    - Raises ValueError for anything else
    """
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


# ---------------------------------------------------------------------------
# Engine settings
# ---------------------------------------------------------------------------

FIELD_CACHE_ENABLED = load_bool("ACTION_CONTEXT_FIELD_CACHE", True)
"""Cache the directive-bearing field set per type (process-wide)."""

LOG_LEVEL = os.getenv("ACTION_CONTEXT_LOG_LEVEL", "WARNING").upper()
"""Log level used by the CLI when it configures logging."""
