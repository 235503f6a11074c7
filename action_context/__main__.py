"""Package entry point for ``python -m action_context``.

WHY: Python's ``-m`` flag looks for ``__main__.py`` inside the package
and executes it, so the CLI is reachable without installing the script.
"""

from action_context.cli import main

if __name__ == "__main__":
    main()
