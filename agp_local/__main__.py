"""
Main entry point for the agp-local application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import logging
import os
import sys

from rich.console import Console

from agp_local.cli.app import app
from agp_local.cli.formatters import format_error_with_suggestions
from agp_local.exceptions import AgpLocalError


def main() -> None:
    """Runs the CLI, turning uncaught errors into a panel and exit code 1."""
    if os.name == "nt":
        # Rich renders status glyphs that legacy Windows code pages lack.
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except AttributeError:
            pass

    console = Console()
    try:
        app()
    except AgpLocalError as e:
        console.print()
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print()
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("agp_local").debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
