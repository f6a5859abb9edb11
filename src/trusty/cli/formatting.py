"""Rich output helpers for the Trusty CLI.

The answer goes to stdout as plain text; logs and errors go to stderr
through Rich, which degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


def get_console() -> Console:
    """Create a Rich Console bound to stderr."""
    return Console(stderr=True)


def configure_logging(console: Console) -> None:
    """Route log records to ``console`` at ``$TRUSTY_LOG_LEVEL`` (default INFO)."""
    level = (os.environ.get("TRUSTY_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
