"""Output utilities for hostwatch.

Operator-facing lines go to stdout through a shared rich console. Plain
lines are printed verbatim: no markup parsing, no highlighting, no wrapping.
"""

from datetime import datetime

from rich.console import Console
from rich.markup import escape

console = Console()
error_console = Console(stderr=True)


def now_timestamp() -> str:
    """Current local time as an RFC 3339 string with second precision."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


def print_line(message: str) -> None:
    """Print a line exactly as given."""
    console.print(message, markup=False, highlight=False, emoji=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✗[/red] {escape(message)}", highlight=False)
