"""Rich-based console formatting utilities"""

from typing import Iterable, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import RunPhase, RunState
from .utils import format_elapsed

console = Console()


def print_check(message: str) -> None:
    """Print a checkmark message in bold green."""
    console.print(Text("✓ ", style="bold green") + Text(message, style="bold"))


def print_warning(message: str) -> None:
    console.print(Text("⚠ ", style="bold yellow") + Text(message, style="bold"))


def print_error(message: str) -> None:
    console.print(Text("✗ ", style="bold red") + Text(message, style="bold"))


def print_success(message: str) -> None:
    console.print(Text("✓ ", style="green") + Text(message, style="green"))


def print_info(message: str) -> None:
    console.print(Text("ℹ ", style="bold blue") + Text(message, style="blue"))


def print_header(title: str, width: int = 60) -> None:
    """Print a decorative header."""
    separator = Text("=" * width, style="bold blue")
    console.print(separator)
    console.print(title.center(width).rstrip(), style="bold blue")
    console.print(separator)


def print_state(state: RunState) -> None:
    """One line per RunState transition."""
    if state.phase is RunPhase.RUNNING:
        print_info("Splitting...")
    elif state.phase is RunPhase.COMPLETED and state.running:
        print_success(f"Split finished in {format_elapsed(state.total_elapsed_ms or 0)} of encode time")
    elif state.phase is RunPhase.FAILED:
        print_error(f"Split failed with {len(state.errors)} error(s)")


def print_errors(errors: Iterable[str]) -> None:
    for message in errors:
        print_error(message)


def print_listing(names: Sequence[str], title: str = "Segments") -> None:
    """Render the produced segments as a table."""
    if not names:
        print_warning("No segments were produced")
        return
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("File", style="bold")
    for position, name in enumerate(names, start=1):
        table.add_row(str(position), name)
    console.print(table)
