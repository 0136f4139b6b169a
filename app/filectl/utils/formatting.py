"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.table import Table

from filectl.core.theme import get_theme
from filectl.models.events import Event, StateResult


def _detect_color_system() -> str | None:
    """Pick the color system for the shared consoles.

    Interactive terminals get truecolor so theme hex values render exactly.

    Returns:
        "truecolor" when stdout is a TTY, or None to let Rich detect it.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())

EVENT_STYLES: dict[Event, str] = {
    Event.FILE_CREATED: "created",
    Event.DIRECTORY_CREATED: "created",
    Event.LINK_CREATED: "created",
    Event.FILE_MODIFIED: "modified",
    Event.FILE_CHANGED: "changed",
    Event.INODE_CHANGED: "changed",
}


def create_results_table(title: str = "Reconciliation") -> Table:
    """Create a pre-configured table for state results.

    Args:
        title: Table title, such as "Status" for dry runs.

    Returns:
        An empty table with icon, path, state, event and detail columns.
        Fill it with rows from :func:`format_result_row`.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Path", style="path", no_wrap=True)
    table.add_column("State", style="muted")
    table.add_column("Event")
    table.add_column("Detail", style="text", overflow="fold")
    return table


def format_result_row(result: StateResult) -> tuple[str, str, str, str, str]:
    """Format a state result as a table row with markup.

    Applied changes are colored by :data:`EVENT_STYLES`. A planned change
    shows its transition in the detail column.

    Args:
        result: Outcome of one state.

    Returns:
        Tuple of (icon, path, state, event, detail).
    """
    kind = result.kind.value if result.kind is not None else "-"

    if result.failed:
        return ("[error]✗[/]", result.path, kind, "[error]failed[/]", result.error or "")
    if result.dry_run:
        return ("[planned]…[/]", result.path, kind, "[planned]pending[/]", result.message or "")
    if result.event is not None:
        style = EVENT_STYLES.get(result.event, "text")
        event = f"[{style}]{result.event.value}[/]"
        return (f"[{style}]●[/]", result.path, kind, event, result.message or "")
    return ("[muted]○[/]", result.path, kind, "[muted]-[/]", result.message or "")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
