"""Checksums command for inspecting the persisted checksum store."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from filectl.core.checksums import ChecksumStore
from filectl.core.paths import get_checksum_store_path
from filectl.utils.formatting import console, print_info

app = typer.Typer(
    name="checksums",
    help="Show recorded checksums.",
    invoke_without_command=True,
    # options may follow the path argument
    context_settings={"allow_interspersed_args": True},
)


@app.callback(invoke_without_command=True)
def checksums(
    ctx: typer.Context,
    path: Annotated[
        str | None,
        typer.Argument(help="Only show checksums recorded for this path."),
    ] = None,
    store_path: Annotated[
        Path | None,
        typer.Option(
            "--store",
            help="Path to the checksum store.",
        ),
    ] = None,
) -> None:
    """Show the checksums recorded by previous runs.

    Examples:
        filectl checksums
        filectl checksums /etc/motd
    """
    if ctx.invoked_subcommand is not None:
        return

    store = ChecksumStore(store_path or get_checksum_store_path())
    store.load()

    paths = [path] if path is not None else list(store)
    rows = [
        (p, checktype, value)
        for p in paths
        for checktype, value in sorted(store.entries(p).items())
    ]
    if not rows:
        print_info("No checksums recorded.")
        return

    table = Table(
        title="Checksums",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="path")
    table.add_column("Type", style="muted")
    table.add_column("Value", style="info")
    for row in rows:
        table.add_row(*row)
    console.print(table)
