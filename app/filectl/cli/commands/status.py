"""Status command implementation.

Compares the filesystem against the manifest without changing anything.
"""

from pathlib import Path
from typing import Annotated

import typer

from filectl.cli.display import print_report
from filectl.core.errors import FileStateError
from filectl.core.manifest import require_manifest
from filectl.core.reconciler import reconcile_manifest
from filectl.utils.formatting import print_error

app = typer.Typer(
    help="Show files that are out of sync.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def status(
    ctx: typer.Context,
    manifest_path: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Path to manifest file.",
        ),
    ] = None,
) -> None:
    """Report every out-of-sync state.

    Exits with code 1 if anything is out of sync or failed to retrieve,
    so it can gate scripts.
    """
    if ctx.invoked_subcommand is not None:
        return

    manifest = require_manifest(manifest_path)
    try:
        report = reconcile_manifest(manifest, dry_run=True)
    except FileStateError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_report(report, "Status")
    if report.failures or any(r.dry_run for r in report.results):
        raise typer.Exit(code=1)
