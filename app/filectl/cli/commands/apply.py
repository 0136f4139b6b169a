"""Apply command implementation.

Reconciles every file declared in the manifest and records the run in
the history.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from filectl.cli.display import print_report
from filectl.core.errors import FileStateError
from filectl.core.history import RunHistory
from filectl.core.manifest import require_manifest
from filectl.core.reconciler import reconcile_manifest
from filectl.models.events import RunReport
from filectl.models.history import create_run_record
from filectl.utils.formatting import print_error, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Apply manifest to the filesystem.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def apply(
    ctx: typer.Context,
    manifest_path: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Path to manifest file.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would change without touching anything.",
        ),
    ] = False,
) -> None:
    """Converge declared files toward the manifest.

    Creates missing entries, copies sources, fixes ownership and
    permissions, and records content checksums for drift detection.

    Examples:
        filectl apply
        filectl apply --dry-run
        filectl apply -m ./manifest.toml
    """
    if ctx.invoked_subcommand is not None:
        return

    manifest = require_manifest(manifest_path)

    try:
        report = reconcile_manifest(manifest, dry_run=dry_run)
    except FileStateError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_report(report, "Dry Run" if dry_run else "Applied")

    if not dry_run:
        record_run(report, manifest_path)

    if report.failures:
        raise typer.Exit(code=1)


def record_run(report: RunReport, manifest_path: Path | None) -> None:
    """Append the run to the history if it changed or failed anything.

    History errors are reported but never fail the command.
    """
    if not report.events and not report.failures:
        return
    record = create_run_record(
        report,
        metadata={
            "command": "filectl apply",
            "manifest": str(manifest_path) if manifest_path else None,
        },
    )
    try:
        RunHistory().record(record)
    except (OSError, RuntimeError) as e:
        logger.warning("Failed to record history: %s", e)
        print_warning(f"Could not record run history: {e}")
