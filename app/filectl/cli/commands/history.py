"""``filectl history``: list past runs or inspect one of them."""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from filectl.core.history import RunHistory
from filectl.models.history import RunRecord
from filectl.utils.formatting import EVENT_STYLES, console, print_error, print_info

MAX_PATHS_SHOWN = 3

app = typer.Typer(
    name="history",
    help="View history of reconciliation runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Maximum number of runs to show.")
    ] = 20,
    run_id: Annotated[
        str | None,
        typer.Option("--id", help="Show every event of one run (id or unique prefix)."),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
) -> None:
    """Show past runs that changed or failed something.

    Examples:
        filectl history               # last 20 runs
        filectl history --id 3f9a     # events of a single run
        filectl history --json
    """
    if ctx.invoked_subcommand is not None:
        return

    store = RunHistory()
    if run_id is not None:
        record = store.get_record(run_id)
        if record is None:
            print_error(f"No run matches id '{run_id}'")
            raise typer.Exit(code=1)
        records = [record]
    else:
        records = store.get_history(limit=limit)

    if not records:
        print_info("No runs recorded.")
    elif json_output:
        console.print_json(json.dumps([r.to_dict() for r in records]))
    elif run_id is not None:
        _print_events(records[0])
    else:
        _print_runs(records)


def _timestamp(iso_timestamp: str) -> str:
    return datetime.fromisoformat(iso_timestamp).strftime("%Y-%m-%d %H:%M")


def _summarize_paths(record: RunRecord) -> str:
    paths = list(dict.fromkeys(item.path for item in record.items))
    if not paths:
        return "-"
    summary = ", ".join(paths[:MAX_PATHS_SHOWN])
    hidden = len(paths) - MAX_PATHS_SHOWN
    return f"{summary} (+{hidden} more)" if hidden > 0 else summary


def _print_runs(records: list[RunRecord]) -> None:
    table = Table(title="Run History", header_style="bold_header", border_style="border")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Events", style="success", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Paths", style="text")

    for record in records:
        table.add_row(
            record.id[:8],
            _timestamp(record.timestamp),
            str(len(record.items)),
            f"[error]{record.failures}[/]" if record.failures else "0",
            _summarize_paths(record),
        )
    console.print(table)


def _print_events(record: RunRecord) -> None:
    table = Table(
        title=f"Run {record.id} ({_timestamp(record.timestamp)})",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="path")
    table.add_column("Event")
    for item in record.items:
        style = EVENT_STYLES.get(item.event, "text")
        table.add_row(item.path, f"[{style}]{item.event.value}[/]")
    console.print(table)
    console.print(f"{len(record.items)} event(s), {record.failures} failure(s)")
