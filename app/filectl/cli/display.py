"""Shared display helpers for reconciliation reports."""

from filectl.models.events import RunReport
from filectl.utils.formatting import (
    console,
    create_results_table,
    format_result_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def print_report(report: RunReport, title: str, show_unchanged: bool = False) -> None:
    """Print a results table followed by a one-line summary.

    Results without an event (first checksum sightings and the like) are
    hidden unless ``show_unchanged`` is set.
    """
    rows = [
        r
        for r in report.results
        if show_unchanged or r.failed or r.dry_run or r.event is not None
    ]
    if rows:
        table = create_results_table(title)
        for result in rows:
            table.add_row(*format_result_row(result))
        console.print(table)

    failures = len(report.failures)
    pending = sum(1 for r in report.results if r.dry_run)
    if failures:
        print_error(f"{failures} state(s) failed to converge.")
    if pending:
        print_warning(f"{pending} state(s) out of sync.")
    elif report.events:
        print_success(
            f"{len(report.events)} event(s) across {len(report.changed_paths)} path(s)."
        )
    elif not failures:
        print_info("Everything is in sync.")
