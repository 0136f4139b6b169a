"""filectl command line entry point."""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from filectl import __version__
from filectl.cli.commands import apply, checksums, history, status
from filectl.utils.formatting import err_console

app = typer.Typer(
    name="filectl",
    help="Declarative file state reconciliation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

for _name, _module in (
    ("apply", apply),
    ("status", status),
    ("checksums", checksums),
    ("history", history),
):
    app.add_typer(_module.app, name=_name)


def version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"filectl version {__version__}")
    raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Send log records to stderr through Rich.

    ``--verbose`` wins over ``--quiet``; without either only warnings
    and errors are shown.
    """
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Print the filectl version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log every sync and debug detail.")
    ] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log errors.")] = False,
) -> None:
    """Converge files, directories and links toward a declared manifest."""
    configure_logging(verbose, quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


if __name__ == "__main__":
    app()
