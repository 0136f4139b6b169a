"""CLI package for filectl.

This package contains the Typer application and all subcommands.
"""

from filectl.cli.main import app

__all__ = ["app"]
