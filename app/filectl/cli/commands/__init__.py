"""CLI commands for filectl.

This package contains all subcommand implementations.
"""

from filectl.cli.commands import apply, checksums, history, status

__all__ = ["apply", "checksums", "history", "status"]
