"""Reading the manifest that declares which files filectl manages.

The manifest is a TOML document validated against
:class:`filectl.models.manifest.Manifest`. filectl never writes it.
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from filectl.core.paths import get_manifest_path
from filectl.models.manifest import Manifest


class ManifestError(Exception):
    """The manifest could not be turned into a :class:`Manifest`."""


class ManifestNotFoundError(ManifestError):
    pass


class ManifestParseError(ManifestError):
    """The file is not valid TOML."""


class ManifestValidationError(ManifestError):
    """The TOML parses but declares something filectl rejects."""


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise ManifestNotFoundError(f"Manifest not found: {path}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ManifestParseError(f"Invalid TOML in {path}: {e}") from e


def load_manifest(path: Path | None = None) -> Manifest:
    """Parse and validate a manifest.

    Args:
        path: Manifest file; the config directory's ``manifest.toml``
            when omitted.

    Raises:
        ManifestNotFoundError: Nothing exists at ``path``.
        ManifestParseError: The TOML is malformed.
        ManifestValidationError: A file entry or bucket is invalid.
    """
    source = path if path is not None else get_manifest_path()
    document = _read_toml(source)
    try:
        return Manifest.model_validate(document)
    except ValidationError as e:
        raise ManifestValidationError(f"{source} declares invalid entries: {e}") from e


def manifest_exists(path: Path | None = None) -> bool:
    return (path if path is not None else get_manifest_path()).is_file()


def require_manifest(manifest_path: Path | None = None) -> Manifest:
    """Load the manifest for a command, exiting with status 1 if it cannot be used.

    Raises:
        typer.Exit: The manifest is missing or invalid; the reason has
            already been printed.
    """
    import typer

    from filectl.utils.formatting import print_error, print_info

    try:
        return load_manifest(manifest_path)
    except ManifestNotFoundError as e:
        print_error(str(e))
        print_info('Declare files under [files."/abs/path"] in a manifest.toml.')
        raise typer.Exit(code=1) from e
    except ManifestError as e:
        print_error(f"Failed to load manifest: {e}")
        raise typer.Exit(code=1) from e
