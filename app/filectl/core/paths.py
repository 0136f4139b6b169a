"""Where filectl keeps its configuration and state.

Both locations follow the XDG base directory layout:

- configuration (manifest, theme): ``$XDG_CONFIG_HOME/filectl``,
  default ``~/.config/filectl``
- state (checksum store, run history, local filebucket):
  ``$XDG_STATE_HOME/filectl``, default ``~/.local/state/filectl``
"""

import os
from pathlib import Path

APP_NAME = "filectl"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Resolve an XDG base directory for filectl.

    An unset or empty variable falls back to the home directory.

    Args:
        env_var: Name of the XDG variable, such as "XDG_STATE_HOME".
        default_subdir: Location under the home directory used otherwise,
            such as ".local/state".

    Returns:
        The base directory with ``filectl`` appended.
    """
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / default_subdir
    return root / APP_NAME


def get_config_dir() -> Path:
    """Get the directory holding the manifest and the color theme.

    Returns:
        ``$XDG_CONFIG_HOME/filectl``, or ``~/.config/filectl``.
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the directory for data that survives between runs.

    Checksums, the run history and unnamed filebuckets live here. None of
    it is configuration; deleting it only loses drift detection and past
    backups.

    Returns:
        ``$XDG_STATE_HOME/filectl``, or ``~/.local/state/filectl``.
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_manifest_path() -> Path:
    """Get the manifest read when ``--manifest`` is not given.

    Returns:
        ``manifest.toml`` in the configuration directory.
    """
    return get_config_dir() / "manifest.toml"


def get_checksum_store_path() -> Path:
    """Get the JSON file holding the last known checksum of each managed file.

    Returns:
        ``checksums.json`` in the state directory.
    """
    return get_state_dir() / "checksums.json"


def get_filebucket_dir() -> Path:
    """Get the parent of every filebucket declared without a path.

    Returns:
        ``bucket`` in the state directory. Each bucket is a subdirectory
        named after it.
    """
    return get_state_dir() / "bucket"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create a directory with its parents.

    Args:
        path: Directory to create. An existing one is left as is.
        name: Short label used in the error message, such as "state".

    Returns:
        The same path.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise RuntimeError(f"Cannot create {name} directory {path}: Permission denied") from e
    except OSError as e:
        raise RuntimeError(f"Cannot create {name} directory {path}: {e}") from e
    return path


def ensure_state_dir() -> Path:
    """Get the state directory, creating it if it does not exist yet.

    Returns:
        The state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
