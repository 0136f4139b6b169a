"""File server contract and its local implementation.

A file server exposes three raw operations over a tree of mounts:

- ``describe(path)``: one tab-separated line
  ``mode<TAB>type<TAB>owner<TAB>group<TAB>checksum`` (mode in octal,
  checksum empty for non-files).
- ``list(path, recursive)``: newline-separated ``relpath<TAB>type``
  records, starting with ``/`` for the listed path itself.
- ``retrieve(path)``: the raw content bytes.

Server paths always start with the mount name: ``/<mount>/<rest>``.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Protocol

from filectl.utils.files import compute_checksum, entry_kind

logger = logging.getLogger(__name__)


class FileServerClient(Protocol):
    """Raw three-operation contract consumed by :class:`SourceTransport`."""

    def describe(self, path: str) -> str: ...

    def list(self, path: str, recursive: bool = False) -> str: ...

    def retrieve(self, path: str) -> bytes | str: ...


class LocalFileServer:
    """Serve mounted local directories through the file server contract.

    Args:
        mounts: Mapping of mount name to local root directory.
    """

    def __init__(self, mounts: dict[str, str]) -> None:
        self._mounts = dict(mounts)

    def mount(self, root: str, name: str) -> None:
        """Expose a local directory under a mount name."""
        self._mounts[name] = root

    def describe(self, path: str) -> str:
        """Describe one entry.

        Raises:
            FileNotFoundError: If the entry does not exist.
            ValueError: If the path names no known mount.
        """
        local = self._local_path(path)
        st = os.stat(local)
        kind = entry_kind(st)
        checksum = compute_checksum(local, "md5") if kind == "file" else ""
        return "\t".join(
            [
                f"{stat.S_IMODE(st.st_mode):o}",
                kind,
                str(st.st_uid),
                str(st.st_gid),
                checksum,
            ]
        )

    def list(self, path: str, recursive: bool = False) -> str:
        """List an entry and, for directories, what lies beneath it.

        Raises:
            FileNotFoundError: If the entry does not exist.
            ValueError: If the path names no known mount.
        """
        local = Path(self._local_path(path))
        lines = [f"/\t{entry_kind(local.stat())}"]
        if local.is_dir():
            lines.extend(self._walk(local, local, recursive))
        return "\n".join(lines)

    def retrieve(self, path: str) -> bytes:
        """Read the content of a file entry.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the path names no known mount.
        """
        return Path(self._local_path(path)).read_bytes()

    def _walk(self, base: Path, directory: Path, recursive: bool) -> list[str]:
        lines: list[str] = []
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            logger.warning("Permission denied listing directory: %s", directory)
            return lines

        for entry in entries:
            try:
                kind = entry_kind(entry.stat())
            except OSError:
                logger.warning("Cannot determine type of: %s", entry)
                continue
            lines.append(f"/{entry.relative_to(base).as_posix()}\t{kind}")
            if recursive and kind == "directory":
                lines.extend(self._walk(base, entry, recursive))
        return lines

    def _local_path(self, path: str) -> str:
        """Translate ``/<mount>/<rest>`` into a local filesystem path."""
        parts = path.lstrip("/").split("/", 1)
        mount = parts[0]
        if mount not in self._mounts:
            msg = f"No such mount: {mount!r}"
            raise ValueError(msg)
        root = os.path.normpath(self._mounts[mount])
        rest = parts[1] if len(parts) > 1 else ""
        local = os.path.normpath(os.path.join(root, rest))
        if local != root and not local.startswith(root.rstrip("/") + "/"):
            msg = f"Path {path!r} escapes mount {mount!r}"
            raise ValueError(msg)
        return local
