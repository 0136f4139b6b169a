"""Filebuckets: backup repositories for replaced content.

A filebucket receives the current content of a file before the source
copy overwrites it. The local implementation is a content-addressed
directory keyed by MD5 digest.
"""

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Protocol

from filectl.core.errors import FileIOError, NotFoundError

logger = logging.getLogger(__name__)


class Filebucket(Protocol):
    """Anything able to keep a copy of a file before it is replaced."""

    def backup(self, path: str) -> str:
        """Store the content of ``path`` and return its digest."""
        ...


class LocalFilebucket:
    """Content-addressed backup store on the local filesystem.

    Layout::

        <root>/<md5>/contents   # the backed-up bytes
        <root>/<md5>/paths      # one original path per line

    Identical content backed up from several paths is stored once.

    Attributes:
        root: Directory holding the store.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def backup(self, path: str) -> str:
        """Copy a file into the bucket.

        Args:
            path: Absolute path of the file to back up.

        Returns:
            MD5 hex digest under which the content is stored.

        Raises:
            FileIOError: If the file cannot be read or the bucket written.
        """
        try:
            data = Path(path).read_bytes()
            digest = hashlib.md5(data).hexdigest()  # nosec: B324
            entry = self._root / digest
            entry.mkdir(parents=True, exist_ok=True)

            contents = entry / "contents"
            if not contents.exists():
                contents.write_bytes(data)

            paths_file = entry / "paths"
            if path not in self.paths(digest):
                with paths_file.open(mode="a", encoding="utf-8") as f:
                    f.write(path + "\n")
        except OSError as e:
            raise FileIOError(f"Could not back up {path} to filebucket {self._root}: {e}") from e

        logger.info("Backed up %s to filebucket as %s", path, digest)
        return digest

    def restore(self, digest: str, dest: str) -> None:
        """Copy stored content back out of the bucket.

        Raises:
            NotFoundError: If the digest is not in the bucket.
            FileIOError: If the destination cannot be written.
        """
        contents = self._root / digest / "contents"
        if not contents.exists():
            raise NotFoundError(f"No content {digest} in filebucket {self._root}")
        try:
            shutil.copyfile(contents, dest)
        except OSError as e:
            raise FileIOError(f"Could not restore {digest} to {dest}: {e}") from e

    def paths(self, digest: str) -> list[str]:
        """Return every original path backed up under a digest."""
        paths_file = self._root / digest / "paths"
        if not paths_file.exists():
            return []
        return [line for line in paths_file.read_text(encoding="utf-8").splitlines() if line]
