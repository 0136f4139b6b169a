"""Persisted checksum table.

The store maps ``path -> checktype -> value`` and survives between runs.
It is the only thing that lets the checksum state tell a first sighting
(no event) apart from drift caused outside of filectl (``file_modified``),
independent of how trustworthy filesystem timestamps are.
"""

import json
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from tempfile import NamedTemporaryFile

from filectl.core.errors import FileIOError

logger = logging.getLogger(__name__)


class ChecksumStore:
    """Path-keyed table of last observed checksums.

    Storage location: ~/.local/state/filectl/checksums.json

    The file holds a single JSON object ``{path: {checktype: value}}``.
    It is read once by :meth:`load` before the first retrieve and written
    back by :meth:`flush` after the last sync. A store created without a
    path lives only in memory.

    Attributes:
        path: Backing file, or None for an in-memory store.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._table: dict[str, dict[str, str]] = {}
        self._dirty = False

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def dirty(self) -> bool:
        """Whether the table changed since the last load or flush."""
        return self._dirty

    def load(self) -> None:
        """Read the table from disk, replacing the in-memory contents.

        A missing file yields an empty table. A corrupt file is logged
        and ignored so a damaged store never blocks reconciliation; the
        next flush overwrites it.
        """
        self._table = {}
        self._dirty = False
        if self._path is None or not self._path.exists():
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable checksum store %s: %s", self._path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed checksum store %s", self._path)
            return

        for path, sums in data.items():
            if not isinstance(sums, dict):
                logger.warning("Skipping malformed checksum entry for %s", path)
                continue
            self._table[str(path)] = {str(k): str(v) for k, v in sums.items()}

        logger.debug("Loaded %d checksum entries from %s", len(self._table), self._path)

    def flush(self) -> None:
        """Write the table to disk if it changed.

        The file is written atomically by first writing to a temporary file
        in the same directory and then using os.replace().

        Raises:
            FileIOError: If the file cannot be written.
        """
        if self._path is None or not self._dirty:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(self._table, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise FileIOError(f"Failed to write checksum store {self._path}: {e}") from e

        self._dirty = False
        logger.debug("Flushed %d checksum entries to %s", len(self._table), self._path)

    def get(self, path: str, checktype: str) -> str | None:
        """Return the stored checksum, or None if never recorded."""
        return self._table.get(path, {}).get(checktype)

    def set(self, path: str, checktype: str, value: str) -> str | None:
        """Record a checksum and return the value it replaced, if any."""
        sums = self._table.get(path)
        if sums is None:
            logger.debug("Initializing checksum entry for %s", path)
            sums = self._table[path] = {}
        previous = sums.get(checktype)
        if previous != value:
            sums[checktype] = value
            self._dirty = True
        return previous

    def entries(self, path: str) -> dict[str, str]:
        """Return a copy of every checksum recorded for a path."""
        return dict(self._table.get(path, {}))

    def forget(self, path: str) -> bool:
        """Drop every checksum recorded for a path.

        Returns:
            True if the path had any entries.
        """
        if self._table.pop(path, None) is None:
            return False
        self._dirty = True
        return True

    def __contains__(self, path: object) -> bool:
        return path in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._table))

    def __len__(self) -> int:
        return len(self._table)
