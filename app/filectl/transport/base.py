"""Source transport: the describe/list/retrieve contract as typed calls.

Local and remote sources are served through the same raw contract
(:class:`~filectl.transport.server.FileServerClient`). The transport parses
the raw answers, wraps every client failure in TransportError, and
decodes remote content exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote_to_bytes

from filectl.core.errors import TransportError
from filectl.transport.server import FileServerClient

logger = logging.getLogger(__name__)


class TransportKind(str, Enum):
    """Where a source's content comes from.

    Attributes:
        LOCAL: The local filesystem, served in-process.
        REMOTE: A file server on another host.
    """

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class FileDescription:
    """Metadata of a source entry as reported by ``describe``.

    Attributes:
        mode: Permission bits, or None if not reported.
        type: Entry kind ("file", "directory", ...).
        owner: Owning uid, or None if not reported.
        group: Owning gid, or None if not reported.
        checksum: MD5 fingerprint for files, None for anything else.
    """

    mode: int | None
    type: str
    owner: int | None
    group: int | None
    checksum: str | None

    @classmethod
    def parse(cls, line: str) -> "FileDescription":
        """Parse a tab-separated description line.

        Raises:
            ValueError: If the line does not hold the expected fields.
        """
        fields = line.rstrip("\n").split("\t")
        if len(fields) < 4:
            msg = f"Malformed description: {line!r}"
            raise ValueError(msg)
        fields += [""] * (5 - len(fields))
        mode, kind, owner, group, checksum = fields[:5]
        if not kind:
            msg = f"Description has no type: {line!r}"
            raise ValueError(msg)
        return cls(
            mode=int(mode, 8) if mode else None,
            type=kind,
            owner=int(owner) if owner.isdigit() else None,
            group=int(group) if group.isdigit() else None,
            checksum=(checksum or None) if kind == "file" else None,
        )

    def metadata(self) -> dict[str, int]:
        """Attributes a destination may inherit (mode, owner, group)."""
        values = {"mode": self.mode, "owner": self.owner, "group": self.group}
        return {name: value for name, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True)
class ListingEntry:
    """One record of a ``list`` answer.

    Attributes:
        path: Path relative to the listed entry, with a leading "/".
        type: Entry kind.
    """

    path: str
    type: str

    @property
    def is_self(self) -> bool:
        """Whether this record describes the listed entry itself."""
        return self.path == "/"

    @property
    def name(self) -> str:
        """Relative path without the leading slash."""
        return self.path.lstrip("/")


def parse_listing(text: str) -> list[ListingEntry]:
    """Parse newline-delimited ``relpath<TAB>type`` records.

    Raises:
        ValueError: If a record is malformed.
    """
    entries: list[ListingEntry] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) != 2 or not parts[0]:
            msg = f"Malformed listing record: {line!r}"
            raise ValueError(msg)
        entries.append(ListingEntry(path=parts[0], type=parts[1]))
    return entries


class SourceTransport:
    """Typed access to one file server.

    Attributes:
        kind: Whether the server is local or remote.
        client: Raw file server client.
        mount: Mount name the server paths are rooted at.
    """

    def __init__(self, kind: TransportKind, client: FileServerClient, mount: str) -> None:
        self.kind = kind
        self.client = client
        self.mount = mount

    @property
    def local(self) -> bool:
        return self.kind is TransportKind.LOCAL

    def describe(self, path: str) -> FileDescription:
        """Describe a source entry.

        Raises:
            TransportError: If the server fails or answers garbage.
        """
        try:
            raw = self.client.describe(path)
            return FileDescription.parse(raw)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Could not describe {path}: {e}") from e

    def list(self, path: str, recursive: bool = False) -> list[ListingEntry]:
        """List a source entry and what lies beneath it.

        Raises:
            TransportError: If the server fails or answers garbage.
        """
        try:
            raw = self.client.list(path, recursive)
            return parse_listing(raw)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Could not list {path}: {e}") from e

    def retrieve(self, path: str) -> bytes:
        """Fetch a source file's content.

        Remote servers percent-encode content on the wire; it is decoded
        here and nowhere else. Local content is returned untouched.

        Raises:
            TransportError: If the server fails.
        """
        try:
            data = self.client.retrieve(path)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Could not retrieve {path}: {e}") from e

        if self.kind is TransportKind.REMOTE:
            return unquote_to_bytes(data)
        if isinstance(data, str):
            return data.encode("utf-8")
        return data
