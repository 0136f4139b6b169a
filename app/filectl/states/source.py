"""Source state: mirror content (and metadata) from another file tree."""

import logging
import os
import stat
from typing import Any

from filectl.core.errors import DevError, FileIOError, PrivilegeError, ValidationError
from filectl.models.events import Event
from filectl.models.state import UNKNOWN, StateKind, is_known
from filectl.states.base import StateUnit
from filectl.transport.base import FileDescription
from filectl.transport.resolve import SourceDescriptor, resolve_source
from filectl.utils.identity import is_privileged

logger = logging.getLogger(__name__)

# Source fingerprints are always computed with md5.
SOURCE_CHECKTYPE = "md5"

DEFAULT_BACKUP_SUFFIX = ".puppet-bak"

_INHERITABLE: tuple[StateKind, ...] = (StateKind.MODE, StateKind.OWNER, StateKind.GROUP)


class Source(StateUnit):
    """Content copied from a local path or a remote file server.

    Retrieving describes the source, back-fills mode/owner/group the
    destination did not declare itself, and derives ``is``/``should``
    from the destination's checksum and the source's md5. Syncing
    replaces the destination's content via an aside copy so a failed
    write leaves the original content in place.

    Attributes:
        locator: The locator as assigned.
        descriptor: Transport and server path the locator resolved to.
        description: Last ``describe`` answer, or None before retrieve.
    """

    kind = StateKind.SOURCE
    event = Event.FILE_CHANGED

    def __init__(self, resource: Any) -> None:
        super().__init__(resource)
        self.locator: str | None = None
        self.descriptor: SourceDescriptor | None = None
        self.description: FileDescription | None = None

    def assign(self, value: Any) -> None:
        locator = str(value)
        self.descriptor = resolve_source(locator, self.context)
        self.locator = locator
        self.description = None
        self.is_ = UNKNOWN
        self.should = UNKNOWN
        self._ensure_checksum()

    def retrieve(self) -> None:
        """Describe the source and derive the comparison values.

        Raises:
            TransportError: If the source cannot be described.
        """
        descriptor = self._require_descriptor()
        description = descriptor.transport.describe(descriptor.path)
        self.description = description
        self._inherit_metadata(description)

        if description.type == "file":
            self._retrieve_file(description)
        elif description.type == "directory":
            self._retrieve_directory()
        else:
            logger.error("Cannot use files of type %s as sources", description.type)
            self.is_ = description.type
            self.should = description.type

    def sync(self) -> Event | None:
        if self.is_ is UNKNOWN:
            self.retrieve()
            if self.in_sync():
                return None

        descriptor = self._require_descriptor()
        if self.description is None or self.description.type != "file":
            raise DevError(f"Got told to copy non-file {self.path}")

        params = self.resource.params
        bucket = self.context.filebucket(params.filebucket) if params.filebucket else None
        path = self.path

        old = self._lstat(path)
        exists = old is not None and stat.S_ISREG(old.st_mode)
        if exists and bucket is not None:
            bucket.backup(path)

        content = descriptor.transport.retrieve(descriptor.path)
        if not content:
            logger.info("Source %s is empty", self.locator)

        mode = self._write_mode(old if exists else None)
        aside = path + (params.backup or DEFAULT_BACKUP_SUFFIX)
        if exists and os.path.lexists(aside):
            logger.warning("Deleting stale backup of %s", path)

        try:
            if exists:
                os.replace(path, aside)
            try:
                self._write(path, content, mode)
            except OSError:
                if exists:
                    os.replace(aside, path)
                raise
            if exists:
                self._keep_ownership(path, old)
                os.unlink(aside)
        except OSError as e:
            raise FileIOError(f"Could not copy {self.locator} to {path}: {e}") from e

        self.resource.invalidate_stat()
        self.is_ = self.should
        self._refresh_siblings()
        logger.debug("Copied %s to %s", self.locator, path)
        return Event.FILE_CHANGED

    def _require_descriptor(self) -> SourceDescriptor:
        if self.descriptor is None:
            raise DevError(f"Source of {self.path} was never assigned")
        return self.descriptor

    def _ensure_checksum(self) -> None:
        checksum = self.resource.state(StateKind.CHECKSUM)
        if checksum is None:
            self.resource.apply_state(StateKind.CHECKSUM, SOURCE_CHECKTYPE)
            return
        if getattr(checksum, "checktype", SOURCE_CHECKTYPE) != SOURCE_CHECKTYPE:
            logger.warning(
                "Source checksum type %s is incompatible with checksum type %s of %s; "
                "defaulting to %s for both",
                SOURCE_CHECKTYPE,
                checksum.checktype,  # type: ignore[attr-defined]
                self.path,
                SOURCE_CHECKTYPE,
            )
            checksum.assign(SOURCE_CHECKTYPE)

    def _inherit_metadata(self, description: FileDescription) -> None:
        metadata = description.metadata()
        for kind in _INHERITABLE:
            if kind.value not in metadata or self.resource.is_configured(kind.value):
                continue
            if kind in (StateKind.OWNER, StateKind.GROUP) and not is_privileged():
                continue
            try:
                self.resource.apply_state(kind, metadata[kind.value])
            except (ValidationError, PrivilegeError) as e:
                logger.warning(
                    "Cannot copy %s of %s to %s: %s", kind.value, self.locator, self.path, e
                )

    def _retrieve_file(self, description: FileDescription) -> None:
        existence = self.resource.state(StateKind.CREATE)
        if existence is not None and existence.should != "file":
            logger.info("File %s had both create and source enabled; ignoring create", self.path)
            self.resource.remove_state(StateKind.CREATE)

        self._ensure_checksum()
        checksum = self.resource.state(StateKind.CHECKSUM)
        if checksum is not None:
            checksum.retrieve()
        if checksum is not None and checksum.attached():
            self.is_ = checksum.is_
        else:
            self.is_ = UNKNOWN
        self.should = description.checksum if description.checksum is not None else UNKNOWN

    def _retrieve_directory(self) -> None:
        existence = self.resource.state(StateKind.CREATE)
        if existence is None or existence.should != "directory":
            existence = self.resource.apply_state(StateKind.CREATE, "directory")
            existence.retrieve()
        self.is_ = "directory"
        self.should = "directory"

    def _write_mode(self, old: os.stat_result | None) -> int | None:
        state = self.resource.state(StateKind.MODE)
        if state is not None and is_known(state.should):
            return int(state.should)
        if old is not None:
            return stat.S_IMODE(old.st_mode)
        return None

    @staticmethod
    def _write(path: str, content: bytes, mode: int | None) -> None:
        fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o666)
        with os.fdopen(fd, "wb") as f:
            if mode is not None:
                os.fchmod(f.fileno(), mode)
            f.write(content)

    @staticmethod
    def _keep_ownership(path: str, old: os.stat_result) -> None:
        st = os.lstat(path)
        if (st.st_uid, st.st_gid) == (old.st_uid, old.st_gid) or not is_privileged():
            return
        os.chown(path, old.st_uid, old.st_gid)

    @staticmethod
    def _lstat(path: str) -> os.stat_result | None:
        try:
            return os.lstat(path)
        except FileNotFoundError:
            return None

    def _refresh_siblings(self) -> None:
        """Re-read states whose observed value the new inode may have changed."""
        for kind in (*_INHERITABLE, StateKind.CHECKSUM):
            state = self.resource.state(kind)
            if state is not None:
                state.retrieve()
