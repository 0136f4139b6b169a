"""Checksum state: detect content drift between runs."""

import logging
import stat
from typing import Any

from filectl.core.errors import ValidationError
from filectl.models.events import Event
from filectl.models.state import UNKNOWN, StateKind
from filectl.states.base import StateUnit
from filectl.utils.files import EMPTY_CHECKSUM, compute_checksum, normalize_checktype

logger = logging.getLogger(__name__)

DEFAULT_CHECKTYPE = "md5"


class Checksum(StateUnit):
    """Fingerprint of a regular file's content.

    ``should`` is always the value last recorded in the checksum store, so
    a mismatch means the content changed since the previous run. Syncing
    records the current value; the first sighting emits no event.

    Directories (and unreadable files) cannot be fingerprinted: the state
    removes itself from the resource when it meets one.
    """

    kind = StateKind.CHECKSUM
    event = Event.FILE_MODIFIED

    def __init__(self, resource: Any) -> None:
        super().__init__(resource)
        self.checktype = DEFAULT_CHECKTYPE

    def assign(self, value: Any) -> None:
        if value is True or value is None:
            value = DEFAULT_CHECKTYPE
        try:
            self.checktype = normalize_checktype(str(value))
        except ValueError as e:
            raise ValidationError(str(e)) from None
        self._load_should()

    def retrieve(self) -> None:
        self._load_should()

        st = self.resource.stat(refresh=True)
        if st is None:
            self.is_ = UNKNOWN
            return

        if stat.S_ISDIR(st.st_mode):
            logger.debug("Cannot checksum directory %s", self.path)
            self.detach()
            return

        try:
            self.is_ = compute_checksum(self.path, self.checktype)
        except PermissionError:
            logger.warning("Cannot checksum %s: permission denied", self.path)
            self.detach()
            return
        except OSError as e:
            logger.warning("Cannot checksum %s: %s", self.path, e)
            self.detach()
            return

        if self.is_ == EMPTY_CHECKSUM:
            logger.debug("Not checksumming empty file %s", self.path)

    def sync(self) -> Event | None:
        if self.is_ is UNKNOWN:
            self.retrieve()
            if not self.attached():
                return None
            if self.is_ is UNKNOWN:
                if self.resource.state(StateKind.SOURCE) is None and (
                    self.resource.state(StateKind.CREATE) is None
                ):
                    logger.warning("File %s does not exist; cannot checksum", self.path)
                return None
            if self.in_sync():
                return None

        previous = self.context.checksums.set(self.path, self.checktype, self.is_)
        self.should = self.is_
        if previous is not None and previous != self.is_:
            logger.debug("%s changed: %s -> %s", self.path, previous, self.is_)
            return Event.FILE_MODIFIED
        return None

    def _load_should(self) -> None:
        stored = self.context.checksums.get(self.path, self.checktype)
        self.should = stored if stored is not None else UNKNOWN
