"""Owner and group states."""

import logging
import os
from typing import Any

from filectl.core.errors import FileIOError, PrivilegeError, ValidationError
from filectl.models.events import Event
from filectl.models.state import UNKNOWN, StateKind
from filectl.states.base import StateUnit
from filectl.utils.identity import current_group_names, is_privileged, resolve_group, resolve_user

logger = logging.getLogger(__name__)


class _OwnershipState(StateUnit):
    """Shared retrieve/sync for uid and gid states."""

    event = Event.INODE_CHANGED

    def _observed(self, st: os.stat_result) -> int:
        raise NotImplementedError

    def _chown(self, value: int) -> None:
        raise NotImplementedError

    def retrieve(self) -> None:
        st = self.resource.stat(refresh=True)
        self.is_ = self._observed(st) if st is not None else UNKNOWN

    def sync(self) -> Event | None:
        if self.is_ is UNKNOWN:
            self.retrieve()
            if self.in_sync():
                return None

        if self.resource.stat() is None:
            logger.error("File %s does not exist; cannot change %s", self.path, self.kind.value)
            return None

        try:
            self._chown(self.should)
        except OSError as e:
            raise FileIOError(
                f"Failed to change {self.kind.value} of {self.path} to {self.should}: {e}"
            ) from e

        self.resource.invalidate_stat()
        self.is_ = self.should
        return Event.INODE_CHANGED


class Owner(_OwnershipState):
    """Owning user id. Requires an elevated process.

    Without privilege the desired value is discarded, the state removes
    itself, and a single notice is logged for the whole run.
    """

    kind = StateKind.OWNER

    def assign(self, value: Any) -> None:
        if not is_privileged():
            self.is_ = UNKNOWN
            self.should = UNKNOWN
            self.context.notify_once(
                "privilege", "Cannot manage ownership unless running as root"
            )
            self.detach()
            raise PrivilegeError(f"Cannot manage ownership of {self.path} unless running as root")

        try:
            self.should = resolve_user(value)
        except KeyError:
            raise ValidationError(f"User {value} does not exist") from None

    def _observed(self, st: os.stat_result) -> int:
        return st.st_uid

    def _chown(self, value: int) -> None:
        os.chown(self.path, value, -1)


class Group(_OwnershipState):
    """Owning group id.

    Unprivileged processes may only switch to groups they belong to.
    """

    kind = StateKind.GROUP

    def assign(self, value: Any) -> None:
        try:
            gid, name = resolve_group(value)
        except KeyError:
            raise ValidationError(f"Could not find group {value}") from None

        if not is_privileged() and name not in current_group_names():
            raise ValidationError(f"Cannot chgrp {self.path}: not in group {name}")

        self.should = gid

    def _observed(self, st: os.stat_result) -> int:
        return st.st_gid

    def _chown(self, value: int) -> None:
        os.chown(self.path, -1, value)
