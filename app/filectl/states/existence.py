"""Existence state: create a file or directory, or roll a creation back."""

import logging
import os
from typing import Any

from filectl.core.errors import FileIOError, IntegrityError, ValidationError
from filectl.models.events import Event
from filectl.models.state import ROLLBACK, UNKNOWN, StateKind, is_known
from filectl.states.base import StateUnit
from filectl.states.mode import directory_mode
from filectl.utils.files import entry_kind

logger = logging.getLogger(__name__)

FILE = "file"
DIRECTORY = "directory"


def normalize_create(value: Any) -> str | None:
    """Map a ``create`` value to "file", "directory", ROLLBACK or None.

    None means existence is not managed.

    Raises:
        ValidationError: If the value names no supported kind.
    """
    if value is None or value is False or value == "false":
        return None
    if value is ROLLBACK or value == -1 or value == "-1":
        return ROLLBACK  # type: ignore[return-value]
    if value is True or value == "true":
        return FILE
    if isinstance(value, str):
        if value == "plain" or value.startswith("f"):
            return FILE
        if value.startswith("d"):
            return DIRECTORY
    raise ValidationError(f"Cannot create files of type {value}")


class Existence(StateUnit):
    """Whether the entry should exist, and as what.

    When a Mode state is pending at creation time its desired value is
    applied while creating, and the Mode state is removed as satisfied.
    """

    kind = StateKind.CREATE
    event = Event.FILE_CREATED

    def assign(self, value: Any) -> None:
        self.should = normalize_create(value)

    def retrieve(self) -> None:
        st = self.resource.stat(refresh=True)
        self.is_ = entry_kind(st) if st is not None else UNKNOWN

    def in_sync(self) -> bool:
        if self.should is None or self.should is UNKNOWN:
            return True
        if self.should is ROLLBACK:
            return self.is_ is UNKNOWN
        return self.is_ == self.should

    def sync(self) -> Event | None:
        if self.should is ROLLBACK:
            self._rollback()
            return None

        mode = self._pending_mode()
        path = self.path
        try:
            if self.should == FILE:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o666)
                try:
                    if mode is not None:
                        os.fchmod(fd, mode)
                finally:
                    os.close(fd)
                event = Event.FILE_CREATED
            elif self.should == DIRECTORY:
                os.mkdir(path)
                if mode is not None:
                    os.chmod(path, directory_mode(mode))
                event = Event.DIRECTORY_CREATED
            else:
                raise ValidationError(f"Somehow got told to create a {self.should} file")
        except OSError as e:
            raise FileIOError(f"Could not create {self.should} {path}: {e}") from e

        if mode is not None:
            self.resource.remove_state(StateKind.MODE)
        self.resource.invalidate_stat()
        self.is_ = self.should
        logger.debug("Created %s %s", self.should, path)
        return event

    def _pending_mode(self) -> int | None:
        state = self.resource.state(StateKind.MODE)
        if state is None or not is_known(state.should) or state.in_sync():
            return None
        return int(state.should)

    def _rollback(self) -> None:
        path = self.path
        try:
            size = os.path.getsize(path)
        except FileNotFoundError:
            self.is_ = UNKNOWN
            return
        except OSError as e:
            raise FileIOError(f"Could not roll back {path}: {e}") from e

        if size != 0:
            raise IntegrityError(f"Created file {path} has since been modified; cannot roll back")

        try:
            os.unlink(path)
        except OSError as e:
            raise FileIOError(f"Could not roll back {path}: {e}") from e
        self.resource.invalidate_stat()
        self.is_ = UNKNOWN
        logger.info("Rolled back creation of %s", path)
