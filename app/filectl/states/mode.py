"""Mode state: permission bits, with the directory read/execute fix-up."""

import logging
import os
import stat
from typing import Any

from filectl.core.errors import FileIOError, ValidationError
from filectl.models.events import Event
from filectl.models.state import UNKNOWN, Marker, StateKind, is_known
from filectl.states.base import StateUnit

logger = logging.getLogger(__name__)

# (read bit, execute bit) for owner, group and other
_READ_EXECUTE_PAIRS: tuple[tuple[int, int], ...] = (
    (0o400, 0o100),
    (0o040, 0o010),
    (0o004, 0o001),
)


def parse_mode(value: Any) -> int:
    """Normalize a mode to an integer.

    Integers are taken as already-converted values. Strings are read as
    octal; a missing leading zero is added first, so "644" means 0o644.

    Raises:
        ValidationError: If the value is not a valid permission mode.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid mode {value!r}")
    if isinstance(value, int):
        mode = value
    else:
        text = str(value).strip()
        if not text.startswith("0"):
            text = "0" + text
        try:
            mode = int(text, 8)
        except ValueError:
            raise ValidationError(f"Invalid mode {value!r}") from None
    if not 0 <= mode <= 0o7777:
        raise ValidationError(f"Mode {value!r} is out of range")
    return mode


def directory_mode(mode: int) -> int:
    """Set each execute bit whose paired read bit is set."""
    for read, execute in _READ_EXECUTE_PAIRS:
        if mode & read:
            mode |= execute
    return mode


class Mode(StateUnit):
    """Exact permission bits of the entry.

    On a directory, readable implies searchable: the fix-up is applied
    once per assignment, as soon as the target is known to exist.
    """

    kind = StateKind.MODE
    event = Event.INODE_CHANGED

    def __init__(self, resource: Any) -> None:
        super().__init__(resource)
        self._fixed = False

    def assign(self, value: Any) -> None:
        self.should = parse_mode(value)
        self._fixed = False
        if self.resource.stat(refresh=True) is not None:
            self._dirfix()

    def retrieve(self) -> None:
        st = self.resource.stat(refresh=True)
        if st is None:
            self.is_ = UNKNOWN
            return
        self.is_ = stat.S_IMODE(st.st_mode)
        if not self._fixed and is_known(self.should):
            self._dirfix()

    def sync(self) -> Event | None:
        if self.is_ is UNKNOWN:
            self.retrieve()
            if self.in_sync():
                return None

        if self.resource.stat() is None:
            logger.error("File %s does not exist; cannot chmod", self.path)
            return None

        if not self._fixed:
            self._dirfix()

        try:
            os.chmod(self.path, self.should)
        except OSError as e:
            raise FileIOError(f"Failed to chmod {self.path}: {e}") from e

        self.resource.invalidate_stat()
        self.is_ = self.should
        return Event.INODE_CHANGED

    def format_value(self, value: Any) -> str:
        if isinstance(value, Marker):
            return value.value
        return f"{value:o}"

    def _dirfix(self) -> None:
        st = self.resource.stat()
        if st is not None and stat.S_ISDIR(st.st_mode):
            self.should = directory_mode(self.should)
        self._fixed = True
