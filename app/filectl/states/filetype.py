"""Read-only type state."""

from typing import Any, NoReturn

from filectl.core.errors import DevError, ValidationError
from filectl.models.state import UNKNOWN, StateKind
from filectl.states.base import StateUnit
from filectl.utils.files import entry_kind


class FileType(StateUnit):
    """Observed kind of the entry. Reported, never changed."""

    kind = StateKind.TYPE

    def assign(self, value: Any) -> NoReturn:
        raise ValidationError("type is read-only")

    def retrieve(self) -> None:
        st = self.resource.stat(refresh=True)
        self.is_ = entry_kind(st) if st is not None else UNKNOWN
        self.should = self.is_

    def in_sync(self) -> bool:
        return True

    def sync(self) -> NoReturn:
        raise DevError("Got told to sync read-only type state")
