"""Symlink resource, produced by linkmaker recursion."""

import os
from typing import Any

from filectl.core.errors import ValidationError
from filectl.models.state import StateKind
from filectl.resources.base import Resource


class SymlinkResource(Resource):
    """A path that should be a symbolic link to a fixed target."""

    kind = "symlink"

    @property
    def target(self) -> str | None:
        state = self.state(StateKind.TARGET)
        return state.should if state is not None else None

    def set(self, name: str, value: Any) -> None:
        if name != StateKind.TARGET.value:
            raise ValidationError(f"Unknown symlink attribute {name!r}")
        self.apply_state(StateKind.TARGET, value)
        self.arguments[name] = value

    def _do_stat(self) -> os.stat_result:
        return os.lstat(self.path)

    def retrieve(self) -> None:
        self.stat(refresh=True)
        for state in self.states:
            state.retrieve()
