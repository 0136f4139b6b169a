"""Link target state, carried by symlink resources only."""

import logging
import os
from typing import Any

from filectl.core.errors import FileIOError, ValidationError
from filectl.models.events import Event
from filectl.models.state import UNKNOWN, StateKind
from filectl.states.base import StateUnit

logger = logging.getLogger(__name__)

# Observed value for a path that exists but is not a symlink.
NOT_A_LINK = "<not a link>"


class LinkTarget(StateUnit):
    """Where a symbolic link points.

    An existing regular file at the path is replaced by the link; an
    existing directory is never replaced.
    """

    kind = StateKind.TARGET
    event = Event.LINK_CREATED

    def assign(self, value: Any) -> None:
        target = str(value)
        if not target:
            raise ValidationError("Link target cannot be empty")
        self.should = target

    def retrieve(self) -> None:
        path = self.path
        if os.path.islink(path):
            self.is_ = os.readlink(path)
        elif os.path.lexists(path):
            self.is_ = NOT_A_LINK
        else:
            self.is_ = UNKNOWN

    def sync(self) -> Event | None:
        path = self.path
        if os.path.isdir(path) and not os.path.islink(path):
            raise FileIOError(f"Refusing to replace directory {path} with a link")

        tmp = f"{path}.filectl-link"
        try:
            if os.path.lexists(tmp):
                os.unlink(tmp)
            os.symlink(self.should, tmp)
            os.replace(tmp, path)
        except OSError as e:
            raise FileIOError(f"Could not link {path} to {self.should}: {e}") from e

        self.resource.invalidate_stat()
        self.is_ = self.should
        logger.debug("Linked %s -> %s", path, self.should)
        return Event.LINK_CREATED
