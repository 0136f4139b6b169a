"""State units.

Each managed attribute of a resource is one state unit. The set of kinds
is closed; :data:`STATE_CLASSES` maps every kind to its implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from filectl.models.state import StateKind
from filectl.states.base import StateUnit
from filectl.states.checksum import Checksum
from filectl.states.existence import Existence
from filectl.states.filetype import FileType
from filectl.states.link import LinkTarget
from filectl.states.mode import Mode
from filectl.states.ownership import Group, Owner
from filectl.states.source import Source

if TYPE_CHECKING:
    from filectl.resources.base import Resource

STATE_CLASSES: dict[StateKind, type[StateUnit]] = {
    StateKind.CREATE: Existence,
    StateKind.CHECKSUM: Checksum,
    StateKind.SOURCE: Source,
    StateKind.OWNER: Owner,
    StateKind.GROUP: Group,
    StateKind.MODE: Mode,
    StateKind.TYPE: FileType,
    StateKind.TARGET: LinkTarget,
}


def new_state(kind: StateKind, resource: Resource) -> StateUnit:
    """Instantiate the state unit for a kind."""
    return STATE_CLASSES[kind](resource)


__all__ = [
    "STATE_CLASSES",
    "Checksum",
    "Existence",
    "FileType",
    "Group",
    "LinkTarget",
    "Mode",
    "Owner",
    "Source",
    "StateUnit",
    "new_state",
]
