"""State kinds and sentinel values shared by all state units.

Each attribute of a managed file holds an observed (``is``) and a desired
(``should``) value. Besides a concrete value, either side may hold one of
the explicit markers defined here instead of an overloaded magic number.
"""

from enum import Enum


class StateKind(str, Enum):
    """Closed set of attribute kinds a file resource can manage.

    Attributes:
        CREATE: Existence of the entry (file or directory).
        CHECKSUM: Content fingerprint tracked across runs.
        SOURCE: Content copied from another file tree.
        OWNER: Owning user id.
        GROUP: Owning group id.
        MODE: Permission bits.
        TYPE: Read-only observed entry kind.
        TARGET: Link target; only symlink resources carry it.
    """

    CREATE = "create"
    CHECKSUM = "checksum"
    SOURCE = "source"
    OWNER = "owner"
    GROUP = "group"
    MODE = "mode"
    TYPE = "type"
    TARGET = "target"


# Inode must exist before anything else; checksum is recorded after content
# may have been replaced by the source copy.
SYNC_ORDER: tuple[StateKind, ...] = (
    StateKind.CREATE,
    StateKind.SOURCE,
    StateKind.OWNER,
    StateKind.GROUP,
    StateKind.MODE,
    StateKind.CHECKSUM,
    StateKind.TARGET,
    StateKind.TYPE,
)


class Marker(Enum):
    """Non-value markers for ``is``/``should``.

    Attributes:
        UNKNOWN: Not retrieved yet, or the path does not exist.
        ROLLBACK: Desired existence is "remove what was created".
    """

    UNKNOWN = "unknown"
    ROLLBACK = "rollback"

    def __repr__(self) -> str:
        return f"<{self.name}>"


UNKNOWN = Marker.UNKNOWN
ROLLBACK = Marker.ROLLBACK


def is_known(value: object) -> bool:
    """Check whether a value is a concrete value rather than a marker."""
    return not isinstance(value, Marker)
