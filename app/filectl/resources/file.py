"""File resource: one managed file or directory, with recursion."""

from __future__ import annotations

import logging
import math
import os
import stat
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from filectl.core.errors import DevError, FileStateError, TransportError, ValidationError
from filectl.models.state import UNKNOWN, StateKind
from filectl.resources.base import Resource
from filectl.states.source import DEFAULT_BACKUP_SUFFIX, Source
from filectl.transport.resolve import join_locator, resolve_source

if TYPE_CHECKING:
    from filectl.resources.tree import ResourceTree

logger = logging.getLogger(__name__)

PARAMETERS: tuple[str, ...] = ("backup", "recurse", "filebucket", "linkmaker")

# States are assigned in this order so that later ones can see earlier ones.
ASSIGN_ORDER: tuple[StateKind, ...] = (
    StateKind.CREATE,
    StateKind.CHECKSUM,
    StateKind.MODE,
    StateKind.OWNER,
    StateKind.GROUP,
    StateKind.SOURCE,
)

INFINITE = "infinite"

Depth = int | float


def resolve_depth(value: Any) -> Depth | None:
    """Normalize a ``recurse`` value.

    Returns:
        None for no recursion, a non-negative int for a bounded depth,
        or ``math.inf``.

    Raises:
        ValidationError: If the value is negative or not understood.
    """
    if value is None or value is False or value == "false":
        return None
    if value is True or value == "true":
        return math.inf
    if isinstance(value, float) and math.isinf(value) and value > 0:
        return math.inf
    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"Recurse depth cannot be negative, got {value}")
        return value
    if isinstance(value, str):
        if value.isdigit():
            return int(value)
        if value.startswith("inf"):
            return math.inf
    raise ValidationError(f"Invalid recurse value {value!r}")


def depth_argument(depth: Depth) -> int | str:
    """Render a depth the way it is stored in a child's arguments."""
    return INFINITE if math.isinf(depth) else int(depth)


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("true", "false"):
        return value == "true"
    raise ValidationError(f"Invalid {name} value {value!r}")


@dataclass(slots=True)
class ResourceParams:
    """Non-state parameters of a file resource.

    Attributes:
        backup: Local backup suffix, or None when local backups are off.
        recurse: Remaining recursion depth, None when not recursing.
        filebucket: Name of the bucket receiving backups, if any.
        linkmaker: Materialize non-directory children as symlinks.
    """

    backup: str | None = DEFAULT_BACKUP_SUFFIX
    recurse: Depth | None = None
    filebucket: str | None = None
    linkmaker: bool = False


class FileResource(Resource):
    """A managed file or directory.

    Every file resource carries the read-only type state. The other
    states exist only when configured (or inherited from a source).

    Example:
        >>> resource = tree.declare("/etc/motd", {"mode": "644"})
        >>> resource.retrieve()
    """

    kind = "file"

    def __init__(self, tree: ResourceTree, path: str) -> None:
        super().__init__(tree, path)
        self.params = ResourceParams()
        self.add_state(StateKind.TYPE)

    def set(self, name: str, value: Any) -> None:
        if name in PARAMETERS:
            self._set_param(name, value)
        else:
            try:
                kind = StateKind(name)
            except ValueError:
                raise ValidationError(f"Unknown attribute {name!r}") from None
            if kind is StateKind.TARGET:
                raise ValidationError(f"Unknown attribute {name!r}")
            self.apply_state(kind, value)
        self.arguments[name] = value

    def _set_param(self, name: str, value: Any) -> None:
        if name == "backup":
            self._set_backup(value)
        elif name == "recurse":
            self.params.recurse = resolve_depth(value)
        elif name == "filebucket":
            bucket = str(value)
            if not self.context.has_filebucket(bucket):
                raise ValidationError(f"Could not find filebucket {bucket}")
            self.params.filebucket = bucket
        elif name == "linkmaker":
            self.params.linkmaker = _parse_bool(name, value)

    def _set_backup(self, value: Any) -> None:
        if value is None or value is False or value == "false":
            self.params.backup = None
        elif value is True or value == "true":
            self.params.backup = DEFAULT_BACKUP_SUFFIX
        elif isinstance(value, str) and value.startswith("."):
            self.params.backup = value
        elif isinstance(value, str) and value:
            if not self.context.has_filebucket(value):
                raise ValidationError(f"Could not find filebucket {value}")
            self.params.filebucket = value
            self.params.backup = DEFAULT_BACKUP_SUFFIX
        else:
            raise ValidationError(f"Invalid backup value {value!r}")

    def _ordered(self, arguments: Mapping[str, Any]) -> list[tuple[str, Any]]:
        rank = {name: i for i, name in enumerate(PARAMETERS)}
        rank.update({kind.value: len(PARAMETERS) + i for i, kind in enumerate(ASSIGN_ORDER)})
        return sorted(arguments.items(), key=lambda item: rank.get(item[0], len(rank)))

    # Retrieval

    def retrieve(self) -> None:
        """Describe the source, recurse, then read every state.

        A source that cannot be described is recorded as a failure and
        dropped from the resource for the rest of the run.
        """
        source = self.state(StateKind.SOURCE)
        if source is not None:
            try:
                source.retrieve()
            except TransportError as e:
                logger.error("Cannot retrieve source of %s: %s", self.path, e)
                self.failures.append((StateKind.SOURCE.value, e))
                self.remove_state(StateKind.SOURCE)

        if self.params.recurse is not None:
            self.recurse()

        if self.stat(refresh=True) is None:
            logger.debug("File %s does not exist", self.path)
            for state in self.states:
                # a directory source is satisfied by creating the directory
                if state.kind is StateKind.SOURCE and state.is_ == "directory":
                    continue
                state.is_ = UNKNOWN
            return

        for state in self.states:
            if state.kind is StateKind.SOURCE or not state.attached():
                continue
            state.retrieve()

    # Recursion

    def recurse(self) -> None:
        """Discover children from the local directory and the source."""
        depth = self.params.recurse
        if depth is None:
            return
        if depth == 0:
            logger.debug("Finished recursing at %s", self.path)
            return

        child_depth = depth_argument(depth - 1)
        self._local_recurse(child_depth)
        if self.state(StateKind.SOURCE) is not None:
            self._source_recurse(child_depth)

    def _local_recurse(self, child_depth: int | str) -> None:
        st = self.stat(refresh=True)
        if st is None or not stat.S_ISDIR(st.st_mode):
            return

        try:
            names = sorted(os.listdir(self.path))
        except PermissionError:
            logger.warning("Cannot manage %s: permission denied", self.path)
            return
        except OSError as e:
            logger.warning("Cannot list %s: %s", self.path, e)
            return

        suffix = self.params.backup or DEFAULT_BACKUP_SUFFIX
        for name in names:
            if name.endswith(suffix):
                continue
            self.newchild(name, {"recurse": child_depth})

    def _source_recurse(self, child_depth: int | str) -> None:
        source = self.state(StateKind.SOURCE)
        if not isinstance(source, Source) or source.descriptor is None or source.locator is None:
            return

        descriptor = source.descriptor
        try:
            entries = descriptor.transport.list(descriptor.path, recursive=False)
        except TransportError as e:
            logger.error("Cannot list source of %s: %s", self.path, e)
            self.failures.append((StateKind.SOURCE.value, e))
            return

        for entry in entries:
            if entry.is_self:
                continue
            self.newchild(
                entry.name,
                {"source": join_locator(source.locator, entry.name), "recurse": child_depth},
            )

    def newchild(self, name: str, overrides: Mapping[str, Any] | None = None) -> Resource | None:
        """Create or update the child resource at ``path/name``.

        The child inherits this resource's arguments, with the source
        locator extended by ``name`` and a numeric recursion depth
        decremented, unless ``overrides`` sets them explicitly. An
        override of None removes the argument.

        Returns:
            The child, or None if it could not be managed.

        Raises:
            DevError: If ``name`` is an absolute path.
        """
        if os.path.isabs(name):
            raise DevError(f"Must pass relative paths to newchild(), got {name!r}")

        overrides = dict(overrides or {})
        path = os.path.join(self.path, name)
        arguments = dict(self.arguments)

        if "source" not in overrides and "source" in arguments:
            arguments["source"] = join_locator(str(arguments["source"]), name)
        if "recurse" not in overrides and self.params.recurse is not None:
            depth = self.params.recurse
            arguments["recurse"] = depth_argument(depth - 1 if depth > 0 else 0)

        for key, value in overrides.items():
            if value is None:
                arguments.pop(key, None)
            else:
                arguments[key] = value

        try:
            if self.params.linkmaker and "source" in arguments:
                target = self._link_target(str(arguments["source"]))
                if target is not None:
                    return self.tree.upsert_symlink(self, path, target)
            return self.tree.upsert_child(self, path, arguments)
        except FileStateError as e:
            logger.warning("Cannot manage %s: %s", path, e)
            return None

    def _link_target(self, locator: str) -> str | None:
        """Local path a linkmaker child should point at, or None for directories.

        Raises:
            FileStateError: If the source cannot be resolved or described.
        """
        descriptor = resolve_source(locator, self.context)
        description = descriptor.transport.describe(descriptor.path)
        if description.type == "directory":
            return None
        target = descriptor.local_path
        if target is None:
            raise ValidationError(f"Cannot link to remote source {locator}")
        return target
