"""Common resource behaviour.

A resource is one managed path. It owns an ordered set of state units,
at most one per kind, and lives in a :class:`~filectl.resources.tree.ResourceTree`
which links it to its parent and children by index.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from filectl.core.errors import FileStateError, PrivilegeError, ValidationError
from filectl.models.state import SYNC_ORDER, StateKind
from filectl.states import StateUnit, new_state

if TYPE_CHECKING:
    from filectl.core.context import ReconcileContext
    from filectl.resources.tree import ResourceTree

logger = logging.getLogger(__name__)


class Resource(ABC):
    """Abstract base class for managed paths.

    Attributes:
        tree: Tree the resource belongs to.
        path: Absolute, normalized path.
        index: Position in the tree, assigned when added.
        parent: Index of the parent resource, or None for roots.
        children: Indices of child resources, in discovery order.
        arguments: Explicitly configured attribute values.
        declared: Attribute names given by a top-level declaration. Values
            inherited from a recursing parent never replace them.
        failures: ``(attribute, error)`` pairs not yet reported.
    """

    kind: str = "resource"

    def __init__(self, tree: ResourceTree, path: str) -> None:
        if not os.path.isabs(path):
            raise ValidationError(f"File paths must be fully qualified, not {path!r}")
        self.tree = tree
        self.path = os.path.normpath(path)
        self.index = -1
        self.parent: int | None = None
        self.children: list[int] = []
        self.arguments: dict[str, Any] = {}
        self.declared: set[str] = set()
        self.failures: list[tuple[str, FileStateError]] = []
        self._states: dict[StateKind, StateUnit] = {}
        self._stat: os.stat_result | None = None
        self._stat_loaded = False

    @property
    def context(self) -> ReconcileContext:
        return self.tree.context

    # States

    def state(self, kind: StateKind) -> StateUnit | None:
        return self._states.get(kind)

    @property
    def states(self) -> list[StateUnit]:
        """Attached states in sync order."""
        return [self._states[kind] for kind in SYNC_ORDER if kind in self._states]

    def add_state(self, kind: StateKind) -> StateUnit:
        """Return the state for a kind, creating an unassigned one if needed."""
        state = self._states.get(kind)
        if state is None:
            state = self._states[kind] = new_state(kind, self)
        return state

    def apply_state(self, kind: StateKind, value: Any) -> StateUnit:
        """Assign a desired value, creating the state if needed.

        A state created here is dropped again if the assignment fails.

        Raises:
            FileStateError: If the assignment fails.
        """
        created = kind not in self._states
        state = self.add_state(kind)
        try:
            state.assign(value)
        except FileStateError:
            if created and self._states.get(kind) is state:
                del self._states[kind]
            raise
        return state

    def remove_state(self, kind: StateKind) -> StateUnit | None:
        return self._states.pop(kind, None)

    # Configuration

    def configure(self, arguments: Mapping[str, Any]) -> None:
        """Apply every argument, collecting per-attribute failures."""
        for name, value in self._ordered(arguments):
            try:
                self.set(name, value)
            except PrivilegeError as e:
                # the run-wide privilege notice has already been given
                logger.debug("Cannot set %s of %s: %s", name, self.path, e)
                self.failures.append((name, e))
            except FileStateError as e:
                logger.warning("Cannot set %s of %s: %s", name, self.path, e)
                self.failures.append((name, e))

    def update(self, arguments: Mapping[str, Any]) -> None:
        """Apply only the arguments that differ from the current ones."""
        changed = {k: v for k, v in arguments.items() if self.arguments.get(k, object()) != v}
        if changed:
            self.configure(changed)

    def inherit(self, arguments: Mapping[str, Any]) -> None:
        """Update from a parent's arguments, keeping this resource's own declaration."""
        kept = sorted(name for name in arguments if name in self.declared)
        if kept:
            logger.debug("Keeping declared %s of %s over its parent's", ", ".join(kept), self.path)
        self.update({k: v for k, v in arguments.items() if k not in self.declared})

    def is_configured(self, name: str) -> bool:
        return name in self.arguments

    @abstractmethod
    def set(self, name: str, value: Any) -> None:
        """Set one attribute.

        Raises:
            ValidationError: If the attribute is unknown or the value invalid.
        """

    def _ordered(self, arguments: Mapping[str, Any]) -> list[tuple[str, Any]]:
        return list(arguments.items())

    # Filesystem

    def stat(self, refresh: bool = False) -> os.stat_result | None:
        """Stat the path, caching the answer until refreshed.

        Returns:
            Stat result, or None if the path does not exist.
        """
        if refresh or not self._stat_loaded:
            try:
                self._stat = self._do_stat()
            except FileNotFoundError:
                self._stat = None
            self._stat_loaded = True
        return self._stat

    def _do_stat(self) -> os.stat_result:
        return os.stat(self.path)

    def invalidate_stat(self) -> None:
        self._stat_loaded = False
        self._stat = None

    @property
    def exists(self) -> bool:
        return self.stat() is not None

    # Lifecycle

    @abstractmethod
    def retrieve(self) -> None:
        """Populate every state's observed value (and discover children)."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path}>"
