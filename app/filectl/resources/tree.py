"""Resource tree: a path-keyed arena of resources.

Parent/child links are indices into the arena, never object references,
so a resource can be found by path in O(1) and children discovered in the
middle of a run are simply appended.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from filectl.core.errors import ValidationError
from filectl.models.state import StateKind
from filectl.resources.base import Resource
from filectl.resources.file import FileResource
from filectl.resources.symlink import SymlinkResource

if TYPE_CHECKING:
    from filectl.core.context import ReconcileContext

logger = logging.getLogger(__name__)


class ResourceTree:
    """All resources of one run.

    Attributes:
        context: Run context shared by every resource.

    Example:
        >>> tree = ResourceTree(context)
        >>> tree.declare("/srv/www", {"source": "/opt/site", "recurse": True})
        >>> tree.find("/srv/www").children
        []
    """

    def __init__(self, context: ReconcileContext) -> None:
        self.context = context
        self._resources: list[Resource] = []
        self._by_path: dict[str, int] = {}

    def declare(self, path: str, arguments: Mapping[str, Any] | None = None) -> FileResource:
        """Declare a top-level file resource, or update an existing one.

        Attribute errors are collected on the resource, not raised.

        Raises:
            ValidationError: If the path is not absolute, or already
                managed as something other than a file.
        """
        existing = self.find(path)
        if existing is not None:
            if not isinstance(existing, FileResource):
                raise ValidationError(f"{path} is already managed as a {existing.kind}")
            existing.update(arguments or {})
            existing.declared.update(arguments or {})
            return existing

        resource = FileResource(self, path)
        self._add(resource)
        resource.declared = set(arguments or {})
        resource.configure(arguments or {})
        return resource

    def find(self, path: str) -> Resource | None:
        index = self._by_path.get(os.path.normpath(path))
        return self._resources[index] if index is not None else None

    def __getitem__(self, index: int) -> Resource:
        return self._resources[index]

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def roots(self) -> list[Resource]:
        """Resources without a parent, in declaration order."""
        return [r for r in self._resources if r.parent is None]

    def parent_of(self, resource: Resource) -> Resource | None:
        return self._resources[resource.parent] if resource.parent is not None else None

    def children_of(self, resource: Resource) -> list[Resource]:
        return [self._resources[i] for i in resource.children]

    def upsert_child(
        self, parent: Resource, path: str, arguments: Mapping[str, Any]
    ) -> Resource | None:
        """Create a child file resource, or update the one already at ``path``.

        An existing resource keeps the attributes it was declared with;
        only the rest are taken from ``arguments``.

        Returns:
            The child, or None if the path belongs to another parent.

        Raises:
            ValidationError: If the child path is invalid.
        """
        existing = self._claim(parent, path)
        if existing is not None:
            if existing is parent:
                return None
            existing.inherit(arguments)
            return existing
        if self.find(path) is not None:
            return None

        child = FileResource(self, path)
        self._add(child)
        self._attach(parent, child)
        child.configure(arguments)
        return child

    def upsert_symlink(self, parent: Resource, path: str, target: str) -> Resource | None:
        """Create a symlink child, or retarget the one already at ``path``."""
        existing = self._claim(parent, path)
        if existing is not None:
            if existing is parent:
                return None
            if not isinstance(existing, SymlinkResource):
                logger.warning("%s is managed as a %s, not relinking it", path, existing.kind)
                return existing
            existing.inherit({StateKind.TARGET.value: target})
            return existing
        if self.find(path) is not None:
            return None

        child = SymlinkResource(self, path)
        self._add(child)
        self._attach(parent, child)
        child.configure({StateKind.TARGET.value: target})
        return child

    def _claim(self, parent: Resource, path: str) -> Resource | None:
        """Attach an already-managed resource at ``path`` under ``parent``.

        Returns:
            The existing resource if it may be adopted (or the parent itself
            when ``path`` names it), None if there is none or it is taken.
        """
        existing = self.find(path)
        if existing is None:
            return None
        if existing is parent:
            return existing
        if existing.parent is not None and existing.parent != parent.index:
            logger.warning(
                "%s is already managed under %s", path, self._resources[existing.parent].path
            )
            return None
        self._attach(parent, existing)
        return existing

    def _add(self, resource: Resource) -> int:
        if resource.path in self._by_path:
            raise ValidationError(f"{resource.path} is already managed")
        resource.index = len(self._resources)
        self._resources.append(resource)
        self._by_path[resource.path] = resource.index
        return resource.index

    def _attach(self, parent: Resource, child: Resource) -> None:
        child.parent = parent.index
        if child.index not in parent.children:
            parent.children.append(child.index)
