"""Reconciliation driver.

Runs the retrieve -> compare -> sync cycle for each resource of a tree
and collects the outcome of every state into a :class:`RunReport`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filectl.core.checksums import ChecksumStore
from filectl.core.context import ClientFactory, ReconcileContext
from filectl.core.errors import FileStateError
from filectl.core.paths import get_checksum_store_path
from filectl.models.events import RunReport, StateResult
from filectl.models.manifest import Manifest
from filectl.models.state import SYNC_ORDER, StateKind
from filectl.resources.base import Resource
from filectl.resources.builder import build_tree
from filectl.resources.tree import ResourceTree
from filectl.states.base import StateUnit

logger = logging.getLogger(__name__)


def _state_kind(name: str) -> StateKind | None:
    try:
        return StateKind(name)
    except ValueError:
        return None


class Reconciler:
    """Converge resources toward their desired state.

    Each resource runs to completion before the next one starts. Errors
    are scoped to the state (or resource) that raised them: they become
    failed results and reconciliation continues with the rest.

    Attributes:
        dry_run: Retrieve and compare only; never sync.

    Example:
        >>> with ReconcileContext(ChecksumStore(path)) as context:
        ...     tree = ResourceTree(context)
        ...     tree.declare("/tmp/a", {"create": "file", "mode": "644"})
        ...     report = Reconciler().reconcile_tree(tree)
        >>> report.events
        [<Event.FILE_CREATED: 'file_created'>]
    """

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def reconcile_tree(self, tree: ResourceTree) -> RunReport:
        """Reconcile every resource, parents before their children.

        Children discovered while retrieving a parent are reconciled in
        the same pass.
        """
        report = RunReport()
        visited: set[int] = set()
        for root in tree.roots():
            if root.parent is not None:
                # adopted by a resource reconciled earlier
                continue
            self._walk(tree, root, report, visited)
        return report

    def _walk(
        self, tree: ResourceTree, resource: Resource, report: RunReport, visited: set[int]
    ) -> None:
        if resource.index in visited:
            return
        visited.add(resource.index)
        report.extend(self.reconcile(resource))

        i = 0
        while i < len(resource.children):
            self._walk(tree, tree[resource.children[i]], report, visited)
            i += 1

    def reconcile(self, resource: Resource) -> list[StateResult]:
        """Retrieve one resource and sync every out-of-sync state.

        Returns:
            Results in sync order, preceded by any attribute failures
            collected since the last reconcile.
        """
        results = self._drain_failures(resource)

        try:
            resource.retrieve()
        except FileStateError as e:
            logger.error("Failed to retrieve %s: %s", resource.path, e)
            results.append(StateResult(path=resource.path, kind=None, success=False, error=str(e)))
            return results
        results.extend(self._drain_failures(resource))

        for kind in SYNC_ORDER:
            # looked up fresh: earlier syncs may have removed states
            state = resource.state(kind)
            if state is None or state.in_sync():
                continue

            if self.dry_run:
                results.append(
                    StateResult(
                        path=resource.path,
                        kind=kind,
                        success=True,
                        message=state.describe_change(),
                        dry_run=True,
                    )
                )
                continue

            results.append(self._sync(resource, state))

        return results

    def _sync(self, resource: Resource, state: StateUnit) -> StateResult:
        kind = state.kind
        change = state.describe_change()
        try:
            event = state.sync()
        except FileStateError as e:
            logger.error("Failed to sync %s of %s: %s", kind.value, resource.path, e)
            return StateResult(path=resource.path, kind=kind, success=False, error=str(e))

        if event is not None:
            logger.info("%s: %s (%s)", resource.path, event.value, change)
        return StateResult(path=resource.path, kind=kind, success=True, event=event, message=change)

    @staticmethod
    def _drain_failures(resource: Resource) -> list[StateResult]:
        results = [
            StateResult(
                path=resource.path,
                kind=_state_kind(name),
                success=False,
                error=str(error),
            )
            for name, error in resource.failures
        ]
        resource.failures.clear()
        return results


def reconcile_manifest(
    manifest: Manifest,
    *,
    dry_run: bool = False,
    store_path: Path | None = None,
    client_factory: ClientFactory | None = None,
) -> RunReport:
    """Reconcile every file a manifest declares in one run.

    The checksum store is loaded before the first retrieve and flushed
    after the last sync.

    Args:
        manifest: Validated manifest.
        dry_run: Compare only; never touch the filesystem.
        store_path: Checksum store file. Defaults to the state directory.
        client_factory: Builds clients for remote sources.

    Raises:
        FileIOError: If the checksum store cannot be written.
    """
    store = ChecksumStore(store_path if store_path is not None else get_checksum_store_path())
    with ReconcileContext(store, client_factory=client_factory) as context:
        tree = build_tree(manifest, context)
        return Reconciler(dry_run=dry_run).reconcile_tree(tree)
