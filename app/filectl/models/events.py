"""Event and result models for reconciliation runs.

This module defines the events emitted on successful state transitions
and the immutable results collected by the reconciler.
"""

from dataclasses import dataclass, field
from enum import Enum

from filectl.models.state import StateKind


class Event(str, Enum):
    """Event emitted when a state converges.

    Attributes:
        FILE_CREATED: An empty file was created.
        DIRECTORY_CREATED: A directory was created.
        FILE_MODIFIED: Stored checksum differed from the current content.
        INODE_CHANGED: Ownership or permissions were changed.
        FILE_CHANGED: Content was replaced from a source.
        LINK_CREATED: A symbolic link was created or retargeted.
    """

    FILE_CREATED = "file_created"
    DIRECTORY_CREATED = "directory_created"
    FILE_MODIFIED = "file_modified"
    INODE_CHANGED = "inode_changed"
    FILE_CHANGED = "file_changed"
    LINK_CREATED = "link_created"


@dataclass(frozen=True, slots=True)
class StateResult:
    """Outcome of converging (or failing to converge) one state.

    Attributes:
        path: Path of the resource the state belongs to.
        kind: Kind of the state, or None for resource-level failures.
        success: Whether the state converged without error.
        event: Event emitted by the transition, if any.
        message: Optional human-readable detail.
        error: Error message if the state failed.
        dry_run: Whether the sync was only simulated.
    """

    path: str
    kind: StateKind | None
    success: bool
    event: Event | None = None
    message: str | None = None
    error: str | None = None
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        """Check if the state failed."""
        return not self.success


@dataclass(slots=True)
class RunReport:
    """Results collected over one reconciliation run, in sync order."""

    results: list[StateResult] = field(default_factory=lambda: [])

    def extend(self, results: list[StateResult]) -> None:
        self.results.extend(results)

    @property
    def events(self) -> list[Event]:
        """Events emitted by successful transitions, in order."""
        return [r.event for r in self.results if r.success and r.event is not None]

    @property
    def failures(self) -> list[StateResult]:
        return [r for r in self.results if r.failed]

    @property
    def changed_paths(self) -> list[str]:
        """Paths that emitted at least one event, without duplicates."""
        seen: dict[str, None] = {}
        for result in self.results:
            if result.success and result.event is not None:
                seen.setdefault(result.path, None)
        return list(seen)
