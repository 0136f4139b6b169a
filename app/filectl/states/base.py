"""Abstract base class for state units.

A state unit is the comparator and converger for one attribute of one
resource. All kinds share the same four-operation interface:

- ``assign(value)``: validate and store the desired (``should``) value.
- ``retrieve()``: read the observed (``is``) value from the system.
- ``in_sync()``: compare the two, honouring the UNKNOWN/ROLLBACK markers.
- ``sync()``: apply the transition and return the emitted event, if any.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from filectl.models.events import Event
from filectl.models.state import UNKNOWN, Marker, StateKind, is_known

if TYPE_CHECKING:
    from filectl.core.context import ReconcileContext
    from filectl.resources.base import Resource


class StateUnit(ABC):
    """Abstract base class for all state units.

    A state is only meaningful while attached to its owning resource.
    Removing itself from the resource is a valid convergence outcome
    (e.g. a checksum on a directory).

    Attributes:
        resource: Resource owning this state.
        is_: Observed value, or UNKNOWN if not retrieved / path absent.
        should: Desired value, or a marker.

    Example:
        >>> mode = resource.apply_state(StateKind.MODE, "644")
        >>> mode.retrieve()
        >>> if not mode.in_sync():
        ...     event = mode.sync()
    """

    kind: ClassVar[StateKind]
    event: ClassVar[Event | None] = None

    def __init__(self, resource: Resource) -> None:
        self.resource = resource
        self.is_: Any = UNKNOWN
        self.should: Any = UNKNOWN

    @property
    def path(self) -> str:
        return self.resource.path

    @property
    def context(self) -> ReconcileContext:
        return self.resource.context

    @abstractmethod
    def assign(self, value: Any) -> None:
        """Validate, normalize and store a desired value.

        Raises:
            ValidationError: If the value is malformed.
        """

    @abstractmethod
    def retrieve(self) -> None:
        """Read the current system state into ``is_``."""

    @abstractmethod
    def sync(self) -> Event | None:
        """Converge the system toward ``should``.

        Must be safe to call again once ``is_`` equals ``should``.

        Returns:
            Event emitted by the transition, or None.

        Raises:
            FileStateError: If the transition fails.
        """

    def in_sync(self) -> bool:
        """Check whether observed and desired values agree.

        A value that was never retrieved is never in sync.
        """
        if not is_known(self.is_) or not is_known(self.should):
            return False
        return bool(self.is_ == self.should)

    def attached(self) -> bool:
        """Check whether this state still belongs to its resource."""
        return self.resource.state(self.kind) is self

    def detach(self) -> None:
        """Remove this state from its resource."""
        if self.attached():
            self.resource.remove_state(self.kind)

    def format_value(self, value: Any) -> str:
        """Render an ``is``/``should`` value for humans."""
        if isinstance(value, Marker):
            return value.value
        return str(value)

    def describe_change(self) -> str:
        """One-line ``is -> should`` summary."""
        return f"{self.format_value(self.is_)} -> {self.format_value(self.should)}"

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.path} "
            f"is={self.format_value(self.is_)} should={self.format_value(self.should)}>"
        )
