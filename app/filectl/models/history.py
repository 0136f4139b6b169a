"""Records kept in the run history.

A :class:`RunRecord` is written for every ``filectl apply`` that emitted
an event or hit a failure. Dry runs and runs where everything was
already in sync leave no trace.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from filectl.models.events import Event, RunReport


@dataclass(frozen=True, slots=True)
class EventItem:
    """One event and the path it happened to."""

    path: str
    event: Event

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Event path cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "event": self.event.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventItem:
        """Rebuild an item; an unknown event name raises ValueError."""
        return cls(path=data["path"], event=Event(data["event"]))


@dataclass(frozen=True, slots=True)
class RunRecord:
    """Outcome of one reconciliation run.

    Attributes:
        id: Random 12-digit hex identifier.
        timestamp: ISO 8601 time the run finished, in UTC.
        items: Events in the order they were emitted.
        failures: States that could not be converged.
        metadata: Free-form context such as the manifest path.
    """

    id: str
    timestamp: str
    items: tuple[EventItem, ...]
    failures: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        problems = [
            "Run record ID cannot be empty" if not self.id else "",
            "Timestamp cannot be empty" if not self.timestamp else "",
            f"Failure count cannot be negative, got {self.failures}" if self.failures < 0 else "",
        ]
        problem = next((p for p in problems if p), None)
        if problem is not None:
            raise ValueError(problem)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunRecord:
        """Rebuild a record from :meth:`to_dict` output.

        ``failures`` and ``metadata`` are optional so records written
        before they existed still load.

        Raises:
            KeyError: ``id``, ``timestamp`` or ``items`` is missing.
            ValueError: A field holds an invalid value.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            items=tuple(map(EventItem.from_dict, data["items"])),
            failures=data.get("failures", 0),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Compact single-line JSON, without the newline."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> RunRecord:
        return cls.from_dict(json.loads(line))


def create_run_record(report: RunReport, metadata: dict[str, Any] | None = None) -> RunRecord:
    """Summarize a finished run.

    Only successful results that emitted an event become items; failed
    results are counted.
    """
    items = tuple(
        EventItem(path=result.path, event=result.event)
        for result in report.results
        if result.success and result.event is not None
    )
    return RunRecord(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        items=items,
        failures=len(report.failures),
        metadata=dict(metadata or {}),
    )
