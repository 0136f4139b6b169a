"""Unit tests for run record models.

Tests for the RunRecord and EventItem data structures.
"""

import json

import pytest
from filectl.models.events import Event, RunReport, StateResult
from filectl.models.history import EventItem, RunRecord, create_run_record
from filectl.models.state import StateKind


class TestEventItem:
    """Tests for EventItem dataclass."""

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(ValueError, match="path cannot be empty"):
            EventItem(path="", event=Event.FILE_CREATED)

    def test_dict_round_trip(self) -> None:
        item = EventItem(path="/etc/motd", event=Event.INODE_CHANGED)

        assert item.to_dict() == {"path": "/etc/motd", "event": "inode_changed"}
        assert EventItem.from_dict(item.to_dict()) == item

    def test_unknown_event_rejected(self) -> None:
        with pytest.raises(ValueError):
            EventItem.from_dict({"path": "/a", "event": "exploded"})


class TestRunRecord:
    """Tests for RunRecord dataclass."""

    def test_validation(self) -> None:
        """ID, timestamp and failure count are checked."""
        with pytest.raises(ValueError, match="ID cannot be empty"):
            RunRecord(id="", timestamp="t", items=())
        with pytest.raises(ValueError, match="Timestamp cannot be empty"):
            RunRecord(id="a", timestamp="", items=())
        with pytest.raises(ValueError, match="cannot be negative"):
            RunRecord(id="a", timestamp="t", items=(), failures=-1)

    def test_json_line_is_compact(self) -> None:
        record = RunRecord(
            id="abc",
            timestamp="2026-01-01T00:00:00+00:00",
            items=(EventItem(path="/a", event=Event.FILE_CHANGED),),
            failures=1,
            metadata={"command": "apply"},
        )

        line = record.to_json_line()

        assert "\n" not in line
        assert json.loads(line)["items"] == [{"path": "/a", "event": "file_changed"}]
        assert RunRecord.from_json_line(line) == record

    def test_from_dict_defaults(self) -> None:
        """Optional fields fall back to their defaults."""
        record = RunRecord.from_dict({"id": "a", "timestamp": "t", "items": []})

        assert record.failures == 0
        assert record.metadata == {}


class TestCreateRunRecord:
    """Tests for create_run_record factory."""

    def test_collects_events_and_failures(self) -> None:
        report = RunReport(
            [
                StateResult(
                    path="/a", kind=StateKind.CREATE, success=True, event=Event.FILE_CREATED
                ),
                StateResult(path="/a", kind=StateKind.CHECKSUM, success=True),
                StateResult(path="/b", kind=StateKind.MODE, success=False, error="boom"),
            ]
        )

        record = create_run_record(report, metadata={"command": "apply"})

        assert record.items == (EventItem(path="/a", event=Event.FILE_CREATED),)
        assert record.failures == 1
        assert record.metadata == {"command": "apply"}
        assert len(record.id) == 12
        assert record.timestamp
