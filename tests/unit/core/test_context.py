"""Unit tests for the reconciliation context."""

import logging
from pathlib import Path

import pytest
from filectl.core.checksums import ChecksumStore
from filectl.core.context import ReconcileContext
from filectl.core.errors import ValidationError
from filectl.core.filebucket import LocalFilebucket


class TestReconcileContext:
    """Tests for the run-scoped context."""

    def test_notify_once(self, caplog: pytest.LogCaptureFixture) -> None:
        """A notice keyed once is logged once per context."""
        context = ReconcileContext()

        with caplog.at_level(logging.WARNING):
            assert context.notify_once("privilege", "not root")
            assert not context.notify_once("privilege", "not root")

        assert caplog.text.count("not root") == 1
        assert context.notified("privilege")

    def test_notices_are_per_context(self) -> None:
        first = ReconcileContext()
        first.notify_once("privilege", "not root")

        assert not ReconcileContext().notified("privilege")

    def test_filebucket_lookup(self, tmp_path: Path) -> None:
        bucket = LocalFilebucket(tmp_path)
        context = ReconcileContext(filebuckets={"main": bucket})

        assert context.has_filebucket("main")
        assert context.filebucket("main") is bucket

    def test_unknown_filebucket(self) -> None:
        with pytest.raises(ValidationError, match="Could not find filebucket other"):
            ReconcileContext().filebucket("other")

    def test_context_manager_loads_and_flushes(self, tmp_path: Path) -> None:
        """Entering loads the store; leaving writes it."""
        path = tmp_path / "checksums.json"
        path.write_text('{"/a": {"md5": "old"}}')

        with ReconcileContext(ChecksumStore(path)) as context:
            assert context.checksums.get("/a", "md5") == "old"
            context.checksums.set("/a", "md5", "new")

        reloaded = ChecksumStore(path)
        reloaded.load()
        assert reloaded.get("/a", "md5") == "new"
