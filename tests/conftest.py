"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from filectl.core.checksums import ChecksumStore
from filectl.core.context import ReconcileContext
from filectl.core.reconciler import Reconciler
from filectl.resources.tree import ResourceTree


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config/state homes into the test's temporary directory."""
    home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / "state"))
    return home


@pytest.fixture
def context() -> ReconcileContext:
    """Run context with an in-memory checksum store."""
    return ReconcileContext(ChecksumStore())


@pytest.fixture
def tree(context: ReconcileContext) -> ResourceTree:
    """Empty resource tree bound to the shared context."""
    return ResourceTree(context)


@pytest.fixture
def reconciler() -> Reconciler:
    return Reconciler()


@pytest.fixture
def unprivileged() -> Iterator[None]:
    """Behave as an ordinary user regardless of who runs the tests."""
    with (
        patch("filectl.states.ownership.is_privileged", return_value=False),
        patch("filectl.states.source.is_privileged", return_value=False),
    ):
        yield


@pytest.fixture
def privileged() -> Iterator[None]:
    """Behave as root without actually being root."""
    with (
        patch("filectl.states.ownership.is_privileged", return_value=True),
        patch("filectl.states.source.is_privileged", return_value=True),
    ):
        yield


@pytest.fixture
def src_tree(tmp_path: Path) -> Path:
    """Small source tree::

    src/
      top.txt        "top"
      sub/
        mid.txt      "mid"
        deeper/
          low.txt    "low"
    """
    src = tmp_path / "src"
    (src / "sub" / "deeper").mkdir(parents=True)
    (src / "top.txt").write_text("top")
    (src / "sub" / "mid.txt").write_text("mid")
    (src / "sub" / "deeper" / "low.txt").write_text("low")
    return src
