"""Unit tests for configuration and state locations."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from filectl.core.paths import (
    APP_NAME,
    ensure_state_dir,
    get_checksum_store_path,
    get_config_dir,
    get_filebucket_dir,
    get_manifest_path,
    get_state_dir,
)


@pytest.fixture
def no_xdg(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("XDG_STATE_HOME", raising=False)


@pytest.mark.usefixtures("no_xdg")
@pytest.mark.parametrize(
    ("resolve", "expected"),
    [
        (get_config_dir, Path(".config") / APP_NAME),
        (get_state_dir, Path(".local") / "state" / APP_NAME),
        (get_manifest_path, Path(".config") / APP_NAME / "manifest.toml"),
        (get_checksum_store_path, Path(".local") / "state" / APP_NAME / "checksums.json"),
        (get_filebucket_dir, Path(".local") / "state" / APP_NAME / "bucket"),
    ],
)
def test_home_defaults(resolve: Callable[[], Path], expected: Path) -> None:
    """Without XDG variables everything lives under the home directory."""
    assert resolve() == Path.home() / expected


@pytest.mark.parametrize(
    ("variable", "resolve"),
    [("XDG_CONFIG_HOME", get_config_dir), ("XDG_STATE_HOME", get_state_dir)],
)
def test_xdg_override(
    variable: str,
    resolve: Callable[[], Path],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv(variable, str(tmp_path))

    assert resolve() == tmp_path / APP_NAME


def test_empty_xdg_variable_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_STATE_HOME", "")

    assert get_state_dir() == Path.home() / ".local" / "state" / APP_NAME


class TestEnsureStateDir:
    """Tests for ensure_state_dir."""

    def test_creates_nested_directory(self, isolated_xdg: Path) -> None:
        expected = isolated_xdg / "state" / APP_NAME

        assert ensure_state_dir() == expected
        assert expected.is_dir()

    def test_existing_directory_is_fine(self, isolated_xdg: Path) -> None:
        first = ensure_state_dir()
        (first / "checksums.json").write_text("{}")

        assert ensure_state_dir() == first
        assert (first / "checksums.json").exists()

    def test_permission_denied(self) -> None:
        with (
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(RuntimeError, match="state directory .* Permission denied"),
        ):
            ensure_state_dir()

    def test_other_os_error(self) -> None:
        with (
            patch.object(Path, "mkdir", side_effect=OSError("disk full")),
            pytest.raises(RuntimeError, match="disk full"),
        ):
            ensure_state_dir()
