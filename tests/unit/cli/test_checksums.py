"""Unit tests for the checksums command."""

from pathlib import Path

from filectl.cli.main import app
from filectl.core.checksums import ChecksumStore
from typer.testing import CliRunner

runner = CliRunner()


def _store(tmp_path: Path) -> Path:
    path = tmp_path / "checksums.json"
    store = ChecksumStore(path)
    store.set("/a", "md5", "0cc175b9")
    store.set("/b", "mtime", "2026-01-01")
    store.flush()
    return path


class TestChecksumsCommand:
    """Tests for filectl checksums."""

    def test_empty_store(self) -> None:
        result = runner.invoke(app, ["checksums"])

        assert result.exit_code == 0
        assert "No checksums recorded" in result.stdout

    def test_lists_all(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["checksums", "--store", str(_store(tmp_path))])

        assert result.exit_code == 0
        assert "0cc175b9" in result.stdout
        assert "2026-01-01" in result.stdout

    def test_single_path(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["checksums", "/a", "--store", str(_store(tmp_path))])

        assert result.exit_code == 0
        assert "0cc175b9" in result.stdout
        assert "2026-01-01" not in result.stdout

    def test_unknown_path(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["checksums", "/zzz", "--store", str(_store(tmp_path))])

        assert result.exit_code == 0
        assert "No checksums recorded" in result.stdout

    def test_store_option_before_path(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["checksums", "--store", str(_store(tmp_path)), "/b"])

        assert result.exit_code == 0
        assert "2026-01-01" in result.stdout
        assert "0cc175b9" not in result.stdout
