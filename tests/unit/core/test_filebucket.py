"""Unit tests for the local filebucket."""

import hashlib
from pathlib import Path

import pytest
from filectl.core.errors import FileIOError, NotFoundError
from filectl.core.filebucket import LocalFilebucket


@pytest.fixture
def bucket(tmp_path: Path) -> LocalFilebucket:
    return LocalFilebucket(tmp_path / "bucket")


class TestLocalFilebucket:
    """Tests for backup and restore."""

    def test_backup_stores_content(self, bucket: LocalFilebucket, tmp_path: Path) -> None:
        source = tmp_path / "motd"
        source.write_text("hello")

        digest = bucket.backup(str(source))

        assert digest == hashlib.md5(b"hello").hexdigest()
        assert (bucket.root / digest / "contents").read_text() == "hello"
        assert bucket.paths(digest) == [str(source)]

    def test_identical_content_stored_once(self, bucket: LocalFilebucket, tmp_path: Path) -> None:
        """Two paths with the same content share one entry."""
        first = tmp_path / "a"
        second = tmp_path / "b"
        first.write_text("same")
        second.write_text("same")

        digest = bucket.backup(str(first))
        bucket.backup(str(second))
        bucket.backup(str(first))

        assert bucket.paths(digest) == [str(first), str(second)]
        assert len(list(bucket.root.iterdir())) == 1

    def test_backup_missing_file(self, bucket: LocalFilebucket, tmp_path: Path) -> None:
        with pytest.raises(FileIOError):
            bucket.backup(str(tmp_path / "missing"))

    def test_restore(self, bucket: LocalFilebucket, tmp_path: Path) -> None:
        source = tmp_path / "motd"
        source.write_text("hello")
        digest = bucket.backup(str(source))
        source.write_text("changed")

        bucket.restore(digest, str(source))

        assert source.read_text() == "hello"

    def test_restore_unknown_digest(self, bucket: LocalFilebucket, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError):
            bucket.restore("0" * 32, str(tmp_path / "out"))

    def test_paths_unknown_digest(self, bucket: LocalFilebucket) -> None:
        assert bucket.paths("0" * 32) == []
