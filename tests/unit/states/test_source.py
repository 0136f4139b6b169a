"""Unit tests for the source state."""

import hashlib
import logging
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from filectl.core.checksums import ChecksumStore
from filectl.core.context import ReconcileContext
from filectl.core.errors import FileIOError, TransportError, UnsupportedSchemeError
from filectl.core.filebucket import LocalFilebucket
from filectl.models.events import Event
from filectl.models.state import StateKind
from filectl.resources.tree import ResourceTree
from filectl.states.checksum import Checksum
from filectl.states.source import Source

pytestmark = pytest.mark.usefixtures("unprivileged")

HI_MD5 = hashlib.md5(b"hi").hexdigest()


@pytest.fixture
def src_file(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "f"
    path.parent.mkdir()
    path.write_text("hi")
    os.chmod(path, 0o644)
    return path


@pytest.fixture
def dest(tmp_path: Path) -> Path:
    path = tmp_path / "dst" / "f"
    path.parent.mkdir()
    return path


def _source(resource: object) -> Source:
    state = resource.state(StateKind.SOURCE)  # type: ignore[attr-defined]
    assert isinstance(state, Source)
    return state


class FakeServer:
    """Remote file server answering from memory."""

    def __init__(self, content: str) -> None:
        self.content = content

    def describe(self, path: str) -> str:
        return f"640\tfile\t0\t0\t{HI_MD5}"

    def list(self, path: str, recursive: bool = False) -> str:
        return "/\tfile"

    def retrieve(self, path: str) -> str:
        return self.content


class TestSourceAssign:
    """Tests for attaching a source."""

    def test_adds_md5_checksum(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """A checksum state is attached when missing."""
        resource = tree.declare(str(dest), {"source": str(src_file)})

        checksum = resource.state(StateKind.CHECKSUM)
        assert isinstance(checksum, Checksum)
        assert checksum.checktype == "md5"

    def test_forces_md5_checktype(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """A different destination checktype is coerced to md5."""
        resource = tree.declare(str(dest), {"checksum": "mtime", "source": str(src_file)})

        checksum = resource.state(StateKind.CHECKSUM)
        assert isinstance(checksum, Checksum)
        assert checksum.checktype == "md5"

    def test_unsupported_scheme(self, tree: ResourceTree, dest: Path) -> None:
        """Unknown URI schemes fail the attribute, not the resource."""
        resource = tree.declare(str(dest), {"source": "ftp://example.com/f", "mode": "644"})

        assert resource.state(StateKind.SOURCE) is None
        assert resource.state(StateKind.MODE) is not None
        assert isinstance(resource.failures[0][1], UnsupportedSchemeError)


class TestSourceRetrieve:
    """Tests for describing the source."""

    def test_derives_is_and_should(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """should is the source md5; is is the destination checksum."""
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file)})

        resource.retrieve()
        source = _source(resource)

        assert source.should == HI_MD5
        assert source.is_ == hashlib.md5(b"old").hexdigest()
        assert not source.in_sync()

    def test_in_sync_when_content_matches(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """Identical content needs no copy."""
        dest.write_text("hi")
        resource = tree.declare(str(dest), {"source": str(src_file)})

        resource.retrieve()

        assert _source(resource).in_sync()

    def test_backfills_mode(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """The source's mode is used when none is declared."""
        os.chmod(src_file, 0o640)
        resource = tree.declare(str(dest), {"source": str(src_file)})

        resource.retrieve()

        mode = resource.state(StateKind.MODE)
        assert mode is not None
        assert mode.should == 0o640

    def test_explicit_mode_wins(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """A declared mode is never overwritten by the source's."""
        os.chmod(src_file, 0o640)
        resource = tree.declare(str(dest), {"source": str(src_file), "mode": "600"})

        resource.retrieve()

        mode = resource.state(StateKind.MODE)
        assert mode is not None
        assert mode.should == 0o600

    def test_skips_ownership_when_unprivileged(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """Owner and group are not inherited without privilege."""
        resource = tree.declare(str(dest), {"source": str(src_file)})

        resource.retrieve()

        assert resource.state(StateKind.OWNER) is None
        assert resource.state(StateKind.GROUP) is None

    def test_drops_conflicting_create(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """A file source overrides a request to create a directory."""
        resource = tree.declare(str(dest), {"source": str(src_file), "create": "directory"})

        resource.retrieve()

        assert resource.state(StateKind.CREATE) is None

    def test_directory_source_requests_directory(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """A directory source makes the destination a directory."""
        resource = tree.declare(str(dest), {"source": str(src_file.parent)})

        resource.retrieve()

        existence = resource.state(StateKind.CREATE)
        assert existence is not None
        assert existence.should == "directory"
        assert _source(resource).in_sync()

    def test_missing_source_detaches(self, tree: ResourceTree, dest: Path, tmp_path: Path) -> None:
        """A source that cannot be described is a resource failure."""
        resource = tree.declare(str(dest), {"source": str(tmp_path / "nope")})

        resource.retrieve()

        assert resource.state(StateKind.SOURCE) is None
        assert isinstance(resource.failures[-1][1], TransportError)


class TestSourceSync:
    """Tests for copying content."""

    def test_copies_into_absent_destination(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """The file is created with the source's content and mode."""
        resource = tree.declare(str(dest), {"source": str(src_file), "backup": False})
        resource.retrieve()

        event = _source(resource).sync()

        assert event is Event.FILE_CHANGED
        assert dest.read_text() == "hi"
        assert stat.S_IMODE(dest.stat().st_mode) == 0o644

    def test_backup_removed_after_write(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """The aside copy only lives until the new content is written."""
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file)})
        resource.retrieve()

        event = _source(resource).sync()

        assert event is Event.FILE_CHANGED
        assert dest.read_text() == "hi"
        assert sorted(p.name for p in dest.parent.iterdir()) == ["f"]

    def test_custom_suffix(self, tree: ResourceTree, src_file: Path, dest: Path) -> None:
        """A backup value starting with a dot names the aside copy."""
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file), "backup": ".orig"})
        resource.retrieve()
        seen: list[str] = []
        write = Source._write

        def recording_write(path: str, content: bytes, mode: int | None) -> None:
            seen.append(Path(f"{dest}.orig").read_text())
            write(path, content, mode)

        with patch.object(Source, "_write", side_effect=recording_write):
            _source(resource).sync()

        assert seen == ["old"]
        assert dest.read_text() == "hi"
        assert not Path(f"{dest}.orig").exists()

    def test_stale_backup_replaced(
        self,
        tree: ResourceTree,
        src_file: Path,
        dest: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A backup left by an interrupted run is dropped with a warning."""
        dest.write_text("old")
        Path(f"{dest}.puppet-bak").write_text("older")
        resource = tree.declare(str(dest), {"source": str(src_file)})
        resource.retrieve()

        with caplog.at_level(logging.WARNING):
            _source(resource).sync()

        assert "stale backup" in caplog.text
        assert sorted(p.name for p in dest.parent.iterdir()) == ["f"]

    def test_backup_disabled_leaves_no_copy(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """Without backups the aside copy is removed after the write."""
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file), "backup": False})
        resource.retrieve()

        _source(resource).sync()

        assert sorted(p.name for p in dest.parent.iterdir()) == ["f"]

    def test_filebucket_backup(
        self,
        tree: ResourceTree,
        context: ReconcileContext,
        src_file: Path,
        dest: Path,
        tmp_path: Path,
    ) -> None:
        """A bucket name stores the old content in the bucket instead."""
        bucket = LocalFilebucket(tmp_path / "bucket")
        context.register_filebucket("main", bucket)
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file), "backup": "main"})
        resource.retrieve()

        _source(resource).sync()

        digest = hashlib.md5(b"old").hexdigest()
        assert (tmp_path / "bucket" / digest / "contents").read_text() == "old"
        assert bucket.paths(digest) == [str(dest)]
        assert sorted(p.name for p in dest.parent.iterdir()) == ["f"]

    def test_failed_write_restores_original(
        self, tree: ResourceTree, src_file: Path, dest: Path
    ) -> None:
        """The original content survives a failed write."""
        dest.write_text("old")
        resource = tree.declare(str(dest), {"source": str(src_file), "backup": False})
        resource.retrieve()

        with (
            patch.object(Source, "_write", side_effect=OSError("disk full")),
            pytest.raises(FileIOError, match="disk full"),
        ):
            _source(resource).sync()

        assert dest.read_text() == "old"
        assert not Path(f"{dest}.puppet-bak").exists()

    def test_remote_content_is_decoded(self, dest: Path) -> None:
        """Percent-encoded remote content is written decoded."""
        context = ReconcileContext(
            ChecksumStore(), client_factory=lambda host, port: FakeServer("h%69")
        )
        tree = ResourceTree(context)
        resource = tree.declare(
            str(dest), {"source": "puppet://files.example.com/dist/f", "backup": False}
        )
        resource.retrieve()

        assert _source(resource).sync() is Event.FILE_CHANGED
        assert dest.read_bytes() == b"hi"
        assert stat.S_IMODE(dest.stat().st_mode) == 0o640
