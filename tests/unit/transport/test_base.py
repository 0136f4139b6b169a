"""Unit tests for the source transport contract."""

from unittest.mock import MagicMock

import pytest
from filectl.core.errors import TransportError
from filectl.transport.base import (
    FileDescription,
    ListingEntry,
    SourceTransport,
    TransportKind,
    parse_listing,
)


class TestFileDescription:
    """Tests for parsing describe answers."""

    def test_file(self) -> None:
        description = FileDescription.parse("644\tfile\t0\t10\tabc123\n")

        assert description == FileDescription(
            mode=0o644, type="file", owner=0, group=10, checksum="abc123"
        )
        assert description.metadata() == {"mode": 0o644, "owner": 0, "group": 10}

    def test_directory_has_no_checksum(self) -> None:
        description = FileDescription.parse("755\tdirectory\t0\t0\tignored")

        assert description.checksum is None

    def test_missing_checksum_field(self) -> None:
        description = FileDescription.parse("755\tdirectory\t0\t0")

        assert description.type == "directory"

    def test_unreported_fields(self) -> None:
        """Empty or non-numeric fields are left out of the metadata."""
        description = FileDescription.parse("\tfile\t\tstaff\t")

        assert description.mode is None
        assert description.checksum is None
        assert description.metadata() == {}

    @pytest.mark.parametrize("line", ["644\tfile", "644\t\t0\t0\tx"])
    def test_malformed(self, line: str) -> None:
        with pytest.raises(ValueError):
            FileDescription.parse(line)


class TestParseListing:
    """Tests for parsing list answers."""

    def test_records(self) -> None:
        entries = parse_listing("/\tdirectory\n/a\tfile\n\n/sub/b\tfile\n")

        assert entries == [
            ListingEntry("/", "directory"),
            ListingEntry("/a", "file"),
            ListingEntry("/sub/b", "file"),
        ]
        assert entries[0].is_self
        assert entries[2].name == "sub/b"

    def test_malformed(self) -> None:
        with pytest.raises(ValueError, match="Malformed listing record"):
            parse_listing("/a file")


class TestSourceTransport:
    """Tests for error wrapping and content decoding."""

    def test_remote_content_decoded(self) -> None:
        client = MagicMock()
        client.retrieve.return_value = "line%20one%0Aline%20two"
        transport = SourceTransport(TransportKind.REMOTE, client, "dist")

        assert transport.retrieve("/dist/f") == b"line one\nline two"

    def test_local_content_untouched(self) -> None:
        client = MagicMock()
        client.retrieve.return_value = b"100%25 raw"
        transport = SourceTransport(TransportKind.LOCAL, client, "localhost")

        assert transport.retrieve("/localhost/f") == b"100%25 raw"
        assert transport.local

    def test_client_errors_wrapped(self) -> None:
        client = MagicMock()
        client.describe.side_effect = FileNotFoundError("gone")
        transport = SourceTransport(TransportKind.LOCAL, client, "localhost")

        with pytest.raises(TransportError, match="Could not describe /localhost/f: gone"):
            transport.describe("/localhost/f")

    def test_garbage_answer_wrapped(self) -> None:
        client = MagicMock()
        client.list.return_value = "no tabs here"
        transport = SourceTransport(TransportKind.REMOTE, client, "dist")

        with pytest.raises(TransportError, match="Could not list"):
            transport.list("/dist")

    def test_transport_errors_pass_through(self) -> None:
        client = MagicMock()
        client.retrieve.side_effect = TransportError("connection refused")
        transport = SourceTransport(TransportKind.REMOTE, client, "dist")

        with pytest.raises(TransportError, match="^connection refused$"):
            transport.retrieve("/dist/f")
