"""Unit tests for identity database helpers."""

import grp
import os
import pwd
from unittest.mock import patch

import pytest
from filectl.utils.identity import (
    current_group_names,
    is_privileged,
    resolve_group,
    resolve_user,
)


class TestIsPrivileged:
    """Tests for is_privileged function."""

    def test_root(self) -> None:
        with patch("filectl.utils.identity.os.geteuid", return_value=0):
            assert is_privileged()

    def test_regular_user(self) -> None:
        with patch("filectl.utils.identity.os.geteuid", return_value=1000):
            assert not is_privileged()


class TestResolveUser:
    """Tests for resolve_user function."""

    def test_current_user_by_name(self) -> None:
        entry = pwd.getpwuid(os.getuid())

        assert resolve_user(entry.pw_name) == entry.pw_uid

    def test_numeric(self) -> None:
        uid = os.getuid()

        assert resolve_user(str(uid)) == uid
        assert resolve_user(uid) == uid

    def test_unknown(self) -> None:
        with pytest.raises(KeyError):
            resolve_user("no-such-user-filectl")


class TestResolveGroup:
    """Tests for resolve_group function."""

    def test_by_gid(self) -> None:
        gid = os.getgid()

        assert resolve_group(gid) == (gid, grp.getgrgid(gid).gr_name)

    def test_by_name(self) -> None:
        entry = grp.getgrgid(os.getgid())

        assert resolve_group(entry.gr_name) == (entry.gr_gid, entry.gr_name)

    def test_unknown(self) -> None:
        with pytest.raises(KeyError):
            resolve_group("no-such-group-filectl")


class TestCurrentGroupNames:
    """Tests for current_group_names function."""

    def test_includes_primary_group(self) -> None:
        assert grp.getgrgid(os.getegid()).gr_name in current_group_names()
