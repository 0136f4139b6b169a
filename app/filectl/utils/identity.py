"""System identity database helpers.

Resolves user and group names or ids through the passwd/group databases
and answers privilege questions about the running process.
"""

import grp
import logging
import os
import pwd

logger = logging.getLogger(__name__)


def is_privileged() -> bool:
    """Check whether the process may change ownership of any file."""
    return os.geteuid() == 0


def resolve_user(value: str | int) -> int:
    """Resolve a user name or uid to a uid.

    Numeric strings are treated as uids.

    Raises:
        KeyError: If no such user exists.
    """
    if isinstance(value, int) or value.isdigit():
        return pwd.getpwuid(int(value)).pw_uid
    return pwd.getpwnam(value).pw_uid


def resolve_group(value: str | int) -> tuple[int, str]:
    """Resolve a group name or gid to ``(gid, name)``.

    Numeric strings are treated as gids.

    Raises:
        KeyError: If no such group exists.
    """
    if isinstance(value, int) or value.isdigit():
        entry = grp.getgrgid(int(value))
    else:
        entry = grp.getgrnam(value)
    return entry.gr_gid, entry.gr_name


def current_group_names() -> set[str]:
    """Names of every group the running process is a member of."""
    names: set[str] = set()
    for gid in {os.getegid(), *os.getgroups()}:
        try:
            names.add(grp.getgrgid(gid).gr_name)
        except KeyError:
            logger.debug("Group id %d has no name", gid)
    return names
