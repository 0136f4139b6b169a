"""Content fingerprinting and entry classification helpers.

Shared by the checksum state and the local file server so that both ends
of a source copy compute fingerprints the same way.
"""

import hashlib
import os
import stat
from datetime import UTC, datetime

# Checksum recorded for a file with no content at all.
EMPTY_CHECKSUM = "0"

# Number of leading bytes hashed by the md5lite strategy.
LITE_BYTES = 512

CHECKTYPES: tuple[str, ...] = ("md5", "md5lite", "mtime", "ctime")

_CHECKTYPE_ALIASES: dict[str, str] = {
    "lite-md5": "md5lite",
    "timestamp": "mtime",
    "time": "ctime",
}

_CHUNK_SIZE = 64 * 1024


def normalize_checktype(value: str) -> str:
    """Map a checktype or one of its aliases to its canonical name.

    Raises:
        ValueError: If the value names no known strategy.
    """
    checktype = _CHECKTYPE_ALIASES.get(value, value)
    if checktype not in CHECKTYPES:
        msg = f"Invalid checksum type {value!r}; expected one of {', '.join(CHECKTYPES)}"
        raise ValueError(msg)
    return checktype


def md5_file(path: str, limit: int | None = None) -> str:
    """Hash a file's content, or only its first ``limit`` bytes.

    Returns:
        MD5 hex digest, or EMPTY_CHECKSUM when there was nothing to read.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    digest = hashlib.md5()  # nosec: B324
    seen = 0
    with open(path, "rb") as f:
        if limit is not None:
            data = f.read(limit)
            seen = len(data)
            digest.update(data)
        else:
            while chunk := f.read(_CHUNK_SIZE):
                seen += len(chunk)
                digest.update(chunk)
    if seen == 0:
        return EMPTY_CHECKSUM
    return digest.hexdigest()


def md5_bytes(data: bytes) -> str:
    """Hash in-memory content the same way :func:`md5_file` hashes a file."""
    if not data:
        return EMPTY_CHECKSUM
    return hashlib.md5(data).hexdigest()  # nosec: B324


def compute_checksum(path: str, checktype: str) -> str:
    """Compute the fingerprint of a regular file.

    Args:
        path: File to fingerprint.
        checktype: Canonical checktype (see :data:`CHECKTYPES`).

    Raises:
        OSError: If the file cannot be read or stat'ed.
        ValueError: If the checktype is unknown.
    """
    if checktype == "md5":
        return md5_file(path)
    if checktype == "md5lite":
        return md5_file(path, limit=LITE_BYTES)
    if checktype == "mtime":
        return _format_timestamp(os.stat(path).st_mtime)
    if checktype == "ctime":
        return _format_timestamp(os.stat(path).st_ctime)
    msg = f"Invalid checksum type {checktype!r}"
    raise ValueError(msg)


def _format_timestamp(value: float) -> str:
    return datetime.fromtimestamp(value, UTC).isoformat()


def entry_kind(st: os.stat_result) -> str:
    """Name the kind of filesystem entry described by a stat result."""
    mode = st.st_mode
    if stat.S_ISREG(mode):
        return "file"
    if stat.S_ISDIR(mode):
        return "directory"
    if stat.S_ISLNK(mode):
        return "link"
    if stat.S_ISFIFO(mode):
        return "fifo"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISCHR(mode):
        return "characterSpecial"
    if stat.S_ISBLK(mode):
        return "blockSpecial"
    return "unknown"
