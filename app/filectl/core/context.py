"""Reconciliation context.

One context is threaded through every resource and state of a run. It
owns the checksum store, the named filebuckets, the factory for remote
file-server clients and the once-per-run notices, so no state lives in
module globals.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from filectl.core.checksums import ChecksumStore
from filectl.core.errors import ValidationError

if TYPE_CHECKING:
    from filectl.core.filebucket import Filebucket
    from filectl.transport.server import FileServerClient

logger = logging.getLogger(__name__)

# Factory returning a client for a remote file server at (host, port).
ClientFactory = Callable[[str, int | None], "FileServerClient"]


class ReconcileContext:
    """Shared, explicitly-scoped state of one reconciliation run.

    Use as a context manager to get the open/flush lifecycle::

        with ReconcileContext(ChecksumStore(path)) as context:
            tree = ResourceTree(context)
            ...

    Attributes:
        checksums: Persisted checksum table.
        client_factory: Builds clients for remote sources, if any.
    """

    def __init__(
        self,
        checksums: ChecksumStore | None = None,
        *,
        filebuckets: dict[str, Filebucket] | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.checksums = checksums if checksums is not None else ChecksumStore()
        self.client_factory = client_factory
        self._filebuckets: dict[str, Filebucket] = dict(filebuckets or {})
        self._notified: set[str] = set()

    def __enter__(self) -> ReconcileContext:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.flush()

    def open(self) -> None:
        """Load persisted state before the first retrieve."""
        self.checksums.load()

    def flush(self) -> None:
        """Persist state after the last sync."""
        self.checksums.flush()

    def register_filebucket(self, name: str, bucket: Filebucket) -> None:
        self._filebuckets[name] = bucket

    def filebucket(self, name: str) -> Filebucket:
        """Look up a filebucket by name.

        Raises:
            ValidationError: If no bucket with that name is registered.
        """
        try:
            return self._filebuckets[name]
        except KeyError:
            raise ValidationError(f"Could not find filebucket {name}") from None

    def has_filebucket(self, name: str) -> bool:
        return name in self._filebuckets

    def notify_once(self, key: str, message: str) -> bool:
        """Log a warning the first time a key is seen during this run.

        Returns:
            True if the notice was emitted, False if it was already given.
        """
        if key in self._notified:
            return False
        self._notified.add(key)
        logger.warning(message)
        return True

    def notified(self, key: str) -> bool:
        return key in self._notified
