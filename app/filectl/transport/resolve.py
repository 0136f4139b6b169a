"""Source locator resolution.

A locator is either a bare absolute local path or a URI. Bare paths are
rewritten to ``file://localhost/<path>`` so that local and remote sources
share one code path. The scheme is resolved to a transport once, when the
source is assigned, and never re-parsed afterwards.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from filectl.core.errors import TransportError, UnsupportedSchemeError, ValidationError
from filectl.transport.base import SourceTransport, TransportKind
from filectl.transport.server import LocalFileServer

if TYPE_CHECKING:
    from filectl.core.context import ReconcileContext

logger = logging.getLogger(__name__)

LOCAL_MOUNT = "localhost"
REMOTE_SCHEME = "puppet"

_MOUNT_RE = re.compile(r"^/(\w+)(/.*)?$")


@dataclass(frozen=True, slots=True)
class SourceDescriptor:
    """A resolved source locator.

    Attributes:
        locator: The locator as configured.
        kind: Local or remote transport.
        transport: Transport serving the source.
        mount: Mount name on the server.
        path: Server path (``/<mount>/<rest>``).
    """

    locator: str
    kind: TransportKind
    transport: SourceTransport
    mount: str
    path: str

    @property
    def local_path(self) -> str | None:
        """Filesystem path of a local source, None for remote ones."""
        if self.kind is not TransportKind.LOCAL:
            return None
        rest = self.path[len(self.mount) + 1 :]
        return rest or "/"


def join_locator(locator: str, name: str) -> str:
    """Append a relative child name to a locator."""
    return locator.rstrip("/") + "/" + name.lstrip("/")


def resolve_source(locator: str, context: ReconcileContext) -> SourceDescriptor:
    """Resolve a locator to the transport that serves it.

    Args:
        locator: Absolute local path or URI.
        context: Run context providing remote clients.

    Returns:
        Resolved descriptor.

    Raises:
        ValidationError: If the locator is relative or malformed.
        UnsupportedSchemeError: If no transport handles the URI scheme.
        TransportError: If a remote client cannot be obtained.
    """
    if not locator:
        raise ValidationError("Source cannot be empty")

    uri = f"file://{LOCAL_MOUNT}{locator}" if locator.startswith("/") else locator

    try:
        parsed = urlparse(uri)
        port = parsed.port
    except ValueError as e:
        raise ValidationError(f"Could not understand source {locator}: {e}") from e

    if not parsed.scheme:
        raise ValidationError(f"Source must be an absolute path or a URI: {locator}")

    if parsed.scheme == "file":
        path = _collapse(f"/{LOCAL_MOUNT}/{parsed.path}")
        transport = SourceTransport(
            TransportKind.LOCAL,
            LocalFileServer({LOCAL_MOUNT: "/"}),
            LOCAL_MOUNT,
        )
        return SourceDescriptor(locator, TransportKind.LOCAL, transport, LOCAL_MOUNT, path)

    if parsed.scheme == REMOTE_SCHEME:
        match = _MOUNT_RE.match(parsed.path)
        if match is None or not parsed.hostname:
            raise ValidationError(f"Invalid source path {parsed.path!r} in {locator}")
        mount = match.group(1)
        if context.client_factory is None:
            raise TransportError(f"No file server client available for {parsed.hostname}")
        client = context.client_factory(parsed.hostname, port)
        transport = SourceTransport(TransportKind.REMOTE, client, mount)
        path = _collapse(f"/{mount}/{match.group(2) or ''}")
        return SourceDescriptor(locator, TransportKind.REMOTE, transport, mount, path)

    raise UnsupportedSchemeError(f"Unsupported source scheme {parsed.scheme!r}: {locator}")


def _collapse(path: str) -> str:
    """Squeeze repeated slashes and drop a trailing one."""
    collapsed = re.sub(r"/+", "/", path)
    if len(collapsed) > 1:
        collapsed = collapsed.rstrip("/")
    return collapsed
