"""Source transports.

This module exposes locator resolution and the describe/list/retrieve
contract shared by local and remote sources.
"""

from filectl.transport.base import (
    FileDescription,
    ListingEntry,
    SourceTransport,
    TransportKind,
    parse_listing,
)
from filectl.transport.resolve import SourceDescriptor, join_locator, resolve_source
from filectl.transport.server import FileServerClient, LocalFileServer

__all__ = [
    "FileDescription",
    "FileServerClient",
    "ListingEntry",
    "LocalFileServer",
    "SourceDescriptor",
    "SourceTransport",
    "TransportKind",
    "join_locator",
    "parse_listing",
    "resolve_source",
]
