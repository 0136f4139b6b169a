"""Data models for filectl.

This module exports the state, event, result and manifest models.
"""

from filectl.models.events import Event, RunReport, StateResult
from filectl.models.history import RunRecord, create_run_record
from filectl.models.manifest import FilebucketEntry, FileEntry, Manifest, ManifestMeta
from filectl.models.state import ROLLBACK, SYNC_ORDER, UNKNOWN, Marker, StateKind, is_known

__all__ = [
    "ROLLBACK",
    "SYNC_ORDER",
    "UNKNOWN",
    "Event",
    "FileEntry",
    "FilebucketEntry",
    "Manifest",
    "ManifestMeta",
    "Marker",
    "RunRecord",
    "RunReport",
    "StateKind",
    "StateResult",
    "create_run_record",
    "is_known",
]
