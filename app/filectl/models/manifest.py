"""Manifest models for declarative file state.

This module defines the Pydantic models representing the manifest.toml
structure that describes the desired state of files and directories.
"""

from __future__ import annotations

import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Type alias for checksum strategies accepted in the manifest
ChecksumType = Literal["md5", "md5lite", "mtime", "ctime"]


class ManifestMeta(BaseModel):
    """Metadata section of the manifest.

    Attributes:
        version: Manifest schema version (e.g., "1.0").
        description: Optional description of what this manifest manages.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[str, Field(description="Manifest schema version")] = "1.0"
    description: Annotated[str | None, Field(description="Manifest description")] = None


class FilebucketEntry(BaseModel):
    """Named backup repository.

    Attributes:
        path: Directory holding the bucket's content-addressed store.
            Defaults to ~/.local/state/filectl/bucket/<name>.
    """

    model_config = ConfigDict(extra="forbid")

    path: Annotated[str | None, Field(description="Bucket storage directory")] = None


class FileEntry(BaseModel):
    """Desired state of a single file or directory.

    Every field is optional; only the attributes present are managed.

    Attributes:
        create: Whether and what to create (false, true, "file", "directory").
        checksum: Content fingerprint strategy used for drift detection.
        owner: User name or uid that should own the entry.
        group: Group name or gid that should own the entry.
        mode: Octal permission string (e.g., "644"). A TOML integer is read
            as the same octal digits, so 644 and "644" are both 0o644.
        source: Local path or URI whose content should be mirrored.
        backup: false, true, a suffix starting with ".", or a filebucket name.
        recurse: false, true, "infinite", or a non-negative depth.
        filebucket: Name of the filebucket used for backups.
        linkmaker: Materialize non-directory children as symlinks to the source.
    """

    model_config = ConfigDict(extra="forbid")

    create: Annotated[bool | str | None, Field(description="Entry to create")] = None
    checksum: Annotated[ChecksumType | None, Field(description="Checksum type")] = None
    owner: Annotated[str | int | None, Field(description="Owning user")] = None
    group: Annotated[str | int | None, Field(description="Owning group")] = None
    mode: Annotated[str | None, Field(description="Permission bits")] = None
    source: Annotated[str | None, Field(description="Content source")] = None
    backup: Annotated[bool | str | None, Field(description="Backup behaviour")] = None
    recurse: Annotated[bool | int | str | None, Field(description="Recursion depth")] = None
    filebucket: Annotated[str | None, Field(description="Filebucket name")] = None
    linkmaker: Annotated[bool, Field(description="Create symlinks for children")] = False

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, value: object) -> object:
        """Read an integer mode as octal digits, the way it is written."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("recurse")
    @classmethod
    def validate_recurse(cls, value: bool | int | str | None) -> bool | int | str | None:
        """Validate that a numeric recurse depth is non-negative."""
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            msg = f"Recurse depth cannot be negative, got {value}"
            raise ValueError(msg)
        return value

    def arguments(self) -> dict[str, object]:
        """Return only the attributes that were explicitly set."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Manifest(BaseModel):
    """Complete manifest representing desired file state.

    Attributes:
        meta: Metadata section with version information.
        files: Mapping of absolute path to desired state.
        filebuckets: Named backup repositories.
    """

    model_config = ConfigDict(extra="forbid")

    meta: Annotated[ManifestMeta, Field(default_factory=ManifestMeta)]
    files: Annotated[
        dict[str, FileEntry],
        Field(default_factory=dict, description="Managed files by path"),
    ]
    filebuckets: Annotated[
        dict[str, FilebucketEntry],
        Field(default_factory=dict, description="Named filebuckets"),
    ]

    @field_validator("files")
    @classmethod
    def validate_absolute_paths(cls, files: dict[str, FileEntry]) -> dict[str, FileEntry]:
        """Validate that every managed path is fully qualified."""
        relative = [path for path in files if not os.path.isabs(path)]
        if relative:
            msg = f"File paths must be absolute: {relative}"
            raise ValueError(msg)
        return files

    @model_validator(mode="after")
    def validate_bucket_references(self) -> Manifest:
        """Validate that every referenced filebucket is declared."""
        for path, entry in self.files.items():
            names = [entry.filebucket]
            backup = entry.backup
            if isinstance(backup, str) and backup not in ("true", "false"):
                if not backup.startswith("."):
                    names.append(backup)
            for name in names:
                if name is not None and name not in self.filebuckets:
                    msg = f"{path}: unknown filebucket {name!r}"
                    raise ValueError(msg)
        return self

    @property
    def file_count(self) -> int:
        """Total number of declared files."""
        return len(self.files)
