from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO, ClassVar

DELIMITER = "/"

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"

ACL_PUBLIC_READ = "public-read"
ACL_PRIVATE = "private"


@dataclass(frozen=True)
class FileEntry:
    """Normalized metadata for a stored object."""

    type: ClassVar[str] = "file"

    path: str
    dirname: str
    timestamp: int | None = None
    size: int | None = None
    mimetype: str | None = None
    storage_class: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"type": self.type, "path": self.path, "dirname": self.dirname}
        for name in ("timestamp", "size", "mimetype", "storage_class"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        return payload


@dataclass(frozen=True)
class DirEntry:
    """Normalized metadata for an emulated directory (a key ending in ``/``)."""

    type: ClassVar[str] = "dir"

    path: str
    dirname: str
    timestamp: int | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"type": self.type, "path": self.path, "dirname": self.dirname}
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        return payload


Entry = FileEntry | DirEntry


@dataclass
class DirectoryListing:
    """Aggregate result of one listing call. Built fresh per call."""

    objects: list[Mapping[str, Any]] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ListObjectsPage:
    """One page returned by ``ObjectStorageClient.list_objects``.

    ``next_marker`` is empty when the service reports no further pages.
    """

    objects: list[Mapping[str, Any]]
    prefixes: list[str]
    next_marker: str = ""


@dataclass(frozen=True)
class ReadResult:
    entry: FileEntry
    contents: bytes


@dataclass
class StreamResult:
    entry: FileEntry
    stream: BinaryIO


@dataclass(frozen=True)
class VisibilityInfo:
    path: str
    visibility: str


def visibility_to_acl(visibility: str | None) -> str:
    return ACL_PUBLIC_READ if visibility == VISIBILITY_PUBLIC else ACL_PRIVATE


def acl_to_visibility(acl: str | None) -> str:
    return VISIBILITY_PUBLIC if acl == ACL_PUBLIC_READ else VISIBILITY_PRIVATE
