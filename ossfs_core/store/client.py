from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from ossfs_core.models import ListObjectsPage


class ObjectStorageClient(Protocol):
    """Primitive object-storage operations the adapter is built on.

    Raw mappings use S3 field names (``Key``, ``Size``, ``LastModified``,
    ``ContentType``, ``ContentLength``, ``StorageClass``, ``ETag``, ``Body``).
    Implementations raise ``ObjectNotFoundError`` for missing objects and
    ``TransportError`` for every other failure.
    """

    def put_object(
        self, bucket: str, key: str, body: bytes, options: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        """Store ``body`` under ``key`` (overwrite). ``options`` are put arguments."""

    def upload_file(
        self,
        bucket: str,
        key: str,
        local_path: str | Path,
        options: Mapping[str, Any],
        *,
        check_md5: bool = True,
    ) -> Mapping[str, Any]:
        """Upload a local file, letting the service verify its MD5 when requested."""

    def get_object(self, bucket: str, key: str) -> Mapping[str, Any]:
        """Return the object's metadata plus its content under ``Body``.

        ``Body`` is either ``bytes`` or a binary file-like object.
        """

    def get_object_acl(self, bucket: str, key: str) -> str:
        """Return the canned ACL of the object (``public-read`` or ``private``)."""

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        """Apply a canned ACL to the object."""

    def copy_object(self, from_bucket: str, from_key: str, to_bucket: str, to_key: str) -> None:
        """Server-side copy."""

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete one object."""

    def delete_objects(self, bucket: str, keys: list[str]) -> list[str]:
        """Delete the listed keys (best-effort). Return the keys that failed."""

    def list_objects(
        self,
        bucket: str,
        *,
        prefix: str = "",
        delimiter: str = "/",
        marker: str = "",
        max_keys: int = 1000,
    ) -> ListObjectsPage:
        """Return one listing page starting after ``marker``."""

    def head_object(self, bucket: str, key: str) -> Mapping[str, Any]:
        """Return object metadata without content."""

    def create_object_dir(self, bucket: str, key: str, options: Mapping[str, Any]) -> None:
        """Store a zero-byte directory marker at ``key`` (which ends in ``/``)."""

    def object_exists(self, bucket: str, key: str) -> bool:
        """Return True when the object exists."""

    def close(self) -> None:
        """Release network resources held by the client."""
