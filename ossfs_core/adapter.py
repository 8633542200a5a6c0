from __future__ import annotations

import io
import logging
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import urlsplit

from botocore.exceptions import BotoCoreError

from ossfs_core.errors import (
    InconsistentStateError,
    ObjectNotFoundError,
    OssAdapterError,
    TransportError,
)
from ossfs_core.io.paths import (
    PathPrefixer,
    as_dir_key,
    emulate_directories,
    is_dir_key,
)
from ossfs_core.io.paths import dirname as parent_dirname
from ossfs_core.listing import DEFAULT_MAX_KEYS, DirectoryLister
from ossfs_core.models import (
    ACL_PRIVATE,
    DirEntry,
    Entry,
    FileEntry,
    ReadResult,
    StreamResult,
    VisibilityInfo,
    acl_to_visibility,
    visibility_to_acl,
)
from ossfs_core.normalize import normalize_response
from ossfs_core.observability import log_event, object_log_fields
from ossfs_core.settings import OssClientConfig
from ossfs_core.store.boto3_client import Boto3OssClient
from ossfs_core.store.client import ObjectStorageClient

logger = logging.getLogger(__name__)

# Per-call options copied through to put requests as-is.
META_OPTIONS = (
    "CacheControl",
    "Expires",
    "ServerSideEncryption",
    "Metadata",
    "ACL",
    "ContentType",
    "ContentDisposition",
    "ContentLanguage",
    "ContentEncoding",
)

# In-memory bodies above this size spill to disk when a stream is requested.
SPOOL_MAX_SIZE = 8 * 1024 * 1024


def _close_body(body: object) -> None:
    close = getattr(body, "close", None)
    if callable(close):
        close()


@contextmanager
def _body_errors(target: str) -> Iterator[None]:
    """Translate failures while draining a response body into ``TransportError``."""

    try:
        yield
    except BotoCoreError as exc:
        raise TransportError(f"reading body failed for {target}: {exc}") from exc


def _rewindable(body: object, target: str = "") -> BinaryIO:
    """Return a binary stream positioned at offset zero for any client body."""

    if isinstance(body, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(body))
    if isinstance(body, str):
        return io.BytesIO(body.encode("utf-8"))

    seekable = getattr(body, "seekable", None)
    if callable(seekable) and seekable():
        body.seek(0)  # type: ignore[attr-defined]
        return body  # type: ignore[return-value]

    spooled = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
    try:
        with _body_errors(target):
            for chunk in iter(lambda: body.read(1024 * 1024), b""):  # type: ignore[attr-defined]
                spooled.write(chunk)
    except BaseException:
        spooled.close()
        raise
    finally:
        _close_body(body)
    spooled.seek(0)
    return spooled  # type: ignore[return-value]


def _read_all(body: object, target: str = "") -> bytes:
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    try:
        with _body_errors(target):
            return body.read()  # type: ignore[attr-defined]
    finally:
        _close_body(body)


class OssAdapter:
    """Filesystem-style operations over one object-storage bucket.

    Logical paths are relative and slash-delimited; each operation translates the
    path to a storage key (``prefix + path``), calls the object-storage client and
    normalizes the reply into ``FileEntry`` / ``DirEntry`` records.

    Failures are raised, never folded into a return value:

    - ``TransportError``: a client call failed.
    - ``ObjectNotFoundError``: the addressed object is missing.
    - ``InconsistentStateError``: a multi-step operation only partly took effect.
    """

    def __init__(
        self,
        client_config: OssClientConfig,
        bucket: str,
        prefix: str | None = "",
        domain: str | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        client: ObjectStorageClient | None = None,
        max_keys: int = DEFAULT_MAX_KEYS,
    ) -> None:
        if not bucket:
            raise ValueError("bucket is required")
        self._client_config = client_config
        self._bucket = bucket
        self._domain = domain
        self._options: dict[str, Any] = dict(options or {})
        self._prefixer = PathPrefixer(prefix)
        if client is None:
            client = Boto3OssClient.from_config(client_config, bucket=bucket)
        self._client = client
        self._lister = DirectoryLister(client, bucket, max_keys=max_keys)

    # -- lifecycle -----------------------------------------------------------

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def client(self) -> ObjectStorageClient:
        return self._client

    @property
    def prefixer(self) -> PathPrefixer:
        return self._prefixer

    def get_bucket_name(self) -> str:
        return self._bucket

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OssAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- path translation ----------------------------------------------------

    def apply_prefix(self, path: str) -> str:
        return self._prefixer.apply_prefix(path)

    def remove_prefix(self, key: str) -> str:
        return self._prefixer.remove_prefix(key)

    def _options_from_config(self, config: Mapping[str, Any] | None) -> dict[str, Any]:
        """Layer per-call config on top of the adapter-level options."""

        config = config or {}
        options = dict(self._options)

        visibility = config.get("visibility")
        if visibility:
            options["ACL"] = visibility_to_acl(visibility)

        mimetype = config.get("mimetype")
        if mimetype:
            options["ContentType"] = mimetype

        for name in META_OPTIONS:
            if name in config:
                options[name] = config[name]
        return options

    # -- writes --------------------------------------------------------------

    def _file_key(self, path: str) -> str:
        key = self.apply_prefix(path)
        if not key or is_dir_key(key):
            raise ValueError(f"Not a file path: {path!r}")
        return key

    def write(
        self, path: str, contents: bytes | str, config: Mapping[str, Any] | None = None
    ) -> FileEntry:
        key = self._file_key(path)
        options = self._options_from_config(config)
        if isinstance(contents, str):
            body = contents.encode("utf-8")
        elif isinstance(contents, (bytes, bytearray, memoryview)):
            body = bytes(contents)
        else:
            raise TypeError(f"contents must be bytes or str, got {type(contents).__name__}")

        self._client.put_object(self._bucket, key, body, options)
        log_event(logger, "oss.write", **object_log_fields(self._bucket, key, size=len(body)))
        return self._written_entry(path, options, size=len(body))

    def write_stream(
        self, path: str, stream: BinaryIO, config: Mapping[str, Any] | None = None
    ) -> FileEntry:
        return self.write(path, stream.read(), config)

    def write_file(
        self, path: str, local_path: str | Path, config: Mapping[str, Any] | None = None
    ) -> FileEntry:
        """Upload a local file; the service verifies the MD5 of what it received."""

        key = self._file_key(path)
        options = self._options_from_config(config)

        self._client.upload_file(self._bucket, key, local_path, options, check_md5=True)
        log_event(
            logger,
            "oss.write_file",
            **object_log_fields(self._bucket, key, local_path=str(local_path)),
        )
        return self._written_entry(path, options, size=Path(local_path).stat().st_size)

    def _written_entry(self, path: str, options: Mapping[str, Any], *, size: int) -> FileEntry:
        entry = normalize_response(options, self._prefixer, path)
        return replace(entry, size=size)  # type: ignore[return-value]

    def update(
        self, path: str, contents: bytes | str, config: Mapping[str, Any] | None = None
    ) -> FileEntry:
        """Overwrite an object, keeping its ACL unless the caller sets one.

        Without ``visibility`` or ``ACL`` in ``config`` the current ACL is read and
        sent along with the new content. A missing object is written as private.
        """

        merged = dict(config or {})
        if "visibility" not in merged and "ACL" not in merged:
            merged["ACL"] = self._object_acl(path)
        return self.write(path, contents, merged)

    def update_stream(
        self, path: str, stream: BinaryIO, config: Mapping[str, Any] | None = None
    ) -> FileEntry:
        return self.update(path, stream.read(), config)

    def _object_acl(self, path: str) -> str:
        try:
            return visibility_to_acl(self.get_visibility(path).visibility)
        except ObjectNotFoundError:
            return ACL_PRIVATE

    # -- copy / move / delete ------------------------------------------------

    def copy(self, path: str, newpath: str) -> None:
        key = self.apply_prefix(path)
        new_key = self.apply_prefix(newpath)
        self._client.copy_object(self._bucket, key, self._bucket, new_key)
        log_event(logger, "oss.copy", bucket=self._bucket, key=key, new_key=new_key)

    def rename(self, path: str, newpath: str) -> None:
        """Copy then delete. Not atomic.

        A failed copy propagates without touching the source. A failed delete after
        a successful copy raises ``InconsistentStateError``: both objects remain.
        """

        self.copy(path, newpath)
        try:
            self.delete(path)
        except OssAdapterError as exc:
            log_event(
                logger,
                "oss.rename",
                level=logging.WARNING,
                bucket=self._bucket,
                path=path,
                newpath=newpath,
                status="source_not_deleted",
            )
            raise InconsistentStateError(
                f"Copied {path} to {newpath} but could not delete the source"
            ) from exc

    def delete(self, path: str) -> None:
        """Delete an object and confirm it is gone with a follow-up existence check."""

        key = self.apply_prefix(path)
        self._client.delete_object(self._bucket, key)
        if self.has(path):
            raise InconsistentStateError(f"Object still present after delete: {path}")
        log_event(logger, "oss.delete", **object_log_fields(self._bucket, key))

    def delete_dir(self, dirname: str) -> None:
        """Delete every object under ``dirname`` and then its directory marker.

        The marker is kept when any object could not be deleted.
        """

        dir_key = as_dir_key(self.apply_prefix(dirname))
        if not dir_key:
            raise ValueError("Refusing to delete the bucket root")

        listing = self._lister.list(dir_key, recursive=True)
        keys = [str(obj["Key"]) for obj in listing.objects if obj["Key"] != dir_key]
        if keys:
            failed = self._client.delete_objects(self._bucket, keys)
            if failed:
                log_event(
                    logger,
                    "oss.delete_dir",
                    level=logging.WARNING,
                    bucket=self._bucket,
                    prefix=dir_key,
                    status="partial",
                    failed=len(failed),
                )
                raise TransportError(
                    f"Failed to delete {len(failed)} of {len(keys)} objects under {dir_key}"
                )

        self._client.delete_object(self._bucket, dir_key)
        log_event(
            logger, "oss.delete_dir", bucket=self._bucket, prefix=dir_key, objects=len(keys)
        )

    def create_dir(self, dirname: str, config: Mapping[str, Any] | None = None) -> DirEntry:
        dir_key = as_dir_key(self.apply_prefix(dirname))
        if not dir_key:
            raise ValueError("dirname is required")
        options = self._options_from_config(config)
        self._client.create_object_dir(self._bucket, dir_key, options)
        log_event(logger, "oss.create_dir", **object_log_fields(self._bucket, dir_key))

        path = self.remove_prefix(dir_key).rstrip("/")
        return DirEntry(path=path, dirname=parent_dirname(path))

    # -- reads ---------------------------------------------------------------

    def has(self, path: str) -> bool:
        return self._client.object_exists(self._bucket, self.apply_prefix(path))

    def _read_object(self, path: str) -> tuple[FileEntry, object, str]:
        key = self.apply_prefix(path)
        response = self._client.get_object(self._bucket, key)
        metadata = {name: value for name, value in response.items() if name != "Body"}
        entry = normalize_response(metadata, self._prefixer, path)
        if not isinstance(entry, FileEntry):
            raise ObjectNotFoundError(f"Not a file: {path}")
        return entry, response.get("Body", b""), f"{self._bucket}/{key}"

    def read(self, path: str) -> ReadResult:
        entry, body, target = self._read_object(path)
        return ReadResult(entry=entry, contents=_read_all(body, target))

    def read_stream(self, path: str) -> StreamResult:
        """Return the object body as a stream positioned at offset zero."""

        entry, body, target = self._read_object(path)
        return StreamResult(entry=entry, stream=_rewindable(body, target))

    def list_contents(self, directory: str = "", recursive: bool = False) -> list[Entry]:
        """List entries under ``directory``.

        The listing is always recursive, whatever ``recursive`` says; callers relying
        on the host filesystem contract get every nested file plus the emulated
        directories above them.
        """

        key = self.apply_prefix(directory)
        list_prefix = as_dir_key(key) if directory.strip("/") else self._prefixer.prefix
        listing = self._lister.list(list_prefix, recursive=True)

        entries: list[Entry] = []
        for raw in listing.objects:
            entry = normalize_response(raw, self._prefixer)
            if not entry.path:
                continue
            entries.append(entry)
        return emulate_directories(entries)

    def get_metadata(self, path: str) -> Entry:
        key = self.apply_prefix(path)
        response = self._client.head_object(self._bucket, key)
        return normalize_response(response, self._prefixer, path)

    def get_size(self, path: str) -> int | None:
        entry = self.get_metadata(path)
        return entry.size if isinstance(entry, FileEntry) else None

    def get_mimetype(self, path: str) -> str | None:
        entry = self.get_metadata(path)
        return entry.mimetype if isinstance(entry, FileEntry) else None

    def get_timestamp(self, path: str) -> int | None:
        return self.get_metadata(path).timestamp

    # -- visibility ----------------------------------------------------------

    def get_visibility(self, path: str) -> VisibilityInfo:
        acl = self._client.get_object_acl(self._bucket, self.apply_prefix(path))
        return VisibilityInfo(path=path, visibility=acl_to_visibility(acl))

    def set_visibility(self, path: str, visibility: str) -> VisibilityInfo:
        key = self.apply_prefix(path)
        acl = visibility_to_acl(visibility)
        self._client.put_object_acl(self._bucket, key, acl)
        log_event(logger, "oss.set_visibility", **object_log_fields(self._bucket, key, acl=acl))
        return VisibilityInfo(path=path, visibility=acl_to_visibility(acl))

    # -- urls ----------------------------------------------------------------

    def _host(self) -> str:
        endpoint = self._client_config.endpoint.strip()
        parsed = urlsplit(endpoint)
        if parsed.scheme and parsed.netloc:
            endpoint = parsed.netloc
        endpoint = endpoint.rstrip("/")
        if self._client_config.is_cname:
            return self._domain or endpoint
        return f"{self._bucket}.{endpoint}"

    def get_url(self, path: str) -> str:
        """Public URL of an existing object.

        The URL path is the storage key, so a configured prefix is part of it:
        with prefix ``tenant`` the path ``a.png`` maps to ``.../tenant/a.png``.
        Raises ``ObjectNotFoundError`` when the object does not exist.
        """

        if not self.has(path):
            raise ObjectNotFoundError(f"{path} not found")
        scheme = "https" if self._client_config.ssl else "http"
        return f"{scheme}://{self._host()}/{self.apply_prefix(path)}"
