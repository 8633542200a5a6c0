from __future__ import annotations

import base64
import hashlib
import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ossfs_core.errors import ObjectNotFoundError, TransportError
from ossfs_core.models import ACL_PRIVATE, ACL_PUBLIC_READ, ListObjectsPage
from ossfs_core.settings import OssClientConfig
from ossfs_core.store.client import ObjectStorageClient

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"
_PUBLIC_PERMISSIONS = {"READ", "FULL_CONTROL"}
_DELETE_BATCH_SIZE = 1000
_MD5_CHUNK_SIZE = 1024 * 1024


def _batched(values: Iterable[str], *, size: int = _DELETE_BATCH_SIZE) -> Iterable[list[str]]:
    batch: list[str] = []
    for value in values:
        batch.append(value)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def _error_code(exc: ClientError) -> str:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error") or {}
    return str(error.get("Code") or "")


@contextmanager
def _client_errors(operation: str, bucket: str, key: str = "") -> Iterator[None]:
    """Translate botocore failures into the ossfs_core error taxonomy."""

    target = f"{bucket}/{key}" if key else bucket
    try:
        yield
    except ClientError as exc:
        if _error_code(exc) in _NOT_FOUND_CODES:
            raise ObjectNotFoundError(f"Object not found: {target}") from exc
        raise TransportError(f"{operation} failed for {target}: {exc}") from exc
    except BotoCoreError as exc:
        raise TransportError(f"{operation} failed for {target}: {exc}") from exc


def _file_md5(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_MD5_CHUNK_SIZE), b""):
            digest.update(chunk)
    return base64.b64encode(digest.digest()).decode("ascii")


def endpoint_url(config: OssClientConfig) -> str:
    endpoint = config.endpoint.strip()
    if "://" in endpoint:
        return endpoint
    scheme = "https" if config.ssl else "http"
    return f"{scheme}://{endpoint}"


def _cname_path_rewriter(bucket: str):  # noqa: ANN202
    """Drop the ``/<bucket>`` path segment: on a custom domain the host implies the bucket."""

    marker = f"/{bucket}"

    def _rewrite(request, **_: Any) -> None:  # noqa: ANN001
        parts = urlsplit(request.url)
        path = parts.path
        if path != marker and not path.startswith(marker + "/"):
            return
        request.url = urlunsplit(parts._replace(path=path[len(marker) :] or "/"))

    return _rewrite


def build_boto3_client(config: OssClientConfig, *, bucket: str | None = None) -> Any:
    """Create a boto3 S3 client for the OSS S3-compatible endpoint.

    Timeouts and retry counts are configured once here and apply to every call.
    ``max_retries`` counts total tries, the first attempt included.
    """

    proxies = None
    if config.request_proxy:
        proxies = {"http": config.request_proxy, "https": config.request_proxy}

    boto_config = Config(
        connect_timeout=config.connect_timeout,
        read_timeout=config.timeout,
        retries={"total_max_attempts": max(1, config.max_retries), "mode": "standard"},
        proxies=proxies,
        s3={"addressing_style": "path" if config.is_cname else "virtual"},
    )
    client = boto3.client(
        "s3",
        endpoint_url=endpoint_url(config),
        aws_access_key_id=config.key,
        aws_secret_access_key=config.secret,
        aws_session_token=config.security_token,
        region_name=config.region,
        use_ssl=config.ssl,
        config=boto_config,
    )
    if config.is_cname and bucket:
        client.meta.events.register("before-sign.s3", _cname_path_rewriter(bucket))
    return client


class Boto3OssClient(ObjectStorageClient):
    """ObjectStorageClient backed by boto3 (OSS S3-compatible API, MinIO, S3)."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: OssClientConfig, *, bucket: str | None = None) -> Boto3OssClient:
        return cls(build_boto3_client(config, bucket=bucket))

    def put_object(
        self, bucket: str, key: str, body: bytes, options: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        with _client_errors("put_object", bucket, key):
            return self._client.put_object(Bucket=bucket, Key=key, Body=body, **dict(options))

    def upload_file(
        self,
        bucket: str,
        key: str,
        local_path: str | Path,
        options: Mapping[str, Any],
        *,
        check_md5: bool = True,
    ) -> Mapping[str, Any]:
        path = Path(local_path)
        kwargs: dict[str, Any] = dict(options)
        if check_md5:
            kwargs["ContentMD5"] = _file_md5(path)
        with _client_errors("upload_file", bucket, key), path.open("rb") as handle:
            return self._client.put_object(Bucket=bucket, Key=key, Body=handle, **kwargs)

    def get_object(self, bucket: str, key: str) -> Mapping[str, Any]:
        with _client_errors("get_object", bucket, key):
            return self._client.get_object(Bucket=bucket, Key=key)

    def get_object_acl(self, bucket: str, key: str) -> str:
        with _client_errors("get_object_acl", bucket, key):
            response = self._client.get_object_acl(Bucket=bucket, Key=key)
        for grant in response.get("Grants", []) or []:
            grantee = grant.get("Grantee") or {}
            if grantee.get("URI") == _ALL_USERS_URI and grant.get("Permission") in _PUBLIC_PERMISSIONS:
                return ACL_PUBLIC_READ
        return ACL_PRIVATE

    def put_object_acl(self, bucket: str, key: str, acl: str) -> None:
        with _client_errors("put_object_acl", bucket, key):
            self._client.put_object_acl(Bucket=bucket, Key=key, ACL=acl)

    def copy_object(self, from_bucket: str, from_key: str, to_bucket: str, to_key: str) -> None:
        with _client_errors("copy_object", from_bucket, from_key):
            self._client.copy_object(
                Bucket=to_bucket,
                Key=to_key,
                CopySource={"Bucket": from_bucket, "Key": from_key},
            )

    def delete_object(self, bucket: str, key: str) -> None:
        with _client_errors("delete_object", bucket, key):
            self._client.delete_object(Bucket=bucket, Key=key)

    def delete_objects(self, bucket: str, keys: list[str]) -> list[str]:
        failed: list[str] = []
        for batch in _batched(keys):
            with _client_errors("delete_objects", bucket):
                response = self._client.delete_objects(
                    Bucket=bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            for error in response.get("Errors", []) or []:
                logger.warning(
                    "delete_objects failed key=%s code=%s", error.get("Key"), error.get("Code")
                )
                failed.append(str(error.get("Key")))
        return failed

    def list_objects(
        self,
        bucket: str,
        *,
        prefix: str = "",
        delimiter: str = "/",
        marker: str = "",
        max_keys: int = 1000,
    ) -> ListObjectsPage:
        kwargs: dict[str, Any] = {
            "Bucket": bucket,
            "Prefix": prefix,
            "Delimiter": delimiter,
            "MaxKeys": max_keys,
        }
        if marker:
            kwargs["Marker"] = marker
        with _client_errors("list_objects", bucket, prefix):
            response = self._client.list_objects(**kwargs)

        objects = [dict(item) for item in response.get("Contents", []) or []]
        prefixes = [
            str(item["Prefix"])
            for item in response.get("CommonPrefixes", []) or []
            if item.get("Prefix")
        ]

        next_marker = ""
        if response.get("IsTruncated"):
            # NextMarker is only guaranteed when a delimiter is sent; fall back to the
            # greatest key or prefix of this page.
            candidates = [obj["Key"] for obj in objects] + prefixes
            next_marker = str(response.get("NextMarker") or (max(candidates) if candidates else ""))
        return ListObjectsPage(objects=objects, prefixes=prefixes, next_marker=next_marker)

    def head_object(self, bucket: str, key: str) -> Mapping[str, Any]:
        with _client_errors("head_object", bucket, key):
            return self._client.head_object(Bucket=bucket, Key=key)

    def create_object_dir(self, bucket: str, key: str, options: Mapping[str, Any]) -> None:
        with _client_errors("create_object_dir", bucket, key):
            self._client.put_object(Bucket=bucket, Key=key, Body=b"", **dict(options))

    def object_exists(self, bucket: str, key: str) -> bool:
        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return False
            raise TransportError(f"object_exists failed for {bucket}/{key}: {exc}") from exc
        except BotoCoreError as exc:
            raise TransportError(f"object_exists failed for {bucket}/{key}: {exc}") from exc
        return True

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
