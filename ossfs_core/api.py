from __future__ import annotations

import logging
from pathlib import Path

from ossfs_core.adapter import OssAdapter
from ossfs_core.observability import log_event
from ossfs_core.settings import OssDiskConfig, load_disk_config, resolve_oss_settings
from ossfs_core.store.client import ObjectStorageClient

logger = logging.getLogger(__name__)


def create_adapter(
    config: OssDiskConfig, *, client: ObjectStorageClient | None = None
) -> OssAdapter:
    """Build an ``OssAdapter`` for one configured disk.

    ``client`` overrides the boto3 client built from ``config.client``.
    """

    adapter = OssAdapter(
        config.client,
        config.bucket,
        prefix=config.prefix,
        domain=config.domain,
        options=config.options,
        client=client,
    )
    log_event(
        logger,
        "oss.create_adapter",
        bucket=config.bucket,
        prefix=adapter.prefixer.prefix,
        endpoint=config.client.endpoint,
        is_cname=config.client.is_cname,
        ssl=config.client.ssl,
    )
    return adapter


def adapter_from_env(
    env: dict[str, str] | None = None, *, client: ObjectStorageClient | None = None
) -> OssAdapter:
    return create_adapter(resolve_oss_settings(env), client=client)


def adapter_from_yaml(
    path: str | Path, disk: str = "oss", *, client: ObjectStorageClient | None = None
) -> OssAdapter:
    return create_adapter(load_disk_config(path, disk), client=client)
