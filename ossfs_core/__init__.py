"""Stable public imports for `ossfs_core`.

Prefer importing from these symbols when wiring the adapter into an application.
Lower-level utilities should be imported from their submodules explicitly.
"""

from ossfs_core.adapter import OssAdapter
from ossfs_core.api import adapter_from_env, adapter_from_yaml, create_adapter
from ossfs_core.errors import (
    InconsistentStateError,
    ObjectNotFoundError,
    OssAdapterError,
    TransportError,
)
from ossfs_core.io.paths import PathPrefixer
from ossfs_core.listing import DirectoryLister
from ossfs_core.models import (
    DirectoryListing,
    DirEntry,
    FileEntry,
    ReadResult,
    StreamResult,
    VisibilityInfo,
)
from ossfs_core.normalize import normalize_response
from ossfs_core.settings import (
    OssClientConfig,
    OssDiskConfig,
    load_disk_config,
    resolve_oss_settings,
)
from ossfs_core.store import Boto3OssClient, ObjectStorageClient

__all__ = [
    "Boto3OssClient",
    "DirEntry",
    "DirectoryLister",
    "DirectoryListing",
    "FileEntry",
    "InconsistentStateError",
    "ObjectNotFoundError",
    "ObjectStorageClient",
    "OssAdapter",
    "OssAdapterError",
    "OssClientConfig",
    "OssDiskConfig",
    "PathPrefixer",
    "ReadResult",
    "StreamResult",
    "TransportError",
    "VisibilityInfo",
    "adapter_from_env",
    "adapter_from_yaml",
    "create_adapter",
    "load_disk_config",
    "normalize_response",
    "resolve_oss_settings",
]
