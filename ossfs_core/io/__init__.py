"""Path translation and timestamp helpers."""

from ossfs_core.io.paths import (
    PathPrefixer,
    as_dir_key,
    dirname,
    emulate_directories,
    is_dir_key,
    normalize_path,
    normalize_prefix,
)
from ossfs_core.io.time import to_timestamp

__all__ = [
    "PathPrefixer",
    "as_dir_key",
    "dirname",
    "emulate_directories",
    "is_dir_key",
    "normalize_path",
    "normalize_prefix",
    "to_timestamp",
]
