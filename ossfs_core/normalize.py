from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ossfs_core.io.paths import PathPrefixer, dirname, is_dir_key
from ossfs_core.io.time import to_timestamp
from ossfs_core.models import DELIMITER, DirEntry, Entry, FileEntry

# Raw response field -> normalized field. Later names win when both are present.
RESULT_MAP: Mapping[str, str] = {
    "Size": "size",
    "ContentLength": "size",
    "ContentType": "mimetype",
    "StorageClass": "storage_class",
}


def resolve_path(
    response: Mapping[str, Any], prefixer: PathPrefixer, path: str | None = None
) -> str:
    """Pick the logical path for a raw response.

    Order: explicit ``path``, then the prefix-stripped ``Key``, then the
    prefix-stripped ``Prefix`` (directory-only listing entries carry no key).
    """

    if path:
        return path
    key = response.get("Key")
    if key is not None:
        return prefixer.remove_prefix(str(key))
    return prefixer.remove_prefix(str(response.get("Prefix") or ""))


def _coerce_size(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def normalize_response(
    response: Mapping[str, Any], prefixer: PathPrefixer, path: str | None = None
) -> Entry:
    """Convert a raw object-storage mapping into a ``FileEntry`` or ``DirEntry``.

    Directory records stay minimal: file-only fields are not copied over.
    """

    resolved = resolve_path(response, prefixer, path)
    timestamp = to_timestamp(response.get("LastModified"))

    if is_dir_key(resolved):
        trimmed = resolved.rstrip(DELIMITER)
        return DirEntry(path=trimmed, dirname=dirname(trimmed), timestamp=timestamp)

    fields: dict[str, Any] = {}
    for raw_name, name in RESULT_MAP.items():
        if raw_name in response and response[raw_name] is not None:
            fields[name] = response[raw_name]

    return FileEntry(
        path=resolved,
        dirname=dirname(resolved),
        timestamp=timestamp,
        size=_coerce_size(fields.get("size")),
        mimetype=fields.get("mimetype"),
        storage_class=fields.get("storage_class"),
    )
