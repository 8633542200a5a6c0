from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable

from ossfs_core.models import DELIMITER, DirEntry, Entry

_REPEATED_DELIMITERS = re.compile(r"/{2,}")


def normalize_prefix(prefix: str | None) -> str:
    """Normalize a key prefix to ``"<segments>/"``, or ``""`` when empty.

    - Leading and trailing slashes are ignored: ``/tenant`` and ``tenant/`` are equal.
    - Repeated slashes inside the prefix collapse to one.
    """

    value = (prefix or "").strip().strip(DELIMITER)
    if not value:
        return ""
    return _REPEATED_DELIMITERS.sub(DELIMITER, value) + DELIMITER


def normalize_path(path: str | None) -> str:
    """Drop leading slashes and collapse repeated ones; a trailing slash is kept."""

    value = (path or "").lstrip(DELIMITER)
    return _REPEATED_DELIMITERS.sub(DELIMITER, value)


def dirname(path: str) -> str:
    """Return the parent directory of ``path``, ``""`` at root."""

    parent = posixpath.dirname(path.rstrip(DELIMITER))
    return "" if parent in {"", ".", DELIMITER} else parent


def is_dir_key(key: str) -> bool:
    return key.endswith(DELIMITER)


def as_dir_key(key: str) -> str:
    stripped = key.rstrip(DELIMITER)
    return stripped + DELIMITER if stripped else ""


class PathPrefixer:
    """Translate logical paths to storage keys and back for a fixed prefix."""

    def __init__(self, prefix: str | None = "") -> None:
        self._prefix = normalize_prefix(prefix)

    @property
    def prefix(self) -> str:
        return self._prefix

    def apply_prefix(self, path: str) -> str:
        return self._prefix + normalize_path(path)

    def remove_prefix(self, key: str) -> str:
        """Strip the prefix from ``key``; ``""`` when ``key`` lies outside of it."""

        if not key.startswith(self._prefix):
            return ""
        return key[len(self._prefix) :]

    def __repr__(self) -> str:
        return f"PathPrefixer(prefix={self._prefix!r})"


def emulate_directories(entries: Iterable[Entry]) -> list[Entry]:
    """Append a ``DirEntry`` for every ancestor implied but not listed.

    Ancestors are collected from each entry's ``dirname`` upwards, in first
    encounter order, and only added when no listed directory has the same path.
    """

    listing = list(entries)
    implied: list[str] = []
    seen: set[str] = set()
    listed: set[str] = set()
    for entry in listing:
        if entry.type == "dir":
            listed.add(entry.path)
        parent = entry.dirname
        while parent and parent not in seen:
            seen.add(parent)
            implied.append(parent)
            parent = dirname(parent)

    for directory in implied:
        if directory in listed:
            continue
        listing.append(DirEntry(path=directory, dirname=dirname(directory)))
    return listing
