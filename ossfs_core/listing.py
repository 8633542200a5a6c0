from __future__ import annotations

import logging

from ossfs_core.models import DELIMITER, DirectoryListing
from ossfs_core.observability import log_event
from ossfs_core.store.client import ObjectStorageClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 1000


class DirectoryLister:
    """Emulate directory listings over a flat, paginated key namespace."""

    def __init__(
        self, client: ObjectStorageClient, bucket: str, *, max_keys: int = DEFAULT_MAX_KEYS
    ) -> None:
        if max_keys < 1:
            raise ValueError("max_keys must be >= 1")
        self._client = client
        self._bucket = bucket
        self._max_keys = max_keys

    def _list_level(self, prefix: str) -> tuple[list[dict[str, object]], list[str]]:
        """Page through one level until the continuation marker runs out."""

        objects: list[dict[str, object]] = []
        prefixes: list[str] = []
        marker = ""
        pages = 0
        while True:
            page = self._client.list_objects(
                self._bucket,
                prefix=prefix,
                delimiter=DELIMITER,
                marker=marker,
                max_keys=self._max_keys,
            )
            pages += 1
            for raw in page.objects:
                entry = dict(raw)
                entry["Prefix"] = prefix
                objects.append(entry)
            prefixes.extend(page.prefixes)

            marker = page.next_marker
            if not marker:
                break

        logger.debug(
            "listed level bucket=%s prefix=%s pages=%d objects=%d prefixes=%d",
            self._bucket,
            prefix,
            pages,
            len(objects),
            len(prefixes),
        )
        return objects, prefixes

    def list(self, prefix: str = "", recursive: bool = False) -> DirectoryListing:
        """List ``prefix``; with ``recursive`` expand every common prefix depth first.

        Client errors propagate: a partial listing is never returned.
        """

        objects, prefixes = self._list_level(prefix)
        result = DirectoryListing(objects=objects, prefixes=list(prefixes))

        if recursive:
            stack = list(reversed(prefixes))
            while stack:
                sub_prefix = stack.pop()
                sub_objects, sub_prefixes = self._list_level(sub_prefix)
                result.objects.extend(sub_objects)
                stack.extend(reversed(sub_prefixes))

        log_event(
            logger,
            "oss.list",
            level=logging.DEBUG,
            bucket=self._bucket,
            prefix=prefix,
            recursive=recursive,
            objects=len(result.objects),
            prefixes=len(result.prefixes),
        )
        return result
