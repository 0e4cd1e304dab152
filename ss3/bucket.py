from __future__ import annotations
"""Bucket-scoped operations: listing, lookups and deletes."""
import logging
from typing import Iterable, Iterator, Optional

from .filters import is_included
from .models import ListOptions, ListResult, StoreItem
from .store import ObjectStore

LOGGER = logging.getLogger(__name__)

DEFAULT_IGNORE_UPLOAD_NAMES = frozenset({".DS_Store"})


class S3Bucket:
    """Operations against a single bucket of an :class:`ObjectStore`."""

    def __init__(
        self,
        store: ObjectStore,
        name: str,
        ignore_upload_names: Optional[Iterable[str]] = DEFAULT_IGNORE_UPLOAD_NAMES,
    ):
        self._store = store
        self.name = name
        self.ignore_upload_names = frozenset(ignore_upload_names or ())

    @property
    def store(self) -> ObjectStore:
        return self._store

    def s3_url(self, key: str) -> str:
        return f"s3://{self.name}/{key}"

    def is_ignored_name(self, file_name: str) -> bool:
        return file_name in self.ignore_upload_names

    def list(self, prefix: str, options: ListOptions) -> ListResult:
        """Return one page of the listing under ``prefix``.

        A non-recursive listing groups deeper keys into prefixes with the
        ``/`` delimiter. Entries rejected by the include/exclude rules are
        left out of the result.
        """

        response = self._store.list_objects(
            self.name,
            prefix,
            delimiter=None if options.recursive else "/",
            continuation_token=options.continuation_token,
        )

        prefixes = [
            StoreItem.from_prefix(entry)
            for entry in response.get("CommonPrefixes") or []
            if entry.get("Prefix") and is_included(entry["Prefix"], options.includes, options.excludes)
        ]
        objects = [
            StoreItem.from_object(entry)
            for entry in response.get("Contents") or []
            if entry.get("Key") and is_included(entry["Key"], options.includes, options.excludes)
        ]

        next_token = response.get("NextContinuationToken")
        if not response.get("IsTruncated", next_token is not None):
            next_token = None
        return ListResult(prefixes=prefixes, objects=objects, next_continuation_token=next_token)

    def list_pages(self, prefix: str, options: ListOptions) -> Iterator[ListResult]:
        """Yield every page under ``prefix``, starting at ``options.continuation_token``."""

        token = options.continuation_token
        while True:
            page = self.list(
                prefix,
                ListOptions(
                    recursive=options.recursive,
                    includes=options.includes,
                    excludes=options.excludes,
                    continuation_token=token,
                ),
            )
            yield page
            token = page.next_continuation_token
            if token is None:
                break

    def list_all(self, prefix: str, options: ListOptions) -> list[StoreItem]:
        objects: list[StoreItem] = []
        for page in self.list_pages(prefix, options):
            objects.extend(page.objects)
        return objects

    def exists(self, key: str) -> bool:
        return self._store.head_object(self.name, key)

    def get_item(self, key: str) -> Optional[StoreItem]:
        """Look up a single object, ``None`` when it does not exist."""

        response = self._store.list_objects(self.name, key, max_keys=1)
        for entry in response.get("Contents") or []:
            if entry.get("Key") == key:
                return StoreItem.from_object(entry)
        return None

    def delete_object(self, key: str) -> None:
        LOGGER.debug("Deleting %s", self.s3_url(key))
        self._store.delete_object(self.name, key)
