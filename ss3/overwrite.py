from __future__ import annotations
"""Decide whether a copy may replace its destination."""
import hashlib
import logging
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional

from .bucket import S3Bucket
from .errors import FileExistsOverFailError, NotSupportedError, ObjectExistsError
from .models import ListOptions, OverwriteMode, StoreItem

LOGGER = logging.getLogger(__name__)

MD5_CHUNK_SIZE = 64 * 1024


def compute_md5(path: Path, chunk_size: int = MD5_CHUNK_SIZE) -> str:
    """Whole-file MD5, the etag of an object uploaded in a single part."""

    digest = hashlib.md5()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


class SItemsCache(Mapping[str, StoreItem]):
    """Point-in-time snapshot of the objects under a prefix, keyed by key."""

    def __init__(self, items: Iterable[StoreItem] = ()):
        self._items = {item.key: item for item in items}

    @classmethod
    def load(cls, bucket: S3Bucket, prefix: str) -> "SItemsCache":
        items = bucket.list_all(prefix, ListOptions(recursive=True))
        LOGGER.debug("Cached %d item(s) under %s", len(items), bucket.s3_url(prefix))
        return cls(items)

    def __getitem__(self, key: str) -> StoreItem:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


def validate_over_for_s3_dest(
    bucket: S3Bucket,
    key: str,
    source_file: Path,
    mode: OverwriteMode,
    cache: Optional[SItemsCache] = None,
) -> bool:
    """Return whether ``source_file`` should be uploaded to ``key``."""

    if mode is OverwriteMode.WRITE:
        return True
    if mode is OverwriteMode.SKIP:
        return not bucket.exists(key)
    if mode is OverwriteMode.ETAG:
        return not has_same_etag(bucket, key, source_file, cache)
    if bucket.exists(key):
        raise ObjectExistsError(bucket.s3_url(key))
    return True


def validate_over_for_file_dest(path: Path, mode: OverwriteMode) -> bool:
    """Return whether a download may write ``path``."""

    if mode is OverwriteMode.WRITE:
        return True
    if mode is OverwriteMode.SKIP:
        return not Path(path).exists()
    if mode is OverwriteMode.ETAG:
        raise NotSupportedError("--over etag for downloads")
    if Path(path).exists():
        raise FileExistsOverFailError(str(path))
    return True


def has_same_etag(
    bucket: S3Bucket,
    key: str,
    source_file: Path,
    cache: Optional[SItemsCache] = None,
) -> bool:
    """True when the object exists with an etag equal to the file's MD5."""

    # The cache covers the whole destination prefix, a miss means no object.
    if cache is not None:
        item = cache.get(key)
    else:
        item = bucket.get_item(key)
    if item is None or not item.etag:
        return False
    try:
        file_etag = compute_md5(source_file)
    except OSError as exc:
        LOGGER.debug("Cannot hash %s: %s", source_file, exc)
        return False
    return file_etag == item.etag
