from __future__ import annotations
"""Find and remove remote objects that no longer have a local file."""
import logging
from pathlib import Path
from typing import Iterable

from .bucket import S3Bucket
from .console import Reporter
from .errors import FilePathNotFoundError
from .models import ListOptions
from .paths import compute_destination_key
from .transfer import walk_files

LOGGER = logging.getLogger(__name__)


def plan_clean(bucket: S3Bucket, local_dir: Path, base_key: str) -> list[str]:
    """Return the keys under ``base_key`` that an upload of ``local_dir`` would not produce.

    Only the first listing page is considered.
    """

    local_dir = Path(local_dir)
    if not local_dir.is_dir():
        raise FilePathNotFoundError(str(local_dir))

    # "p" must not match the sibling keys "p2/..." or "p.bak".
    list_prefix = base_key if not base_key or base_key.endswith("/") else f"{base_key}/"
    remote = bucket.list(list_prefix, ListOptions(recursive=True)).objects
    LOGGER.debug("Clean considers %d remote object(s) under %s", len(remote), bucket.s3_url(list_prefix))

    target_keys = {
        compute_destination_key(local_dir, file, base_key, False)
        for file in walk_files(local_dir, recursive=True)
        if not bucket.is_ignored_name(file.name)
    }
    return [item.key for item in remote if item.key not in target_keys]


def clean(bucket: S3Bucket, keys: Iterable[str], reporter: Reporter | None = None) -> int:
    """Delete ``keys`` one at a time and return how many were deleted."""

    reporter = reporter or Reporter()
    deleted = 0
    for key in keys:
        bucket.delete_object(key)
        reporter.deleted(bucket.s3_url(key))
        deleted += 1
    return deleted
