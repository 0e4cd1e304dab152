from __future__ import annotations
"""Upload and download of files and directory trees."""
import logging
import mimetypes
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from .bucket import S3Bucket
from .console import Reporter
from .errors import FilePathNotFoundError, NotSupportedError
from .filters import Inex, classify_inex
from .models import CopyOptions, ListOptions, OverwriteMode, StoreItem
from .overwrite import SItemsCache, validate_over_for_file_dest, validate_over_for_s3_dest
from .paths import (
    PathType,
    classify_path,
    compute_destination_key,
    compute_destination_path,
    get_file_name,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class TransferStats:
    """Outcome counts of one copy invocation."""

    uploaded: int = 0
    downloaded: int = 0
    skipped: int = 0
    excluded: int = 0


def guess_content_type(path: Path, extensionless: Optional[str] = None) -> str:
    if extensionless and not Path(path).suffix:
        return extensionless
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or DEFAULT_CONTENT_TYPE


def walk_files(root: Path, recursive: bool) -> Iterator[Path]:
    """Yield the regular files under ``root`` in a stable order."""

    for dirpath, dirnames, filenames in os.walk(root):
        if recursive:
            dirnames.sort()
        else:
            dirnames[:] = []
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file() and not path.is_symlink():
                yield path


class Copier:
    """Copies between the local filesystem and one bucket."""

    def __init__(
        self,
        bucket: S3Bucket,
        reporter: Reporter | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._bucket = bucket
        self._reporter = reporter or Reporter()
        self._chunk_size = max(int(chunk_size), 1)

    @property
    def bucket(self) -> S3Bucket:
        return self._bucket

    # -- Upload

    def upload_path(self, source: Path, destination_prefix: str, options: CopyOptions) -> TransferStats:
        """Upload a file, or the files of a directory, under ``destination_prefix``.

        Directories are only walked one level deep unless ``options.recursive``.
        """

        source = Path(source)
        stats = TransferStats()
        if source.is_symlink():
            raise FilePathNotFoundError(str(source))

        if source.is_file():
            key = compute_destination_key(None, source, destination_prefix, True)
            self._upload_file(source, key, options, stats)
        elif source.is_dir():
            cache = None
            if options.overwrite_mode is OverwriteMode.ETAG:
                cache = SItemsCache.load(self._bucket, destination_prefix)
            for file in walk_files(source, options.recursive):
                key = compute_destination_key(source, file, destination_prefix, False)
                self._upload_file(file, key, options, stats, cache)
        else:
            raise FilePathNotFoundError(str(source))
        return stats

    def _upload_file(
        self,
        source_file: Path,
        key: str,
        options: CopyOptions,
        stats: TransferStats,
        cache: Optional[SItemsCache] = None,
    ) -> None:
        if not source_file.is_file():
            raise RuntimeError(f"_upload_file expects a file, got '{source_file}'")

        if self._bucket.is_ignored_name(source_file.name):
            stats.skipped += 1
            if options.show_skipped:
                self._reporter.skipped("by default", str(source_file))
            return

        inex = classify_inex(key, options.includes, options.excludes)
        if inex is Inex.EXCLUDE_NOT_IN_INCLUDE:
            return
        if inex is Inex.EXCLUDE_IN_EXCLUDE:
            stats.excluded += 1
            self._reporter.excluded(str(source_file))
            return

        if not validate_over_for_s3_dest(self._bucket, key, source_file, options.overwrite_mode, cache):
            stats.skipped += 1
            if options.show_skipped:
                self._reporter.skipped(options.overwrite_mode.label, self._bucket.s3_url(key))
            return

        content_type = guess_content_type(source_file, options.content_type_for_extensionless)
        self._reporter.uploading(source_file, self._bucket.s3_url(key), content_type)
        with source_file.open("rb") as body:
            self._bucket.store.put_object(self._bucket.name, key, body, content_type)
        stats.uploaded += 1

    # -- Download

    def download_path(self, base_key: str, destination: Path, options: CopyOptions) -> TransferStats:
        """Download a key, or the keys under a prefix, to ``destination``."""

        destination = Path(destination)
        stats = TransferStats()
        source_type = classify_path(base_key)
        destination_type = classify_path(destination)

        if source_type is PathType.DIRECTORY and destination_type is PathType.FILE:
            raise NotSupportedError("S3 Dir to Path File")
        if options.overwrite_mode is OverwriteMode.ETAG:
            raise NotSupportedError("--over etag for downloads")

        if source_type is PathType.FILE:
            if destination_type is PathType.DIRECTORY:
                destination_file = destination / get_file_name(base_key)
            else:
                destination_file = destination
            destination_file.parent.mkdir(parents=True, exist_ok=True)
            self._download_file(base_key, destination_file, options, stats)
            return stats

        self._download_tree(base_key, destination, options, stats)
        return stats

    def _download_tree(self, base_key: str, destination: Path, options: CopyOptions, stats: TransferStats) -> None:
        # Folder by folder: one listing per prefix keeps every response to a
        # single directory level.
        seed = base_key if not base_key or base_key.endswith("/") else f"{base_key}/"
        pending: deque[StoreItem] = deque([StoreItem.prefix(seed)])
        created_dirs: set[Path] = set()

        while pending:
            prefix = pending.popleft()
            LOGGER.debug("Downloading prefix %s", self._bucket.s3_url(prefix.key))
            for page in self._bucket.list_pages(prefix.key, ListOptions(recursive=False)):
                for item in page.objects:
                    # Zero-byte folder markers.
                    if item.key.endswith("/"):
                        continue
                    destination_file = compute_destination_path(base_key, item.key, destination)
                    parent = destination_file.parent
                    if parent not in created_dirs:
                        parent.mkdir(parents=True, exist_ok=True)
                        created_dirs.add(parent)
                    self._download_file(item.key, destination_file, options, stats)
                if options.recursive:
                    pending.extend(page.prefixes)

    def _download_file(self, key: str, destination_file: Path, options: CopyOptions, stats: TransferStats) -> None:
        inex = classify_inex(key, options.includes, options.excludes)
        if inex is Inex.EXCLUDE_NOT_IN_INCLUDE:
            return
        if inex is Inex.EXCLUDE_IN_EXCLUDE:
            stats.excluded += 1
            self._reporter.excluded(self._bucket.s3_url(key))
            return

        if not validate_over_for_file_dest(destination_file, options.overwrite_mode):
            stats.skipped += 1
            if options.show_skipped:
                self._reporter.skipped(options.overwrite_mode.label, str(destination_file))
            return

        self._reporter.downloading(self._bucket.s3_url(key), destination_file)
        body = self._bucket.store.get_object(self._bucket.name, key)
        try:
            with destination_file.open("wb") as handle:
                for chunk in body.iter_chunks(self._chunk_size):
                    handle.write(chunk)
                handle.flush()
        finally:
            close = getattr(body, "close", None)
            if close is not None:
                close()
        stats.downloaded += 1
