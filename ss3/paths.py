from __future__ import annotations
"""Mapping between local file paths and object store keys."""
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from .errors import InvalidPathError, InvalidS3UrlError

S3_SCHEME = "s3://"
_S3_URL_RX = re.compile(r"^s3://([^:/\s]+)(.*)$")


class PathType(Enum):
    FILE = "file"
    DIRECTORY = "directory"


def classify_path(path: Union[str, os.PathLike]) -> PathType:
    """Classify a local path or a key by its extension only.

    Nothing is looked up on disk or in the store: a download target may not
    exist yet and a prefix has no directory entry.
    """

    if PurePosixPath(os.fspath(path)).suffix:
        return PathType.FILE
    return PathType.DIRECTORY


def get_file_name(path: Union[str, os.PathLike]) -> str:
    name = PurePosixPath(os.fspath(path)).name
    if not name:
        raise InvalidPathError(os.fspath(path))
    return name


def compute_destination_key(
    base_dir: Optional[Path],
    source_file: Path,
    destination_prefix: str,
    renamable: bool,
) -> str:
    """Return the key ``source_file`` is uploaded to.

    When ``renamable`` is set and ``destination_prefix`` carries the same
    extension as the file (case-insensitive), the prefix is the full target
    key. Otherwise the path of the file relative to ``base_dir`` (or just its
    name) is joined onto the prefix.
    """

    source_file = Path(source_file)
    file_name = source_file.name
    if not file_name:
        raise InvalidPathError(str(source_file))

    if renamable and _same_extension(source_file.name, destination_prefix):
        return _validate_key(destination_prefix.lstrip("/"))

    if base_dir is None:
        relative = PurePosixPath(file_name)
    else:
        relative = PurePosixPath(Path(os.path.relpath(source_file, base_dir)).as_posix())

    if destination_prefix:
        key = PurePosixPath(destination_prefix) / relative
    else:
        key = relative
    return _validate_key(key.as_posix().lstrip("/"))


def compute_destination_path(base_key: str, object_key: str, base_dir: Path) -> Path:
    """Return the local file an object under ``base_key`` is downloaded to."""

    if not object_key.startswith(base_key):
        raise RuntimeError(
            f"compute_destination_path - base key '{base_key}' is not the base for object key '{object_key}'"
        )
    relative = object_key[len(base_key):].lstrip("/")
    # The result must stay under base_dir.
    if ".." in PurePosixPath(relative).parts:
        raise InvalidPathError(object_key)
    return Path(base_dir) / relative


def _same_extension(file_name: str, destination: str) -> bool:
    source_ext = PurePosixPath(file_name).suffix.lower()
    destination_ext = PurePosixPath(destination).suffix.lower()
    return bool(source_ext) and source_ext == destination_ext


def _validate_key(key: str) -> str:
    try:
        key.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidPathError(key.encode("utf-8", "surrogateescape").decode("utf-8", "replace")) from None
    return key


@dataclass(frozen=True)
class S3Url:
    """``s3://bucket/key`` location."""

    bucket: str
    key: str = ""

    @classmethod
    def parse(cls, url: str) -> "S3Url":
        match = _S3_URL_RX.match(url.strip())
        if not match:
            raise InvalidS3UrlError(url)
        return cls(bucket=match.group(1), key=match.group(2).lstrip("/"))

    def __str__(self) -> str:
        return f"{S3_SCHEME}{self.bucket}/{self.key}"


def parse_location(value: str) -> Union[S3Url, Path]:
    """Return an :class:`S3Url` for ``s3://`` values, a local path otherwise."""

    if value.startswith(S3_SCHEME):
        return S3Url.parse(value)
    return Path(value)
