from __future__ import annotations
"""Data models representing store listings and copy requests."""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .filters import GlobSet


class ItemKind(Enum):
    OBJECT = "object"
    PREFIX = "prefix"


@dataclass(frozen=True)
class StoreItem:
    """One listed entry, either an object or a common prefix."""

    kind: ItemKind
    key: str
    size: int = -1
    etag: Optional[str] = None

    @classmethod
    def from_object(cls, entry: dict[str, Any]) -> "StoreItem":
        etag = entry.get("ETag")
        if etag is not None:
            etag = etag.strip('"') or None
        size = entry.get("Size")
        return cls(
            kind=ItemKind.OBJECT,
            key=(entry.get("Key") or "").lstrip("/"),
            size=-1 if size is None else int(size),
            etag=etag,
        )

    @classmethod
    def from_prefix(cls, entry: dict[str, Any]) -> "StoreItem":
        return cls.prefix(entry.get("Prefix") or "")

    @classmethod
    def prefix(cls, key: str) -> "StoreItem":
        return cls(kind=ItemKind.PREFIX, key=key.lstrip("/"), size=0)

    @property
    def is_prefix(self) -> bool:
        return self.kind is ItemKind.PREFIX


@dataclass
class ListOptions:
    """Options for a single listing request."""

    recursive: bool = False
    includes: Optional["GlobSet"] = None
    excludes: Optional["GlobSet"] = None
    continuation_token: Optional[str] = None


@dataclass
class ListResult:
    """One page of a listing."""

    prefixes: list[StoreItem] = field(default_factory=list)
    objects: list[StoreItem] = field(default_factory=list)
    next_continuation_token: Optional[str] = None


class ListInfo(Enum):
    WITH_INFO = "with_info"
    INFO_ONLY = "info_only"


class OverwriteMode(Enum):
    """Policy applied when a copy destination already exists."""

    WRITE = "write"
    SKIP = "skip"
    # Single-part etags only (plain MD5 of the content).
    ETAG = "etag"
    FAIL = "fail"

    @property
    def label(self) -> str:
        return _OVERWRITE_LABELS[self]

    @classmethod
    def parse(cls, value: str | "OverwriteMode" | None) -> "OverwriteMode":
        if value is None:
            return cls.SKIP
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(
            f"Invalid overwrite mode '{value}'. Must be 'write', 'skip', 'etag' or 'fail'"
        )


_OVERWRITE_LABELS = {
    OverwriteMode.WRITE: "Write",
    OverwriteMode.SKIP: "Exists",
    OverwriteMode.ETAG: "Etag",
    OverwriteMode.FAIL: "Fail",
}


@dataclass(frozen=True)
class CopyOptions:
    """Options for one ``cp`` invocation."""

    recursive: bool = False
    includes: Optional["GlobSet"] = None
    excludes: Optional["GlobSet"] = None
    overwrite_mode: OverwriteMode = OverwriteMode.SKIP
    show_skipped: bool = False
    # Content type used for files without an extension.
    content_type_for_extensionless: Optional[str] = None


@dataclass
class Credential:
    """Resolved access keys and location of the store."""

    key_id: str
    key_secret: str = field(repr=False)
    region: Optional[str] = None
    endpoint: Optional[str] = None


@dataclass(frozen=True)
class RegionProfile:
    region: Optional[str] = None
    profile: Optional[str] = None
